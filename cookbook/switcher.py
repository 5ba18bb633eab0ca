import enum
import html
import logging
from typing import Callable, Dict, Optional

from bs4 import Tag

from .config import LANGUAGE_KEY, SOURCE_LANGUAGE
from .dom import Page
from .errors import ElementNotFound

logger = logging.getLogger(__name__)

HEADER_SELECTOR = "header .container"


class MenuState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"


class LanguageSwitcher:
    """Language menu: closed <-> open, selecting a language closes it and commits.

    ``preferences`` is any object with ``get(key)`` / ``set(key, value)``.
    Without a registered pipeline a commit falls back to ``reload(language)``.
    With ``link_for`` the options are links to per-language pages instead of a form.
    """

    def __init__(self, preferences, languages: Dict[str, str], pipeline=None,
                 reload: Optional[Callable[[str], object]] = None,
                 default_language: str = SOURCE_LANGUAGE,
                 link_for: Optional[Callable[[str], str]] = None):
        self.preferences = preferences
        self.languages = languages
        self.pipeline = pipeline
        self.reload = reload
        self.link_for = link_for
        self.state = MenuState.CLOSED
        saved = preferences.get(LANGUAGE_KEY)
        self.current = saved if saved in languages else default_language

    @property
    def is_open(self) -> bool:
        return self.state is MenuState.OPEN

    def register(self, pipeline) -> None:
        self.pipeline = pipeline

    def toggle(self) -> MenuState:
        self.state = MenuState.CLOSED if self.is_open else MenuState.OPEN
        return self.state

    def outside_click(self) -> MenuState:
        self.state = MenuState.CLOSED
        return self.state

    def select(self, language: str):
        if language not in self.languages:
            logger.warning(f"Unsupported language: {language}")
            return None
        self.state = MenuState.CLOSED
        return self.commit(language)

    def commit(self, language: str):
        self.current = language
        self.preferences.set(LANGUAGE_KEY, language)
        if self.pipeline is not None:
            self.pipeline.clear_cache()
            return self.pipeline.change_language(language)
        if self.reload is not None:
            logger.info(f"No translation pipeline registered, reloading in {language}")
            return self.reload(language)
        logger.warning("No translation pipeline or reload handler registered")
        return None

    def markup(self) -> str:
        if self.link_for is not None:
            # Static pages: plain links to the other language copies, menu always shown
            options = "".join(
                f'<a class="lang-option{" active" if code == self.current else ""}" '
                f'data-lang="{html.escape(code)}" href="{html.escape(self.link_for(code))}">'
                f'{html.escape(name)}</a>'
                for code, name in self.languages.items()
            )
            menu = f'<div id="language-menu" class="language-menu show">{options}</div>'
        else:
            options = "".join(
                f'<button class="lang-option{" active" if code == self.current else ""}" '
                f'data-lang="{html.escape(code)}" type="submit" name="lang" value="{html.escape(code)}">'
                f'{html.escape(name)}</button>'
                for code, name in self.languages.items()
            )
            menu_class = "language-menu show" if self.is_open else "language-menu"
            menu = f'<form id="language-menu" class="{menu_class}" method="post" action="/language">{options}</form>'
        return (
            '<div class="language-switcher">'
            '<button id="language-toggle" class="language-toggle" type="button" aria-label="Change language">'
            f'<span class="current-lang">{html.escape(self.languages.get(self.current, self.current))}</span>'
            '<span class="toggle-icon">🌍</span>'
            '</button>'
            f'{menu}'
            '</div>'
        )

    def install(self, page: Page) -> Optional[Tag]:
        """Insert the switcher into the page header; returns None when there is no header."""
        try:
            header = page.require(HEADER_SELECTOR)
        except ElementNotFound as e:
            logger.error(f"Language switcher not installed: {e}")
            return None
        for existing in page.select(".language-switcher"):
            page.remove(existing)
        added = page.append(header, self.markup())
        return next((node for node in added if isinstance(node, Tag)), None)
