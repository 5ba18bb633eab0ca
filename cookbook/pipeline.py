import logging
from typing import Optional

from .batch import ContentTranslator
from .dom import Page
from .renderer import PageRenderer
from .store import TranslationStore
from .watcher import MutationWatcher

logger = logging.getLogger(__name__)


class TranslationPipeline:
    """Store, renderer and watcher bound to one page."""

    def __init__(self, store: TranslationStore, renderer: PageRenderer, watcher: MutationWatcher,
                 content: Optional[ContentTranslator] = None):
        self.store = store
        self.renderer = renderer
        self.watcher = watcher
        self.content = content
        self.page: Optional[Page] = None

    @property
    def language(self) -> str:
        return self.renderer.language

    def attach(self, page: Page) -> None:
        self.page = page
        self.watcher.observe(page)

    def clear_cache(self) -> None:
        self.store.clear()
        if self.content is not None:
            self.content.clear()

    def render(self) -> int:
        if self.page is None:
            return 0
        translated = self.renderer.render_all(self.page.root)
        return translated + self.watcher.flush()

    def change_language(self, language: str) -> bool:
        if language == self.renderer.language:
            return False
        logger.info(f"Changing language from {self.renderer.language} to {language}")
        self.renderer.set_language(language)
        self.clear_cache()
        if self.page is not None:
            self.renderer.clear_marks(self.page.root)
        self.render()
        return True
