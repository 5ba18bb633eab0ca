"""Explicit wiring of the cookbook components and page rendering."""
import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from bs4 import Tag
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .batch import ContentTranslator
from .config import BASE_DIR, LANGUAGE_KEY, Settings, get_settings
from .crud import MemoryStore
from .dictionaries import load_dictionaries
from .dom import Page
from .errors import ElementNotFound
from .filtering import ALL, FilterState, apply_visibility, compute_visibility, group_by_tag
from .gateway import TranslationGateway
from .loader import ContentLoader
from .pipeline import TranslationPipeline
from .renderer import ORIGINAL_ATTR, TRANSLATED_ATTR, PageRenderer
from .schemas import ContentModel, RecipeRecord
from .store import TranslationStore
from .switcher import LanguageSwitcher
from .watcher import MutationWatcher

logger = logging.getLogger(__name__)

TEMPLATES_DIR = BASE_DIR / "templates"

LinkBuilder = Callable[[RecipeRecord, str], str]


def server_link(recipe: RecipeRecord, language: str) -> str:
    return f"/recipes/{recipe.id}?lang={language}"


def static_link(recipe: RecipeRecord, language: str) -> str:
    return f"recipes/{recipe.id}.html"


class Site:
    def __init__(self, settings: Optional[Settings] = None, kv=None,
                 gateway: Optional[TranslationGateway] = None,
                 dictionaries: Optional[Dict[str, Dict[str, str]]] = None,
                 templates_dir: Path = TEMPLATES_DIR):
        self.settings = settings or get_settings()
        self.kv = kv if kv is not None else MemoryStore()
        self.gateway = gateway or TranslationGateway(
            self.settings.translate_api_url,
            self.settings.translate_api_key,
            self.settings.source_language,
        )
        if dictionaries is None:
            dictionaries = load_dictionaries(self.settings.dictionaries_path)
        self.store = TranslationStore(self.gateway, dictionaries, self.settings.source_language, kv=self.kv,
                                      max_entries=self.settings.cache_size or None)
        self.content_translator = ContentTranslator(self.store)
        self.loader = ContentLoader(self.settings.data_dir, self.settings.source_language)
        self._source: Optional[ContentModel] = None
        self._localized: Dict[str, Optional[ContentModel]] = {}
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
        )

    @property
    def source_language(self) -> str:
        return self.settings.source_language

    def language_for(self, requested: Optional[str] = None) -> str:
        """Requested language if supported, else the stored preference, else the source language."""
        if requested and self.settings.is_supported(requested):
            return requested
        saved = self.kv.get(LANGUAGE_KEY)
        if saved and self.settings.is_supported(saved):
            return saved
        return self.source_language

    def source_content(self) -> ContentModel:
        if self._source is None:
            self._source = self.loader.load(self.source_language)
        return self._source

    def clear(self) -> None:
        """Forget loaded content and every cached translation."""
        self._source = None
        self._localized.clear()
        self.store.clear()
        self.content_translator.clear()

    def content(self, language: str) -> ContentModel:
        """Content in ``language``: a localized document if one exists, else batch translated."""
        if not language or language == self.source_language:
            return self.source_content()
        if language not in self._localized:
            content, localized = self.loader.load_localized(language)
            # None: no localized document, translate the source content instead
            self._localized[language] = content if localized else None
        localized = self._localized[language]
        if localized is not None:
            return localized
        return self.content_translator.translate_content(self.source_content(), language)

    def new_pipeline(self, page: Page, language: str) -> TranslationPipeline:
        renderer = PageRenderer(self.store, language)
        pipeline = TranslationPipeline(self.store, renderer, MutationWatcher(renderer), self.content_translator)
        pipeline.attach(page)
        return pipeline

    def new_switcher(self, preferences=None, pipeline=None, reload=None,
                     link_for: Optional[Callable[[str], str]] = None,
                     languages: Optional[Iterable[str]] = None) -> LanguageSwitcher:
        names = self.settings.language_names()
        if languages is not None:
            wanted = set(languages)
            names = {code: name for code, name in names.items() if code in wanted}
        return LanguageSwitcher(
            preferences if preferences is not None else self.kv,
            names,
            pipeline=pipeline,
            reload=reload,
            default_language=self.source_language,
            link_for=link_for,
        )

    def visibility(self, state: FilterState, content: Optional[ContentModel] = None):
        content = content or self.source_content()
        visible = compute_visibility(content.recipes, state)
        sections = group_by_tag(content.recipes, [c for c in content.ui.categories if c != ALL])
        return visible, sections

    def render_index(self, language: str, state: Optional[FilterState] = None,
                     link: LinkBuilder = server_link, static_url: str = "/static/",
                     preferences=None, interactive: bool = True,
                     switcher_link: Optional[Callable[[str], str]] = None,
                     languages: Optional[Iterable[str]] = None) -> str:
        """Index page in ``language``.

        Search and filters run on the content the reader sees, so a translated
        title can be searched for. ``interactive=False`` leaves the search and
        filter controls out (static build).
        """
        source = self.source_content()
        content = self.content(language)
        state = state or FilterState()
        html = self.env.get_template("index.html").render(
            ui=source.ui, language=language, state=state, static_url=static_url,
            interactive=interactive,
        )
        page = Page(html)
        pipeline = self.new_pipeline(page, language)
        pipeline.renderer.apply_labels(page.root, source.labels())
        self.new_switcher(preferences, link_for=switcher_link, languages=languages).install(page)
        pipeline.render()

        # Recipe sections are inserted after the first pass and picked up by the watcher
        self.render_sections(page, content, language, link, source=source)
        visible, _ = self.visibility(state, content)
        apply_visibility(page, visible)
        pipeline.watcher.flush()
        return str(page)

    def render_sections(self, page: Page, content: ContentModel, language: str,
                        link: LinkBuilder = server_link, source: Optional[ContentModel] = None) -> int:
        """Insert the recipe sections after the filter bar.

        With ``source`` given, headings and links whose text differs from the
        source content are marked as already translated.
        """
        try:
            anchor = page.require(".filter-bar")
        except ElementNotFound as e:
            logger.error(f"Recipes not rendered: {e}")
            return 0
        blocks = []
        sections = group_by_tag(content.recipes, [c for c in content.ui.categories if c != ALL])
        for category_id, recipes in sections.items():
            block = page.new_tag("div", class_="recipe-block", id=f"{category_id}-block")
            heading = page.new_tag("h2", content.ui.categories[category_id])
            if source is not None:
                mark_translated(heading, source.ui.categories.get(category_id))
            block.append(heading)
            ul = page.new_tag("ul", id=f"{category_id}-list")
            for recipe in recipes:
                li = page.new_tag("li")
                recipe_link = page.new_tag(
                    "a", recipe.title, href=link(recipe, language),
                    data_category=category_id, data_recipe_id=recipe.id,
                )
                if source is not None:
                    original = source.get_recipe(recipe.id)
                    mark_translated(recipe_link, original.title if original else None)
                li.append(recipe_link)
                ul.append(li)
            block.append(ul)
            blocks.append(block)

        existing = page.select_one(".recipes-container")
        if existing is not None:
            page.replace_children(existing, blocks)
        else:
            container = page.new_tag("div", class_="recipes-container")
            for block in blocks:
                container.append(block)
            page.insert_after(anchor, container)
        return len(sections)

    def get_recipe(self, recipe_id: str) -> Optional[RecipeRecord]:
        return self.source_content().get_recipe(recipe_id)

    def render_recipe(self, recipe_id: str, language: str, back_url: str = "/",
                      static_url: str = "/static/", preferences=None,
                      switcher_link: Optional[Callable[[str], str]] = None,
                      languages: Optional[Iterable[str]] = None) -> Optional[str]:
        source = self.source_content()
        original = source.get_recipe(recipe_id)
        if original is None:
            return None
        recipe = self.content(language).get_recipe(recipe_id) or original
        html = self.env.get_template("recipe.html").render(
            ui=source.ui, recipe=recipe, language=language,
            back_url=back_url, static_url=static_url,
        )
        page = Page(html)
        if recipe is not original:
            mark_recipe(page, recipe, original)
        pipeline = self.new_pipeline(page, language)
        pipeline.renderer.apply_labels(page.root, source.labels())
        self.new_switcher(preferences, link_for=switcher_link, languages=languages).install(page)
        pipeline.render()
        return str(page)

    def build(self, out_dir, languages=None) -> int:
        """Write a static copy of the site, one directory per language.

        Static pages have no server behind them: the language menu links to
        the other built copies and the search and filter controls are left out.
        """
        out = Path(out_dir)
        written = 0
        languages = list(languages or self.settings.languages)
        static_dir = BASE_DIR / "static"
        if static_dir.exists():
            shutil.copytree(static_dir, out / "static", dirs_exist_ok=True)
        for language in languages:
            lang_dir = out / language
            (lang_dir / "recipes").mkdir(parents=True, exist_ok=True)
            (lang_dir / "index.html").write_text(
                self.render_index(language, link=static_link, static_url="../static/",
                                  preferences=MemoryStore({LANGUAGE_KEY: language}),
                                  interactive=False,
                                  switcher_link=lambda code: f"../{code}/index.html",
                                  languages=languages),
                encoding="utf-8",
            )
            written += 1
            for recipe in self.source_content().recipes:
                page = self.render_recipe(
                    recipe.id, language, back_url="../index.html",
                    static_url="../../static/",
                    preferences=MemoryStore({LANGUAGE_KEY: language}),
                    switcher_link=lambda code, rid=recipe.id: f"../../{code}/recipes/{rid}.html",
                    languages=languages,
                )
                (lang_dir / "recipes" / f"{recipe.id}.html").write_text(page, encoding="utf-8")
                written += 1
            logger.info(f"Built {language} pages in {lang_dir}")
        return written


def mark_translated(element: Tag, original: Optional[str]) -> bool:
    """Mark text that already comes translated so the renderer leaves it alone."""
    text = element.get_text()
    if not original or not text or text.strip() == original.strip():
        return False
    element[TRANSLATED_ATTR] = "true"
    element[ORIGINAL_ATTR] = original
    return True


def mark_recipe(page: Page, recipe: RecipeRecord, original: RecipeRecord) -> None:
    heading = page.select_one("h2[data-recipe-id]")
    if heading is not None:
        mark_translated(heading, original.title)
    description = page.select_one("p.description")
    if description is not None:
        mark_translated(description, original.description)
    for selector, items in (("ul.ingredients > li", original.ingredients),
                            ("ol.instructions > li", original.instructions)):
        elements = page.select(selector)
        if len(elements) != len(items):
            continue
        for element, item in zip(elements, items):
            if isinstance(item, str):
                mark_translated(element, item)
