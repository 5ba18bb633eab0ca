# flake8: noqa
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

from cookbook.config import LANGUAGE_KEY
from cookbook.crud import MemoryStore
from cookbook.dom import Page
from cookbook.renderer import PageRenderer
from cookbook.store import TranslationStore
from cookbook.switcher import LanguageSwitcher, MenuState

LANGUAGES = {"en": "English", "fr": "Français", "es": "Español"}


class FakePipeline:
    def __init__(self):
        self.events = []

    def clear_cache(self):
        self.events.append("clear")

    def change_language(self, language):
        self.events.append(("change", language))
        return True


class EchoGateway:
    def translate(self, text, target_lang):
        return text


def test_toggle_and_outside_click():
    switcher = LanguageSwitcher(MemoryStore(), LANGUAGES)
    assert switcher.state is MenuState.CLOSED
    assert switcher.toggle() is MenuState.OPEN
    assert switcher.toggle() is MenuState.CLOSED
    switcher.toggle()
    assert switcher.outside_click() is MenuState.CLOSED
    # outside click on a closed menu keeps it closed
    assert switcher.outside_click() is MenuState.CLOSED


def test_select_persists_clears_and_rerenders():
    prefs = MemoryStore()
    pipeline = FakePipeline()
    switcher = LanguageSwitcher(prefs, LANGUAGES, pipeline=pipeline)
    switcher.toggle()
    assert switcher.select("fr") is True
    assert switcher.state is MenuState.CLOSED
    assert prefs.get(LANGUAGE_KEY) == "fr"
    assert pipeline.events == ["clear", ("change", "fr")]
    assert switcher.current == "fr"


def test_select_without_pipeline_reloads():
    reloads = []
    prefs = MemoryStore()
    switcher = LanguageSwitcher(prefs, LANGUAGES, reload=reloads.append)
    switcher.select("es")
    assert reloads == ["es"]
    assert prefs.get(LANGUAGE_KEY) == "es"


def test_unsupported_language_is_ignored():
    prefs = MemoryStore({LANGUAGE_KEY: "fr"})
    pipeline = FakePipeline()
    switcher = LanguageSwitcher(prefs, LANGUAGES, pipeline=pipeline)
    switcher.toggle()
    assert switcher.select("xx") is None
    assert switcher.state is MenuState.OPEN
    assert prefs.get(LANGUAGE_KEY) == "fr"
    assert pipeline.events == []


def test_saved_preference_is_read_at_startup():
    assert LanguageSwitcher(MemoryStore({LANGUAGE_KEY: "es"}), LANGUAGES).current == "es"
    assert LanguageSwitcher(MemoryStore({LANGUAGE_KEY: "xx"}), LANGUAGES).current == "en"


def test_install_without_header_container():
    page = Page("<body><h1>Recipes</h1></body>")
    switcher = LanguageSwitcher(MemoryStore(), LANGUAGES)
    assert switcher.install(page) is None
    assert page.select(".language-switcher") == []


def test_install_adds_menu_that_is_never_translated():
    page = Page('<body><header><div class="container"><h1>Desserts</h1></div></header></body>')
    switcher = LanguageSwitcher(MemoryStore({LANGUAGE_KEY: "fr"}), LANGUAGES)
    node = switcher.install(page)
    assert node is not None
    assert page.select_one(".current-lang").string == "Français"
    assert [b["data-lang"] for b in page.select(".lang-option")] == ["en", "fr", "es"]
    assert "active" in page.select_one('.lang-option[data-lang="fr"]')["class"]

    # installing twice replaces the previous switcher
    switcher.install(page)
    assert len(page.select(".language-switcher")) == 1

    renderer = PageRenderer(TranslationStore(EchoGateway()), "es")
    renderer.render_all(page.root)
    assert page.select_one("h1").string == "Postres"
    assert page.select(".language-switcher [data-translated]") == []


def test_link_mode_renders_language_links():
    page = Page('<body><header><div class="container"><h1>Recipes</h1></div></header></body>')
    switcher = LanguageSwitcher(MemoryStore({LANGUAGE_KEY: "fr"}), LANGUAGES,
                                link_for=lambda code: f"../{code}/index.html")
    switcher.install(page)
    assert page.select("form") == []
    links = page.select("a.lang-option")
    assert [a["href"] for a in links] == ["../en/index.html", "../fr/index.html", "../es/index.html"]
    assert "show" in page.select_one("#language-menu")["class"]
