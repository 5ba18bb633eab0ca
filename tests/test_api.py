# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `cookbook` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import json
from bs4 import BeautifulSoup
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient  # noqa: E402

from cookbook import app as app_module
from cookbook import crud, models
from cookbook.config import BASE_DIR, LANGUAGE_KEY, Settings
from cookbook.crud import MemoryStore
from cookbook.site import Site


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
# Use StaticPool so the same in-memory database is shared across connections
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create tables in the in-memory database
models.Base.metadata.create_all(bind=engine)

# Dictionary-only translation: no calls leave the test process
test_site = Site(
    settings=Settings(data_dir=str(BASE_DIR / "data"), translate_api_url=""),
    kv=MemoryStore(),
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app_module.app.dependency_overrides[app_module.get_db] = override_get_db
app_module.app.dependency_overrides[app_module.get_site] = lambda: test_site
client = TestClient(app_module.app)


def soup(res):
    return BeautifulSoup(res.text, "html.parser")


def test_index_in_source_language():
    res = client.get("/")
    assert res.status_code == 200
    page = soup(res)
    assert page.select_one("h1").string == "My Recipe Journal"
    assert page.select_one('a[data-recipe-id="banana_bread"]').string == "Banana Bread"
    assert page.select("[data-translated]") == []
    assert page.select_one(".language-switcher") is not None


def test_index_translated():
    res = client.get("/?lang=fr")
    assert res.status_code == 200
    page = soup(res)
    link = page.select_one('a[data-recipe-id="banana_bread"]')
    assert link.string == "Pain aux Bananes"
    assert link["data-original-text"] == "Banana Bread"
    assert link["href"] == "/recipes/banana_bread?lang=fr"
    assert page.select_one("#search-bar")["placeholder"] == "Rechercher des recettes..."
    # the language menu keeps native names
    assert page.select_one('.lang-option[data-lang="es"]').string == "Español"


def test_language_cookie_is_used_without_query():
    client.cookies.set(LANGUAGE_KEY, "es")
    try:
        page = soup(client.get("/"))
    finally:
        client.cookies.clear()
    assert page.select_one('a[data-recipe-id="banana_bread"]').string == "Pan de Plátano"


def test_dish_filter_hides_recipes():
    page = soup(client.get("/?dish=soups"))
    banana = page.select_one('a[data-recipe-id="banana_bread"]').find_parent("li")
    lentils = page.select_one('a[data-recipe-id="lentils_soup"]').find_parent("li")
    assert banana["style"] == "display: none"
    assert lentils["style"] == "display: list-item"
    assert page.select_one("#desserts-block")["style"] == "display: none"
    assert "active" in page.select_one('.filter-btn[data-filter="soups"]')["class"]
    assert "active" not in page.select_one('.filter-btn[data-filter="all"]')["class"]


def test_recipe_page_translated():
    res = client.get("/recipes/banana_bread?lang=es")
    assert res.status_code == 200
    page = soup(res)
    assert page.select_one("h2").string == "Pan de Plátano"
    assert [h.string for h in page.select("h3")] == ["Ingredientes", "Instrucciones"]
    assert page.select_one(".back-link").string == "Volver a las Recetas"


def test_unknown_recipe_404():
    res = client.get("/recipes/does_not_exist")
    assert res.status_code == 404


def test_change_language_sets_cookie_and_redirects():
    res = client.post("/language", data={"lang": "fr"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/?lang=fr"
    assert res.cookies.get(LANGUAGE_KEY) == "fr"
    client.cookies.clear()


def test_change_language_keeps_referer_path():
    res = client.post(
        "/language",
        data={"lang": "es"},
        headers={"referer": "http://testserver/recipes/moussaka?lang=fr"},
        follow_redirects=False,
    )
    assert res.headers["location"] == "/recipes/moussaka?lang=es"
    client.cookies.clear()


def test_change_language_rejects_unknown_code():
    res = client.post("/language", data={"lang": "xx"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"
    assert res.cookies.get(LANGUAGE_KEY) is None


def test_api_recipes_search():
    data = client.get("/api/recipes", params={"q": "soup"}).json()
    assert data["visible"] == ["lentils_soup"]
    assert "banana_bread" in data["hidden"]
    assert data["sections"]["soups"] is True
    assert data["sections"]["desserts"] is False


def test_api_recipes_dietary_and():
    data = client.get("/api/recipes", params=[("diet", "vegan"), ("diet", "gluten_free")]).json()
    assert data["visible"] == ["lentils_soup"]


def test_api_translate():
    res = client.post("/api/translate", json={"text": "Desserts", "target": "es"})
    assert res.status_code == 200
    assert res.json()["text"] == "Postres"

    res = client.post("/api/translate", json={"texts": ["Soups", "Desserts"], "target": "es"})
    assert res.json()["texts"] == ["Sopas", "Postres"]


def test_api_translate_errors():
    assert client.post("/api/translate", json={"text": "Soups", "target": "xx"}).status_code == 400
    assert client.post("/api/translate", json={"target": "fr"}).status_code == 400


def test_api_content_translated():
    res = client.get("/api/content?lang=fr")
    assert res.status_code == 200
    data = res.json()
    banana = next(r for r in data["recipes"] if r["id"] == "banana_bread")
    assert banana["title"] == "Pain aux Bananes"
    assert banana["tags"] == ["desserts", "quick"]
    assert client.get("/api/content?lang=xx").status_code == 400


def test_api_cached_translations():
    data = client.get("/api/translations/de").json()
    assert data == {"language": "de", "cached": False, "entries": {}}

    db = TestingSessionLocal()
    crud.set_value(db, "translations_de", json.dumps({"Soups": "Suppen"}))
    db.close()
    data = client.get("/api/translations/de").json()
    assert data["cached"] is True
    assert data["entries"] == {"Soups": "Suppen"}


def submit(page, button=None):
    """Query the filter form would send: hidden fields, search box, then the clicked button."""
    form = page.select_one(".filter-bar form")
    params = [(i["name"], i["value"]) for i in form.select('input[type="hidden"]')]
    search = form.select_one("#search-bar")
    params.append(("q", search.get("value", "")))
    if button is not None:
        clicked = form.select_one(button)
        params.append((clicked["name"], clicked["value"]))
    return soup(client.get("/", params=params))


def visible_ids(page):
    return sorted({a["data-recipe-id"] for a in page.select("a[data-recipe-id]")
                   if a.find_parent("li")["style"] == "display: list-item"})


def test_search_matches_translated_titles():
    page = soup(client.get("/?lang=fr&q=pain"))
    assert visible_ids(page) == ["banana_bread"]
    data = client.get("/api/recipes", params={"lang": "fr", "q": "pain"}).json()
    assert data["visible"] == ["banana_bread"]
    # the English title is not what a French reader sees
    assert client.get("/api/recipes", params={"lang": "fr", "q": "banana"}).json()["visible"] == []
    assert client.get("/api/recipes", params={"lang": "xx"}).status_code == 400


def test_filter_clicks_accumulate():
    page = soup(client.get("/"))
    page = submit(page, '.filter-btn[data-filter="desserts"]')
    page = submit(page, '.filter-btn[data-filter="soups"]')
    assert visible_ids(page) == ["banana_bread", "chocolate_truffles", "lentils_soup", "rice_pudding"]

    page = submit(page, '.filter-btn[data-filter="gluten_free"]')
    assert visible_ids(page) == ["chocolate_truffles", "lentils_soup", "rice_pudding"]
    page = submit(page, '.filter-btn[data-filter="vegan"]')
    assert visible_ids(page) == ["lentils_soup"]

    # clicking an active filter again turns it off
    page = submit(page, '.filter-btn[data-filter="vegan"]')
    assert visible_ids(page) == ["chocolate_truffles", "lentils_soup", "rice_pudding"]
    assert "active" not in page.select_one('.filter-btn[data-filter="vegan"]')["class"]

    # "all" drops the dish filters but keeps the dietary one
    page = submit(page, '.filter-btn[data-filter="all"]')
    assert visible_ids(page) == ["chocolate_truffles", "lentils_soup", "moussaka", "rice_pudding"]


def test_search_box_keeps_typed_text_and_filters():
    page = soup(client.get("/", params=[("q", "Soup"), ("dish", "soups")]))
    assert page.select_one("#search-bar")["value"] == "Soup"
    page = submit(page)
    assert visible_ids(page) == ["lentils_soup"]
    assert "active" in page.select_one('.filter-btn[data-filter="soups"]')["class"]


def test_unsupported_query_language_falls_back_to_cookie():
    client.cookies.set(LANGUAGE_KEY, "es")
    try:
        page = soup(client.get("/?lang=xx"))
    finally:
        client.cookies.clear()
    assert page.select_one('a[data-recipe-id="banana_bread"]').string == "Pan de Plátano"


def test_api_translate_limits_request_size():
    res = client.post("/api/translate", json={"texts": ["Soups"] * 101, "target": "es"})
    assert res.status_code == 422
    res = client.post("/api/translate", json={"text": "x" * 2001, "target": "es"})
    assert res.status_code == 422
