# flake8: noqa

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlsplit

from fastapi import Depends, FastAPI, Form, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from . import crud, schemas
from .config import LANGUAGE_KEY
from .crud import KeyValueStore
from .db import SessionLocal, init_db
from .filtering import FilterState, section_visibility
from .site import Site
from .store import cache_key

logger = logging.getLogger(__name__)

COOKIE_MAX_AGE = 60 * 60 * 24 * 365


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB once at startup
    init_db()
    yield


app = FastAPI(lifespan=lifespan)
site = Site(kv=KeyValueStore(SessionLocal))

# Serve static assets (css, images) using absolute path so reloads work
static_dir = Path(__file__).resolve().parents[1] / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")


# Serve a small favicon to avoid 404 noise from browsers requesting /favicon.ico
@app.get("/favicon.ico")
def favicon():
    fav = static_dir / "img" / "favicon.ico"
    if fav.exists():
        return FileResponse(str(fav), media_type="image/x-icon")
    empty_svg = "<svg xmlns='http://www.w3.org/2000/svg' width='1' height='1'></svg>"
    return HTMLResponse(content=empty_svg, media_type="image/svg+xml")

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_site() -> Site:
    return site


class CookiePreferences:
    """Language preference read from the request cookies and written back on the response."""

    def __init__(self, request: Request):
        self.cookies = dict(request.cookies)
        self.changed = {}

    def get(self, key: str) -> Optional[str]:
        return self.changed.get(key, self.cookies.get(key))

    def set(self, key: str, value: str) -> None:
        self.changed[key] = value

    def apply(self, response) -> None:
        for key, value in self.changed.items():
            response.set_cookie(key, value, max_age=COOKIE_MAX_AGE, samesite="lax")


def request_language(site: Site, request: Request, lang: Optional[str]) -> str:
    """Query parameter, then cookie, then stored preference, then the source language."""
    if lang and site.settings.is_supported(lang):
        return lang
    return site.language_for(request.cookies.get(LANGUAGE_KEY))


def require_language(site: Site, lang: Optional[str]) -> str:
    if not lang:
        return site.source_language
    if not site.settings.is_supported(lang):
        raise HTTPException(status_code=400, detail=f"Unsupported language: {lang}")
    return lang


@app.get("/", response_class=HTMLResponse)
def read_root(
    request: Request,
    lang: Optional[str] = None,
    q: str = "",
    dish: List[str] = Query(default=[]),
    diet: List[str] = Query(default=[]),
    site: Site = Depends(get_site),
):
    language = request_language(site, request, lang)
    state = FilterState.from_params(q, dish, diet)
    html = site.render_index(language, state, preferences=CookiePreferences(request))
    return HTMLResponse(content=html)


@app.get("/recipes/{recipe_id}", response_class=HTMLResponse)
def view_recipe(request: Request, recipe_id: str, lang: Optional[str] = None, site: Site = Depends(get_site)):
    language = request_language(site, request, lang)
    html = site.render_recipe(
        recipe_id, language, back_url=f"/?lang={language}", preferences=CookiePreferences(request)
    )
    if html is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return HTMLResponse(content=html)


@app.post("/language")
def change_language(request: Request, lang: str = Form(...), site: Site = Depends(get_site)):
    # No page-level pipeline lives between requests, so a commit falls back to a reload
    preferences = CookiePreferences(request)
    referer = request.headers.get("referer")
    path = urlsplit(referer).path if referer else "/"

    def reload(language: str):
        return RedirectResponse(url=f"{path or '/'}?lang={language}", status_code=303)

    switcher = site.new_switcher(preferences, reload=reload)
    response = switcher.select(lang)
    if response is None:
        response = RedirectResponse(url=path or "/", status_code=303)
    preferences.apply(response)
    return response


@app.get("/api/content")
def api_content(lang: Optional[str] = None, site: Site = Depends(get_site)):
    language = require_language(site, lang)
    return site.content(language).model_dump()


@app.get("/api/recipes", response_model=schemas.VisibilityResponse)
def api_recipes(
    lang: Optional[str] = None,
    q: str = "",
    dish: List[str] = Query(default=[]),
    diet: List[str] = Query(default=[]),
    site: Site = Depends(get_site),
):
    language = require_language(site, lang)
    state = FilterState.from_params(q, dish, diet)
    content = site.content(language)
    visible, sections = site.visibility(state, content)
    return schemas.VisibilityResponse(
        visible=[r.id for r in content.recipes if r.id in visible],
        hidden=[r.id for r in content.recipes if r.id not in visible],
        sections=section_visibility(sections, visible),
    )


@app.post("/api/translate", response_model=schemas.TranslateResponse)
def api_translate(payload: schemas.TranslateRequest, site: Site = Depends(get_site)):
    target = require_language(site, payload.target)
    if payload.text is None and payload.texts is None:
        raise HTTPException(status_code=400, detail="Provide text or texts")
    result = schemas.TranslateResponse(target=target)
    if payload.text is not None:
        result.text = site.store.resolve(payload.text, target)
    if payload.texts is not None:
        result.texts = site.store.resolve_many(payload.texts, target)
    return result


@app.get("/api/translations/{lang}")
def api_cached_translations(lang: str, db: Session = Depends(get_db), site: Site = Depends(get_site)):
    language = require_language(site, lang)
    raw = crud.get_value(db, cache_key(language))
    return {"language": language, "cached": bool(raw), "entries": crud.decode_map(raw) or {}}
