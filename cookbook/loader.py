import json
import logging
from pathlib import Path
from typing import Tuple

import requests
from pydantic import ValidationError

from .config import DATA_DIR, SOURCE_LANGUAGE
from .errors import ResourceLoadError
from .schemas import ContentModel

logger = logging.getLogger(__name__)

# Minimal document that keeps the page navigable when the content file is unavailable
FALLBACK_CONTENT = {
    "ui": {
        "title": "My Recipe Journal",
        "search_placeholder": "Search recipes...",
        "section_headers": {
            "dish_types": "Dish Types",
            "dietary_options": "Dietary Options",
        },
        "categories": {
            "all": "All Recipes",
            "main-courses": "Main Courses",
            "desserts": "Desserts",
            "soups": "Soups",
            "quick": "Quick Recipes",
            "vegetarian": "Vegetarian",
        },
    },
    "navigation": {
        "home": "Home",
        "breadcrumbs": {"separator": "›"},
    },
    "categories": {
        "main-courses": {
            "name": "Main Courses",
            "recipes": [
                {"id": "bourguignon", "title": "Seitan Bourguignon", "file": "bourguignon.html",
                 "image": "bourguignon.webp",
                 "description": "A hearty vegetarian version of the classic French dish"},
                {"id": "lentils_soup", "title": "Lentils Soup", "file": "lentils_soup.html",
                 "image": "lentils_soup.webp", "description": "Warm and nutritious lentil soup"},
                {"id": "moussaka", "title": "Moussaka", "file": "moussaka.html",
                 "image": "moussaka.webp", "description": "Layered eggplant and potato casserole"},
            ],
        },
        "desserts": {
            "name": "Desserts",
            "recipes": [
                {"id": "banana_bread", "title": "Banana Bread", "file": "banana_bread.html",
                 "image": "banana_bread.webp", "description": "Moist and delicious banana bread"},
                {"id": "chocolate_truffles", "title": "Chocolate Truffles", "file": "chocolate_truffles.html",
                 "image": "chocolate_truffles.webp", "description": "Rich and creamy chocolate truffles"},
                {"id": "rice_pudding", "title": "Rice Pudding", "file": "rice_pudding.html",
                 "image": "rice_pudding.webp", "description": "Creamy and comforting rice pudding"},
            ],
        },
    },
}


def fallback_content() -> ContentModel:
    return ContentModel.model_validate(FALLBACK_CONTENT)


def resource_name(language: str, source_language: str = SOURCE_LANGUAGE) -> str:
    if not language or language == source_language:
        return "cookbook-data.json"
    return f"cookbook-data-{language}.json"


class ContentLoader:
    """Loads the cookbook content document from a directory or an http(s) base URL."""

    def __init__(self, base: str = DATA_DIR, source_language: str = SOURCE_LANGUAGE):
        self.base = str(base)
        self.source_language = source_language

    @property
    def remote(self) -> bool:
        return self.base.startswith(("http://", "https://"))

    def location(self, language: str) -> str:
        name = resource_name(language, self.source_language)
        if self.remote:
            return f"{self.base.rstrip('/')}/{name}"
        return str(Path(self.base) / name)

    def load(self, language: str) -> ContentModel:
        """Return the content for ``language``, or the embedded fallback on any failure."""
        try:
            return self.fetch(language)
        except ResourceLoadError as e:
            logger.warning(f"Failed to load content, using fallback: {e}")
            return fallback_content()

    def load_localized(self, language: str) -> Tuple[ContentModel, bool]:
        """Prefer a language-specific document, else the source-language one.

        The flag tells whether the returned content is already in ``language``.
        """
        if language and language != self.source_language:
            try:
                return self.fetch(language), True
            except ResourceLoadError as e:
                logger.info(f"No localized content for {language} ({e}), using source content")
        return self.load(self.source_language), language == self.source_language or not language

    def fetch(self, language: str) -> ContentModel:
        location = self.location(language)
        data = self._read_remote(location) if self.remote else self._read_file(location)
        try:
            content = ContentModel.model_validate(data)
        except ValidationError as e:
            raise ResourceLoadError(location, f"invalid content: {e.error_count()} error(s)") from e
        logger.info(f"Loaded {len(content.recipes)} recipe(s) from {location}")
        return content

    def _read_file(self, location: str):
        p = Path(location)
        if not p.exists():
            raise ResourceLoadError(location, "not found")
        try:
            with p.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise ResourceLoadError(location, str(e)) from e

    def _read_remote(self, location: str):
        try:
            response = requests.get(location)
        except requests.RequestException as e:
            raise ResourceLoadError(location, str(e)) from e
        if not response.ok:
            raise ResourceLoadError(location, f"HTTP {response.status_code}: {response.reason}")
        try:
            return response.json()
        except ValueError as e:
            raise ResourceLoadError(location, f"malformed JSON: {e}") from e
