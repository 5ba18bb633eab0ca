"""Runtime configuration read from the environment."""
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

BASE_DIR = Path(__file__).resolve().parents[1]

DATA_DIR = os.environ.get('COOKBOOK_DATA_DIR', str(BASE_DIR / 'data'))
DATABASE_URL = os.environ.get('COOKBOOK_DATABASE_URL', 'sqlite:///./cookbook.db')
SOURCE_LANGUAGE = os.environ.get('COOKBOOK_SOURCE_LANGUAGE', 'en')

# Empty URL disables the remote gateway (dictionary-only translation)
TRANSLATE_API_URL = os.environ.get('TRANSLATE_API_URL', 'https://libretranslate.com/translate')
TRANSLATE_API_KEY = os.environ.get('TRANSLATE_API_KEY', '')

# In-memory translation cache size before it is cleared; 0 disables the bound
CACHE_SIZE = int(os.environ.get('COOKBOOK_CACHE_SIZE', '5000'))

# Optional translations.json replacing the built-in dictionaries
DICTIONARIES_PATH = os.environ.get('COOKBOOK_DICTIONARIES') or None

# Language code -> native name shown in the language menu
SUPPORTED_LANGUAGES = {
    'en': 'English',
    'fr': 'Français',
    'es': 'Español',
    'de': 'Deutsch',
    'it': 'Italiano',
    'pt': 'Português',
    'nl': 'Nederlands',
    'ru': 'Русский',
    'zh': '中文',
    'ja': '日本語',
    'ko': '한국어',
}

# Key names in the key-value store
LANGUAGE_KEY = 'cookbook-language'
CACHE_KEY_PREFIX = 'translations_'


def _enabled_languages() -> List[str]:
    raw = os.environ.get('COOKBOOK_LANGUAGES', '')
    codes = [c.strip().lower() for c in raw.split(',') if c.strip()]
    return [c for c in codes if c in SUPPORTED_LANGUAGES] or list(SUPPORTED_LANGUAGES)


class Settings(BaseModel):
    data_dir: str = DATA_DIR
    database_url: str = DATABASE_URL
    source_language: str = SOURCE_LANGUAGE
    languages: List[str] = Field(default_factory=_enabled_languages)
    translate_api_url: str = TRANSLATE_API_URL
    translate_api_key: str = TRANSLATE_API_KEY
    dictionaries_path: Optional[str] = DICTIONARIES_PATH
    cache_size: int = CACHE_SIZE

    def language_names(self) -> Dict[str, str]:
        return {code: SUPPORTED_LANGUAGES[code] for code in self.languages}

    def is_supported(self, language: str) -> bool:
        return bool(language) and language in self.languages


def get_settings() -> Settings:
    return Settings()
