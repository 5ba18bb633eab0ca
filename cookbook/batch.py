"""Bulk translation of a whole ContentModel through the Translation Store.

The content document is flattened into ``path -> string`` pairs, every
translatable string is resolved in one batch, and the translations are written
back along the same paths.
"""
import copy
import logging
import re
from typing import Any, Dict, List, Tuple

from .gateway import batch_failed
from .schemas import ContentModel
from .store import TranslationStore

logger = logging.getLogger(__name__)

Path = Tuple[Any, ...]

# Identifiers and media references are never sent for translation
UNTRANSLATED_KEYS = {"id", "file", "image", "tags"}

_NO_WORDS = re.compile(r"^[\s\W]+$")


def flatten(obj: Any, prefix: Path = ()) -> Dict[Path, Any]:
    flat: Dict[Path, Any] = {}
    if isinstance(obj, dict):
        for key, value in obj.items():
            flat.update(flatten(value, prefix + (key,)))
    elif isinstance(obj, list):
        for index, value in enumerate(obj):
            flat.update(flatten(value, prefix + (index,)))
    else:
        flat[prefix] = obj
    return flat


def set_path(doc: Any, path: Path, value: Any) -> None:
    current = doc
    for key in path[:-1]:
        current = current[key]
    current[path[-1]] = value


def unflatten(flat: Dict[Path, Any], template: Any) -> Any:
    """Write ``flat`` values into a deep copy of ``template``."""
    doc = copy.deepcopy(template)
    for path, value in flat.items():
        set_path(doc, path, value)
    return doc


def translatable_paths(flat: Dict[Path, Any]) -> List[Path]:
    paths = []
    for path, value in flat.items():
        if not isinstance(value, str) or not value.strip() or _NO_WORDS.match(value):
            continue
        if any(isinstance(k, str) and k in UNTRANSLATED_KEYS for k in path):
            continue
        paths.append(path)
    return paths


class ContentTranslator:
    def __init__(self, store: TranslationStore):
        self.store = store
        self._memo: Dict[str, ContentModel] = {}

    def clear(self) -> None:
        self._memo.clear()

    def translate_content(self, content: ContentModel, target_lang: str) -> ContentModel:
        """Return ``content`` translated into ``target_lang``.

        Falls back to the original content when the whole batch fails.
        """
        if target_lang == self.store.source_language:
            return content
        if target_lang in self._memo:
            return self._memo[target_lang]

        data = content.model_dump()
        flat = flatten(data)
        paths = translatable_paths(flat)
        texts = [flat[p] for p in paths]
        logger.debug(f"Translating {len(texts)} content string(s) to {target_lang}")

        translated = self.store.resolve_many(texts, target_lang)
        if batch_failed(texts, translated):
            logger.info(f"Translation to {target_lang} unavailable, using original content")
            return content

        result = ContentModel.model_validate(unflatten(dict(zip(paths, translated)), data))
        self.store.save_language(target_lang)
        self._memo[target_lang] = result
        return result
