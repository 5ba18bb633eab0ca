"""Translation Store: cache -> dictionary -> persisted map -> gateway -> original."""
import logging
from typing import Dict, List, Optional, Tuple

from .config import CACHE_KEY_PREFIX, SOURCE_LANGUAGE
from .dictionaries import TRANSLATIONS, lookup
from .gateway import TranslationGateway, batch_failed
from .schemas import RecipeRecord

logger = logging.getLogger(__name__)


def cache_key(lang: str) -> str:
    return f"{CACHE_KEY_PREFIX}{lang}"


class TranslationStore:
    def __init__(self, gateway: TranslationGateway, dictionaries: Optional[Dict[str, Dict[str, str]]] = None,
                 source_language: str = SOURCE_LANGUAGE, kv=None, max_entries: Optional[int] = None):
        self.gateway = gateway
        self.dictionaries = TRANSLATIONS if dictionaries is None else dictionaries
        self.source_language = source_language
        self.kv = kv
        # The cache is dropped wholesale once it reaches this size (None: unbounded)
        self.max_entries = max_entries
        self._cache: Dict[Tuple[str, str], str] = {}
        self._persisted: Dict[str, Dict[str, str]] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def cached(self, text: str, target_lang: str) -> Optional[str]:
        return self._cache.get((text, target_lang))

    def clear(self) -> None:
        """Drop every cached entry, whatever its language."""
        logger.debug(f"Clearing translation cache ({len(self._cache)} entries)")
        self._cache.clear()
        self._persisted.clear()

    def resolve(self, text: str, target_lang: str) -> str:
        """Translate ``text`` into ``target_lang``; never raises."""
        if not text or not target_lang or target_lang == self.source_language:
            return text

        key = (text, target_lang)
        if key in self._cache:
            return self._cache[key]

        entry = lookup(self.dictionaries, text, target_lang)
        if entry is None:
            entry = self._persisted_map(target_lang).get(text)
        if entry is not None:
            self._remember(key, entry)
            return entry

        try:
            translated = self.gateway.translate(text, target_lang)
        except Exception as e:
            logger.warning(f"Translation error for {text!r} -> {target_lang}: {e}")
            translated = text
        if not isinstance(translated, str) or not translated:
            translated = text
        self._remember(key, translated)
        return translated

    def resolve_many(self, texts: List[str], target_lang: str) -> List[str]:
        """Resolve a list of texts, sending all misses to the gateway as one batch.

        If the gateway echoes the batch back, the misses stay untranslated and
        are not cached, so a later single ``resolve`` may still succeed.
        """
        if not target_lang or target_lang == self.source_language:
            return list(texts)

        resolved: Dict[str, str] = {}
        misses: List[str] = []
        for text in texts:
            if not text or text in resolved:
                continue
            if (text, target_lang) in self._cache:
                resolved[text] = self._cache[(text, target_lang)]
                continue
            entry = lookup(self.dictionaries, text, target_lang)
            if entry is None:
                entry = self._persisted_map(target_lang).get(text)
            if entry is not None:
                resolved[text] = entry
                self._remember((text, target_lang), entry)
            elif text not in misses:
                misses.append(text)

        if misses:
            try:
                translated = self.gateway.translate(misses, target_lang)
            except Exception as e:
                logger.warning(f"Batch translation error -> {target_lang}: {e}")
                translated = misses
            if isinstance(translated, list) and not batch_failed(misses, translated):
                for original, result in zip(misses, translated):
                    resolved[original] = result
                    self._remember((original, target_lang), result)
            else:
                logger.info(f"Batch of {len(misses)} text(s) left untranslated for {target_lang}")

        return [resolved.get(text, text) if text else text for text in texts]

    def translate_record(self, record: RecipeRecord, target_lang: str) -> RecipeRecord:
        """Return a copy of ``record`` with its human-readable fields translated."""
        if target_lang == self.source_language:
            return record
        update = {}
        if record.title:
            update["title"] = self.resolve(record.title, target_lang)
        if record.description:
            update["description"] = self.resolve(record.description, target_lang)
        if record.ingredients:
            update["ingredients"] = [self.resolve(i, target_lang) if isinstance(i, str) else i
                                     for i in record.ingredients]
        if record.instructions:
            update["instructions"] = [self.resolve(i, target_lang) if isinstance(i, str) else i
                                      for i in record.instructions]
        return record.model_copy(update=update)

    def _remember(self, key: Tuple[str, str], value: str) -> None:
        if self.max_entries and key not in self._cache and len(self._cache) >= self.max_entries:
            logger.info(f"Translation cache reached {len(self._cache)} entries, clearing")
            self._cache.clear()
        self._cache[key] = value

    def _persisted_map(self, target_lang: str) -> Dict[str, str]:
        if self.kv is None:
            return {}
        if target_lang not in self._persisted:
            self._persisted[target_lang] = self.kv.get_json(cache_key(target_lang)) or {}
        return self._persisted[target_lang]

    def save_language(self, target_lang: str) -> int:
        """Write every real translation cached for ``target_lang`` to the key-value store."""
        if self.kv is None or target_lang == self.source_language:
            return 0
        entries = dict(self._persisted_map(target_lang))
        for (text, lang), translated in self._cache.items():
            if lang == target_lang and translated != text:
                entries[text] = translated
        self.kv.set_json(cache_key(target_lang), entries)
        self._persisted[target_lang] = entries
        logger.info(f"Saved {len(entries)} cached translation(s) for {target_lang}")
        return len(entries)
