"""Page Renderer: replaces element text with translations from the store.

Processed elements are marked with ``data-translated="true"`` and keep their
source text in ``data-original-text`` so a language change can revert them
before translating again.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from bs4 import NavigableString, Tag

from .store import TranslationStore

logger = logging.getLogger(__name__)

TRANSLATABLE_TAGS = [
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "span", "li", "a",
    "input", "textarea",
    "button", "label",
]
PLACEHOLDER_TAGS = {"input", "textarea"}

# Language switcher UI and code blocks are never translated
EXCLUDED_TAGS = {"script", "style", "code", "pre"}
EXCLUDED_CLASSES = {
    "language-switcher", "language-menu", "lang-option",
    "language-toggle", "current-lang", "toggle-icon",
}
EXCLUDED_IDS = {"language-toggle", "language-menu"}

TRANSLATED_ATTR = "data-translated"
ORIGINAL_ATTR = "data-original-text"
I18N_ATTR = "data-i18n"

_NO_WORDS = re.compile(r"^[\s\W]+$")
_LANGUAGE_CODE = re.compile(r"^[a-z]{2,3}$", re.IGNORECASE)


def is_excluded(element: Tag) -> bool:
    node = element
    while isinstance(node, Tag):
        if node.name in EXCLUDED_TAGS:
            return True
        if node.get("id") in EXCLUDED_IDS:
            return True
        classes = node.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        if EXCLUDED_CLASSES.intersection(classes):
            return True
        node = node.parent
    return False


def text_of(element: Tag) -> Optional[str]:
    """Text an element would be translated by, or None when it has nested markup."""
    if element.name in PLACEHOLDER_TAGS:
        return element.get("placeholder")
    if any(not isinstance(child, NavigableString) for child in element.children):
        return None
    return element.get_text()


def write_text(element: Tag, text: str) -> None:
    if element.name in PLACEHOLDER_TAGS:
        element["placeholder"] = text
    else:
        element.string = text


def is_translatable(element: Tag) -> bool:
    if not isinstance(element, Tag) or element.name not in TRANSLATABLE_TAGS:
        return False
    if element.has_attr(TRANSLATED_ATTR):
        return False
    if is_excluded(element):
        return False
    text = text_of(element)
    if not text or not text.strip():
        return False
    stripped = text.strip()
    if _NO_WORDS.match(stripped):
        return False
    if len(stripped) <= 3 and _LANGUAGE_CODE.match(stripped):
        return False
    return True


def _lookup_label(labels: Dict[str, Any], key: str) -> Optional[str]:
    current: Any = labels
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None
    return current if isinstance(current, str) else None


class PageRenderer:
    def __init__(self, store: TranslationStore, language: Optional[str] = None):
        self.store = store
        self.language = language or store.source_language
        # Bumped on every language change; results resolved under an older value are dropped
        self.generation = 0

    def set_language(self, language: str) -> int:
        self.language = language
        self.generation += 1
        return self.generation

    def eligible(self, root: Tag) -> List[Tag]:
        candidates: Iterable[Tag] = root.find_all(TRANSLATABLE_TAGS)
        if isinstance(root, Tag) and root.name in TRANSLATABLE_TAGS:
            candidates = [root, *candidates]
        return [el for el in candidates if is_translatable(el)]

    def render_all(self, root: Tag, language: Optional[str] = None, generation: Optional[int] = None) -> int:
        """Translate every eligible element under ``root``; returns how many changed.

        ``generation`` is the language generation the work was scheduled under
        (default: the current one). Results are written only while it is still
        current, so work queued before a language change is dropped.
        """
        language = language or self.language
        if generation is None:
            generation = self.generation
        if generation != self.generation:
            logger.debug(f"Skipping render scheduled under stale generation {generation}")
            return 0
        elements = self.eligible(root)
        logger.debug(f"Rendering {len(elements)} element(s) in {language}")
        return sum(1 for el in elements if self._translate(el, language, generation))

    def render_one(self, node, language: Optional[str] = None, generation: Optional[int] = None) -> int:
        if not isinstance(node, Tag):
            return 0
        return self.render_all(node, language, generation)

    def on_node_added(self, node, generation: Optional[int] = None) -> int:
        return self.render_one(node, self.language, generation)

    def _translate(self, element: Tag, language: str, generation: int) -> bool:
        original = text_of(element)
        if not original:
            return False
        source = original.strip()
        translated = self.store.resolve(source, language)
        if generation != self.generation:
            logger.debug(f"Discarding stale translation of {source!r} (generation {generation})")
            return False
        if not translated or translated == source:
            return False
        write_text(element, translated)
        element[TRANSLATED_ATTR] = "true"
        element[ORIGINAL_ATTR] = original
        return True

    def clear_marks(self, root: Tag) -> int:
        """Revert marked elements to their original text and drop the markers."""
        marked = root.find_all(attrs={TRANSLATED_ATTR: True})
        if isinstance(root, Tag) and root.has_attr(TRANSLATED_ATTR):
            marked = [root, *marked]
        for element in marked:
            original = element.get(ORIGINAL_ATTR)
            if original is not None:
                write_text(element, original)
            del element[TRANSLATED_ATTR]
            if element.has_attr(ORIGINAL_ATTR):
                del element[ORIGINAL_ATTR]
        return len(marked)

    def apply_labels(self, root: Tag, labels: Dict[str, Any]) -> int:
        """Fill ``data-i18n`` elements from content labels (dotted keys allowed)."""
        count = 0
        for element in root.find_all(attrs={I18N_ATTR: True}):
            value = _lookup_label(labels, element[I18N_ATTR])
            if value is None:
                continue
            write_text(element, value)
            count += 1
        return count
