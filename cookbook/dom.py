"""Parsed HTML page that reports child-list mutations to its observers."""
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from bs4 import BeautifulSoup, Tag

from .errors import ElementNotFound

PARSER = "html.parser"


@dataclass
class MutationRecord:
    target: Tag
    added_nodes: List[object] = field(default_factory=list)
    type: str = "childList"


Observer = Callable[[List[MutationRecord]], None]
NodeOrHtml = Union[Tag, str, List[Tag]]


class Page:
    def __init__(self, html: str = ""):
        self.soup = BeautifulSoup(html, PARSER)
        self._observers: List[Observer] = []

    def __str__(self) -> str:
        return str(self.soup)

    @property
    def root(self) -> Tag:
        return self.soup.body or self.soup

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def require(self, selector: str) -> Tag:
        element = self.soup.select_one(selector)
        if element is None:
            raise ElementNotFound(selector)
        return element

    def new_tag(self, name: str, text: Optional[str] = None, **attrs) -> Tag:
        tag = self.soup.new_tag(name, attrs={k.rstrip("_").replace("_", "-"): v for k, v in attrs.items()})
        if text is not None:
            tag.string = text
        return tag

    def observe(self, callback: Observer) -> None:
        if callback not in self._observers:
            self._observers.append(callback)

    def unobserve(self, callback: Observer) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def append(self, parent: Tag, node: NodeOrHtml) -> List[object]:
        added = self._nodes(node)
        for n in added:
            parent.append(n)
        self._notify(parent, added)
        return added

    def insert_after(self, ref: Tag, node: NodeOrHtml) -> List[object]:
        added = self._nodes(node)
        anchor = ref
        for n in added:
            anchor.insert_after(n)
            anchor = n
        self._notify(ref.parent, added)
        return added

    def replace_children(self, parent: Tag, node: NodeOrHtml) -> List[object]:
        for child in list(parent.contents):
            child.extract()
        added = self._nodes(node)
        for n in added:
            parent.append(n)
        self._notify(parent, added)
        return added

    def remove(self, node: Tag) -> None:
        node.extract()

    def _nodes(self, node: NodeOrHtml) -> List[object]:
        if isinstance(node, str):
            fragment = BeautifulSoup(node, PARSER)
            return [n.extract() for n in list(fragment.contents)]
        if isinstance(node, list):
            return list(node)
        return [node]

    def _notify(self, target: Tag, added: List[object]) -> None:
        if not added:
            return
        record = MutationRecord(target=target, added_nodes=list(added))
        for callback in list(self._observers):
            callback([record])
