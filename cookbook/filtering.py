"""Recipe search and tag filtering.

Search matches recipe titles only (case-insensitive substring). Dish-type
filters combine with OR, dietary filters with AND.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from .dom import Page
from .schemas import RecipeRecord

ALL = "all"
DISH = "dish"
DIETARY = "dietary"


@dataclass
class FilterState:
    active_dish_tags: Set[str] = field(default_factory=set)
    active_dietary_tags: Set[str] = field(default_factory=set)
    search_term: str = ""
    show_all: bool = True

    def select_dish(self, tag: str) -> None:
        if tag == ALL:
            self.active_dish_tags.clear()
            self.show_all = True
            return
        self.show_all = False
        if tag in self.active_dish_tags:
            self.active_dish_tags.discard(tag)
        else:
            self.active_dish_tags.add(tag)

    def select_dietary(self, tag: str) -> None:
        if tag in self.active_dietary_tags:
            self.active_dietary_tags.discard(tag)
        else:
            self.active_dietary_tags.add(tag)

    def search(self, term: str) -> None:
        self.search_term = (term or "").strip()

    @classmethod
    def from_params(cls, q: str = "", dish: Iterable[str] = (), diet: Iterable[str] = ()):
        state = cls()
        for tag in dish:
            state.select_dish(tag)
        for tag in diet:
            state.select_dietary(tag)
        state.search(q)
        return state


def is_visible(recipe: RecipeRecord, state: FilterState) -> bool:
    term = state.search_term.lower()
    if term and term not in recipe.title.lower():
        return False
    if not state.show_all and state.active_dish_tags:
        if not any(recipe.has_tag(tag) for tag in state.active_dish_tags):
            return False
    return all(recipe.has_tag(tag) for tag in state.active_dietary_tags)


def compute_visibility(recipes: Iterable[RecipeRecord], state: FilterState) -> Set[str]:
    return {recipe.id for recipe in recipes if is_visible(recipe, state)}


def group_by_tag(recipes: Iterable[RecipeRecord], categories: Iterable[str]) -> Dict[str, List[RecipeRecord]]:
    """Sections in category order; a recipe appears under every tag it carries."""
    recipes = list(recipes)
    sections: Dict[str, List[RecipeRecord]] = {}
    for category_id in categories:
        members = [r for r in recipes if r.has_tag(category_id)]
        if members:
            sections[category_id] = members
    return sections


def section_visibility(sections: Dict[str, List[RecipeRecord]], visible: Set[str]) -> Dict[str, bool]:
    return {
        section_id: any(r.id in visible for r in members)
        for section_id, members in sections.items()
    }


def _set_display(element, value: str) -> None:
    element["style"] = f"display: {value}"


def apply_visibility(page: Page, visible: Set[str]) -> Dict[str, bool]:
    """Show or hide recipe list items and whole ``.recipe-block`` sections."""
    sections: Dict[str, bool] = {}
    for link in page.select("a[data-recipe-id]"):
        shown = link["data-recipe-id"] in visible
        item = link.find_parent("li") or link
        _set_display(item, "list-item" if shown else "none")
        block = link.find_parent(class_="recipe-block")
        if block is not None and block.get("id"):
            sections[block["id"]] = sections.get(block["id"], False) or shown
    for block_id, shown in sections.items():
        block = page.soup.find(id=block_id)
        if block is not None:
            _set_display(block, "block" if shown else "none")
    return sections
