from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RecipeRecord(BaseModel):
    id: str = Field(..., json_schema_extra={"example": "banana_bread"})
    title: str = Field(..., json_schema_extra={"example": "Banana Bread"})
    description: str = ""
    tags: List[str] = Field(
        default_factory=list,
        json_schema_extra={"example": ["desserts", "quick"]},
    )
    file: Optional[str] = None
    image: Optional[str] = None
    ingredients: List[Any] = Field(default_factory=list)
    instructions: List[Any] = Field(default_factory=list)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


class Category(BaseModel):
    name: str
    recipes: List[RecipeRecord] = Field(default_factory=list)


class SectionHeaders(BaseModel):
    dish_types: str = "Dish Types"
    dietary_options: str = "Dietary Options"


class UILabels(BaseModel):
    # Extra flat labels (e.g. "ingredients", "back_to_recipes") are kept as-is
    model_config = ConfigDict(extra="allow")

    title: str = "My Recipe Journal"
    search_placeholder: str = "Search recipes..."
    section_headers: SectionHeaders = Field(default_factory=SectionHeaders)
    categories: Dict[str, str] = Field(default_factory=dict)
    dietary_filters: Dict[str, str] = Field(default_factory=dict)


class ContentModel(BaseModel):
    ui: UILabels = Field(default_factory=UILabels)
    recipes: List[RecipeRecord] = Field(default_factory=list)
    categories: Dict[str, Category] = Field(default_factory=dict)
    navigation: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _derive_and_check_recipes(self):
        if not self.recipes and self.categories:
            # Nested layout: every recipe is tagged with the categories it is listed under
            merged: Dict[str, RecipeRecord] = {}
            for category_id, category in self.categories.items():
                for recipe in category.recipes:
                    existing = merged.get(recipe.id)
                    if existing is None:
                        existing = recipe.model_copy(deep=True)
                        merged[recipe.id] = existing
                    if category_id not in existing.tags:
                        existing.tags.append(category_id)
            self.recipes = list(merged.values())
            for category_id, category in self.categories.items():
                self.ui.categories.setdefault(category_id, category.name)

        seen = set()
        for recipe in self.recipes:
            if recipe.id in seen:
                raise ValueError(f"duplicate recipe id: {recipe.id}")
            seen.add(recipe.id)
        return self

    def get_recipe(self, recipe_id: str) -> Optional[RecipeRecord]:
        return next((r for r in self.recipes if r.id == recipe_id), None)

    def labels(self) -> Dict[str, Any]:
        return self.ui.model_dump()

    def label(self, key_path: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a UI label by dotted path, e.g. ``section_headers.dish_types``."""
        current: Any = self.labels()
        for key in key_path.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current if isinstance(current, str) else default


# Limits on client-supplied text sent to the translation service
MAX_TEXT_LENGTH = 2000
MAX_BATCH_SIZE = 100

BoundedText = Annotated[str, Field(max_length=MAX_TEXT_LENGTH)]


class TranslateRequest(BaseModel):
    text: Optional[BoundedText] = None
    texts: Optional[List[BoundedText]] = Field(None, max_length=MAX_BATCH_SIZE)
    target: str = Field(..., json_schema_extra={"example": "fr"})


class TranslateResponse(BaseModel):
    target: str
    text: Optional[str] = None
    texts: Optional[List[str]] = None


class VisibilityResponse(BaseModel):
    visible: List[str]
    hidden: List[str]
    sections: Dict[str, bool]
