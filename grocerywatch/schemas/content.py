"""Pydantic schemas for generated recipes and nutrition content."""

import typing as t

from pydantic import ConfigDict, Field

from grocerywatch.schemas.grocery_item import CamelModel


class RecipeIngredient(CamelModel):
    """A single recipe ingredient."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    amount: str = ""
    expiring: bool = False


class Recipe(CamelModel):
    """A recipe, either generated or taken from the offline set."""

    title: str
    type: str = "Main Course"
    ingredients: t.List[RecipeIngredient] = Field(default_factory=list)
    steps: t.List[str] = Field(default_factory=list)
    tips: str = ""


class NutritionFacts(CamelModel):
    """Nutrition facts per 100 g of a prepared dish."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    calories: str
    protein: str
    carbs: str
    fats: str
    fiber: str
    vitamins: str


class RecipeSearchRequest(CamelModel):
    """Schema for a recipe search."""

    query: str = Field(..., min_length=1, max_length=500)


class RecipeSuggestionsRequest(CamelModel):
    """Schema for suggestions built from items expiring soon.

    When ``item_ids`` is omitted the active items expiring within
    ``window_days`` are used.
    """

    item_ids: t.List[str] | None = None
    window_days: int | None = Field(None, ge=0, le=365)


class RecipeResponse(CamelModel):
    """Schema for recipe search and suggestion responses."""

    recipes: t.List[Recipe]
    source: str
    query: str | None = None
    available_ingredients: t.List[str] = Field(default_factory=list)


class NutritionRequest(CamelModel):
    """Schema for requesting nutrition facts of a recipe."""

    recipe: Recipe


class NutritionResponse(CamelModel):
    """Schema for nutrition facts response."""

    nutrition: NutritionFacts
    source: str
