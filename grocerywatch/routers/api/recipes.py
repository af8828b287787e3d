"""Recipe and nutrition endpoints."""

import typing as t

from fastapi import APIRouter, Depends, HTTPException, status

from grocerywatch.core.config import SETTINGS
from grocerywatch.core.dependencies import (
    get_content_service,
    get_item_service,
    to_http_exception,
)
from grocerywatch.core.models import ItemStatus
from grocerywatch.schemas.content import (
    NutritionRequest,
    NutritionResponse,
    RecipeResponse,
    RecipeSearchRequest,
    RecipeSuggestionsRequest,
)
from grocerywatch.schemas.grocery_item import GroceryItemResponse
from grocerywatch.services import (
    ContentService,
    ItemNotFoundError,
    ItemService,
    PersistenceError,
)

ROUTER = APIRouter(prefix="/recipes", tags=["Recipes"])


@ROUTER.post("/search", response_model=RecipeResponse)
async def search_recipe(
    search: RecipeSearchRequest,
    service: t.Annotated[ItemService, Depends(get_item_service)],
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> RecipeResponse:
    """Find a recipe for a query using the items on hand.

    Args:
        search (RecipeSearchRequest): The recipe query.
        service (ItemService): The item service.
        content (ContentService): The content service.

    Returns:
        RecipeResponse: The recipe and its source.
    """
    try:
        available = await service.list_items(status=ItemStatus.ACTIVE)
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc

    return await content.recipe_for(search.query, available.items)


@ROUTER.post("/suggestions", response_model=RecipeResponse)
async def suggest_recipes(
    suggestion: RecipeSuggestionsRequest,
    service: t.Annotated[ItemService, Depends(get_item_service)],
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> RecipeResponse:
    """Suggest recipes that use up items expiring soon.

    Args:
        suggestion (RecipeSuggestionsRequest):
            Explicit item IDs, or the window to pick expiring items from.
        service (ItemService):
            The item service.
        content (ContentService):
            The content service.

    Returns:
        RecipeResponse: Suggested recipes and their source.
    """
    expiring: t.List[GroceryItemResponse]
    try:
        available = await service.list_items(status=ItemStatus.ACTIVE)
        if suggestion.item_ids:
            expiring = [
                await service.get_item(item_id)
                for item_id in suggestion.item_ids
            ]
        else:
            expiring = (
                await service.expiring_items(
                    window_days=(
                        SETTINGS.expiring_lookahead_days
                        if suggestion.window_days is None
                        else suggestion.window_days
                    )
                )
            ).items
    except (ItemNotFoundError, PersistenceError) as exc:
        raise to_http_exception(exc) from exc

    if not expiring:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No expiring items to build suggestions from",
        )

    return await content.suggestions_for(expiring, available.items)


@ROUTER.post("/nutrition", response_model=NutritionResponse)
async def get_nutrition(
    nutrition: NutritionRequest,
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> NutritionResponse:
    """Estimate nutrition facts per 100 g of a recipe.

    Args:
        nutrition (NutritionRequest): The recipe.
        content (ContentService): The content service.

    Returns:
        NutritionResponse: Nutrition facts and their source.
    """
    return await content.nutrition_for(nutrition.recipe)
