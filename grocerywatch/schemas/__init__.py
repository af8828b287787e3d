"""Schemas package."""

from grocerywatch.schemas.content import (
    NutritionFacts,
    NutritionRequest,
    NutritionResponse,
    Recipe,
    RecipeIngredient,
    RecipeResponse,
    RecipeSearchRequest,
    RecipeSuggestionsRequest,
)
from grocerywatch.schemas.grocery_item import (
    ExpiringItemsResponse,
    ExpiryCheckResponse,
    GroceryItemCreate,
    GroceryItemListResponse,
    GroceryItemRecord,
    GroceryItemResponse,
    GroceryItemUpdate,
    LabelGuess,
    LabelScanRequest,
    WastedItemValue,
    WastedValueResponse,
)
from grocerywatch.schemas.health import (
    HealthAnalysis,
    HealthAnalysisResponse,
    HealthFact,
    HealthFactsRequest,
    HealthFactsResponse,
    HealthMetricsCreate,
    HealthMetricsResponse,
    SugarHealthRecord,
    SugarHealthResponse,
    SugarHealthUpdate,
    SugarRecommendations,
)
from grocerywatch.schemas.notifications import EventType, NotificationEvent

__all__ = [
    "EventType",
    "ExpiringItemsResponse",
    "ExpiryCheckResponse",
    "GroceryItemCreate",
    "GroceryItemListResponse",
    "GroceryItemRecord",
    "GroceryItemResponse",
    "GroceryItemUpdate",
    "HealthAnalysis",
    "HealthAnalysisResponse",
    "HealthFact",
    "HealthFactsRequest",
    "HealthFactsResponse",
    "HealthMetricsCreate",
    "HealthMetricsResponse",
    "LabelGuess",
    "LabelScanRequest",
    "NotificationEvent",
    "NutritionFacts",
    "NutritionRequest",
    "NutritionResponse",
    "Recipe",
    "RecipeIngredient",
    "RecipeResponse",
    "RecipeSearchRequest",
    "RecipeSuggestionsRequest",
    "SugarHealthRecord",
    "SugarHealthResponse",
    "SugarHealthUpdate",
    "SugarRecommendations",
    "WastedItemValue",
    "WastedValueResponse",
]
