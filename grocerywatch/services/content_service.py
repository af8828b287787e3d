"""Content service - generated content with offline fallbacks."""

import logging
import typing as t
from dataclasses import dataclass

from grocerywatch.schemas.content import (
    NutritionResponse,
    Recipe,
    RecipeResponse,
)
from grocerywatch.schemas.grocery_item import (
    GroceryItemRecord,
    WastedItemValue,
    WastedValueResponse,
)
from grocerywatch.schemas.health import HealthFactsResponse
from grocerywatch.services.content_fallbacks import (
    fallback_health_analysis,
    fallback_health_facts,
    fallback_nutrition,
    fallback_pricing,
    fallback_recipe,
    fallback_recipe_suggestions,
    fallback_sugar_recommendations,
)
from grocerywatch.services.content_generator import (
    ContentGenerator,
    ContentKind,
    GenerationUnavailableError,
)

LOGGER: logging.Logger = logging.getLogger(__name__)

SOURCE_AI: str = "ai"
SOURCE_FALLBACK: str = "fallback"

FALLBACKS: t.Dict[ContentKind, t.Callable[[t.Mapping[str, t.Any]], t.Any]] = {
    ContentKind.RECIPE: fallback_recipe,
    ContentKind.RECIPE_SUGGESTIONS: fallback_recipe_suggestions,
    ContentKind.NUTRITION: fallback_nutrition,
    ContentKind.HEALTH_FACTS: fallback_health_facts,
    ContentKind.PRICING: fallback_pricing,
    ContentKind.HEALTH_ANALYSIS: fallback_health_analysis,
    ContentKind.SUGAR_RECOMMENDATIONS: fallback_sugar_recommendations,
}


@dataclass(frozen=True)
class GeneratedContent:
    """Content together with where it came from."""

    data: t.Any
    source: str


class ContentService:
    """Service class wrapping a content generator."""

    generator: ContentGenerator

    def __init__(self, generator: ContentGenerator) -> None:
        """Initialize ContentService.

        Args:
            generator (ContentGenerator): The configured generator.
        """
        self.generator = generator

    async def generate(
        self, kind: ContentKind, context: t.Mapping[str, t.Any]
    ) -> GeneratedContent:
        """Generate content, falling back to offline content on failure.

        Args:
            kind (ContentKind): What to generate.
            context (Mapping[str, Any]): Inputs for the content kind.

        Returns:
            GeneratedContent: The content and its source, ``ai`` or
                ``fallback``.
        """
        try:
            data: t.Any = await self.generator.generate(kind, context)
        except GenerationUnavailableError as exc:
            LOGGER.info("Using offline %s: %s", kind.value, exc)
            return GeneratedContent(
                data=FALLBACKS[kind](context), source=SOURCE_FALLBACK
            )
        return GeneratedContent(data=data, source=SOURCE_AI)

    async def recipe_for(
        self, query: str, available: t.Sequence[GroceryItemRecord]
    ) -> RecipeResponse:
        """Find a recipe for a free-text query.

        Args:
            query (str): What the user wants to cook.
            available (Sequence[GroceryItemRecord]): Items on hand.

        Returns:
            RecipeResponse: One recipe and its source.
        """
        generated: GeneratedContent = await self.generate(
            ContentKind.RECIPE,
            {"query": query, "available_items": list(available)},
        )
        return RecipeResponse(
            recipes=[generated.data],
            source=generated.source,
            query=query,
            available_ingredients=[item.product_name for item in available],
        )

    async def suggestions_for(
        self,
        expiring: t.Sequence[GroceryItemRecord],
        available: t.Sequence[GroceryItemRecord],
    ) -> RecipeResponse:
        """Suggest recipes that use up expiring items.

        Args:
            expiring (Sequence[GroceryItemRecord]): Items to use up.
            available (Sequence[GroceryItemRecord]): Items on hand.

        Returns:
            RecipeResponse: Suggested recipes and their source.
        """
        generated: GeneratedContent = await self.generate(
            ContentKind.RECIPE_SUGGESTIONS,
            {
                "expiring_items": list(expiring),
                "available_items": list(available),
            },
        )
        return RecipeResponse(
            recipes=generated.data,
            source=generated.source,
            available_ingredients=[item.product_name for item in available],
        )

    async def nutrition_for(self, recipe: Recipe) -> NutritionResponse:
        """Estimate nutrition facts per 100 g of a recipe.

        Args:
            recipe (Recipe): The recipe.

        Returns:
            NutritionResponse: Nutrition facts and their source.
        """
        generated: GeneratedContent = await self.generate(
            ContentKind.NUTRITION, {"recipe": recipe}
        )
        return NutritionResponse(
            nutrition=generated.data, source=generated.source
        )

    async def health_facts(self, topic: str, count: int) -> HealthFactsResponse:
        """Facts about food waste and nutrition.

        Args:
            topic (str): Subject of the facts.
            count (int): How many facts to return at most.

        Returns:
            HealthFactsResponse: The facts and their source.
        """
        generated: GeneratedContent = await self.generate(
            ContentKind.HEALTH_FACTS, {"topic": topic, "count": count}
        )
        return HealthFactsResponse(
            facts=generated.data[:count], source=generated.source
        )

    async def wasted_value(
        self, expired: t.Sequence[GroceryItemRecord]
    ) -> WastedValueResponse:
        """Estimate the market value of wasted items.

        Args:
            expired (Sequence[GroceryItemRecord]): Items that expired.

        Returns:
            WastedValueResponse: Per-item values and their total.
        """
        if not expired:
            return WastedValueResponse(
                items=[], total_wasted_amount=0.0, source=SOURCE_FALLBACK
            )

        generated: GeneratedContent = await self.generate(
            ContentKind.PRICING, {"items": list(expired)}
        )
        values: t.List[WastedItemValue] = generated.data
        return WastedValueResponse(
            items=values,
            total_wasted_amount=round(
                sum(value.total_wasted_amount for value in values), 2
            ),
            source=generated.source,
        )
