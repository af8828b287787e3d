"""AI-backed content generation for recipes, nutrition, pricing and health."""

import abc
import enum
import json
import logging
import re
import typing as t

from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from grocerywatch.core.config import Settings
from grocerywatch.schemas.content import NutritionFacts, Recipe
from grocerywatch.schemas.grocery_item import WastedItemValue
from grocerywatch.schemas.health import (
    HealthAnalysis,
    HealthFact,
    SugarRecommendations,
)

LOGGER: logging.Logger = logging.getLogger(__name__)


class ContentKind(str, enum.Enum):
    """Kinds of generated content."""

    RECIPE = "recipe"
    RECIPE_SUGGESTIONS = "recipe_suggestions"
    NUTRITION = "nutrition"
    HEALTH_FACTS = "health_facts"
    PRICING = "pricing"
    HEALTH_ANALYSIS = "health_analysis"
    SUGAR_RECOMMENDATIONS = "sugar_recommendations"


class GenerationUnavailableError(Exception):
    """Raised when content cannot be generated for any reason."""

    kind: ContentKind

    def __init__(self, kind: ContentKind, reason: str) -> None:
        """Initialize GenerationUnavailableError.

        Args:
            kind (ContentKind): The content that was requested.
            reason (str): Why generation failed.
        """
        self.kind = kind
        super().__init__(f"Cannot generate {kind.value}: {reason}")


RESULT_ADAPTERS: t.Dict[ContentKind, TypeAdapter[t.Any]] = {
    ContentKind.RECIPE: TypeAdapter(Recipe),
    ContentKind.RECIPE_SUGGESTIONS: TypeAdapter(t.List[Recipe]),
    ContentKind.NUTRITION: TypeAdapter(NutritionFacts),
    ContentKind.HEALTH_FACTS: TypeAdapter(t.List[HealthFact]),
    ContentKind.PRICING: TypeAdapter(t.List[WastedItemValue]),
    ContentKind.HEALTH_ANALYSIS: TypeAdapter(HealthAnalysis),
    ContentKind.SUGAR_RECOMMENDATIONS: TypeAdapter(SugarRecommendations),
}

# List results are sometimes wrapped in an object under one of these keys
LIST_KEYS: t.Dict[ContentKind, str] = {
    ContentKind.RECIPE_SUGGESTIONS: "recipes",
    ContentKind.HEALTH_FACTS: "facts",
    ContentKind.PRICING: "items",
}

RECIPE_FORMAT: str = (
    '{"title": str, "type": str, "ingredients": [{"name": str, '
    '"amount": str, "expiring": bool}], "steps": [str], "tips": str}'
)

PROMPTS: t.Dict[ContentKind, str] = {
    ContentKind.RECIPE: (
        "You are a professional chef. Create one practical recipe for the "
        "user's query that uses the available ingredients as much as "
        "possible. Mark an ingredient as expiring when it comes from the "
        f"available items. Respond with ONLY JSON: {RECIPE_FORMAT}"
    ),
    ContentKind.RECIPE_SUGGESTIONS: (
        "You are a professional chef. Suggest recipes that use up the "
        "expiring items, one recipe per item at most. Respond with ONLY "
        f'JSON: {{"recipes": [{RECIPE_FORMAT}]}}'
    ),
    ContentKind.NUTRITION: (
        "You are a nutrition expert. Estimate nutrition facts per 100 g of "
        "the prepared dish. Respond with ONLY JSON: {\"calories\": str, "
        '"protein": str, "carbs": str, "fats": str, "fiber": str, '
        '"vitamins": str}'
    ),
    ContentKind.HEALTH_FACTS: (
        "You are a sustainability and nutrition expert. Give the requested "
        "number of evidence-based facts about the topic with a credible "
        'source each. Respond with ONLY JSON: {"facts": [{"fact": str, '
        '"source": str, "impact": str}]}'
    ),
    ContentKind.PRICING: (
        "You are a grocery pricing expert. Estimate the current market "
        "price per unit of each wasted item and the total wasted amount "
        "(price x quantity), rounded to 2 decimals. Respond with ONLY "
        'JSON: {"items": [{"productName": str, "category": str, '
        '"quantity": int, "pricePerUnit": float, '
        '"totalWastedAmount": float}]}'
    ),
    ContentKind.HEALTH_ANALYSIS: (
        "You are a nutrition assistant. Assess health risks from the "
        "metrics and the active grocery inventory. Respond with ONLY JSON: "
        '{"riskLevel": "Low|Medium|High", "risks": [str], '
        '"recommendations": [str], "avoidItems": [str], '
        '"preferredItems": [str]}'
    ),
    ContentKind.SUGAR_RECOMMENDATIONS: (
        "You are a diabetes nutrition assistant. Classify the HbA1c "
        "reading as Normal (below 5.7), Prediabetes (5.7 to 6.4) or "
        "Diabetes (6.5 and above), name the high-sugar items in the "
        "active inventory and suggest low-sugar alternatives. Respond "
        'with ONLY JSON: {"hba1cRange": str, "summary": str, '
        '"highSugarItems": [str], "recommendations": [str], '
        '"alternatives": [str]}'
    ),
}

TEMPERATURES: t.Dict[ContentKind, float] = {
    ContentKind.RECIPE: 0.7,
    ContentKind.RECIPE_SUGGESTIONS: 0.7,
    ContentKind.HEALTH_FACTS: 0.7,
}

CODE_FENCE: re.Pattern[str] = re.compile(
    r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE
)


def extract_json(text: str) -> t.Any:
    """Decode the JSON document embedded in a model reply.

    Markdown code fences and prose around the first object or array are
    tolerated.

    Args:
        text (str): The raw reply.

    Raises:
        ValueError: If no JSON document can be decoded.

    Returns:
        Any: The decoded document.
    """
    candidate: str = text.strip()
    fenced: re.Match[str] | None = CODE_FENCE.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    starts: t.List[int] = [
        pos for pos in (candidate.find("{"), candidate.find("[")) if pos >= 0
    ]
    if not starts:
        raise ValueError("reply contains no JSON document")
    decoded, _ = json.JSONDecoder().raw_decode(candidate[min(starts):])
    return decoded


def coerce_result(kind: ContentKind, payload: t.Any) -> t.Any:
    """Validate a decoded payload into the typed result for a kind.

    Args:
        kind (ContentKind): The content kind.
        payload (Any): The decoded JSON document.

    Raises:
        GenerationUnavailableError: If the payload has the wrong shape.

    Returns:
        Any: The validated result.
    """
    list_key: str | None = LIST_KEYS.get(kind)
    if list_key is not None and isinstance(payload, dict):
        payload = payload.get(list_key, [payload])
    try:
        return RESULT_ADAPTERS[kind].validate_python(payload)
    except ValidationError as exc:
        raise GenerationUnavailableError(
            kind, f"malformed reply ({exc.error_count()} errors)"
        ) from exc


class ContentGenerator(abc.ABC):
    """Produces structured content for a kind and a context mapping."""

    @abc.abstractmethod
    async def generate(
        self, kind: ContentKind, context: t.Mapping[str, t.Any]
    ) -> t.Any:
        """Generate content.

        Args:
            kind (ContentKind): What to generate.
            context (Mapping[str, Any]): Inputs for the content kind.

        Raises:
            GenerationUnavailableError: On any failure.

        Returns:
            Any: The typed result for the kind.
        """


class NullContentGenerator(ContentGenerator):
    """Generator used when no model is configured; always unavailable."""

    async def generate(
        self, kind: ContentKind, context: t.Mapping[str, t.Any]
    ) -> t.Any:
        raise GenerationUnavailableError(kind, "no model configured")


class OpenAIContentGenerator(ContentGenerator):
    """Generate content with an OpenAI or Azure OpenAI chat model."""

    client: AsyncOpenAI
    model: str

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        """Initialize OpenAIContentGenerator.

        Args:
            client (AsyncOpenAI): The API client.
            model (str): Model or Azure deployment name.
        """
        self.client = client
        self.model = model

    async def generate(
        self, kind: ContentKind, context: t.Mapping[str, t.Any]
    ) -> t.Any:
        """Ask the model for content and validate its reply.

        Args:
            kind (ContentKind): What to generate.
            context (Mapping[str, Any]): Inputs, sent as JSON.

        Raises:
            GenerationUnavailableError: On API, decoding or shape errors.

        Returns:
            Any: The typed result for the kind.
        """
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": PROMPTS[kind]},
                    {
                        "role": "user",
                        "content": json.dumps(
                            to_jsonable_python(dict(context), by_alias=True)
                        ),
                    },
                ],
                temperature=TEMPERATURES.get(kind, 0.3),
                max_tokens=1500,
            )
        except OpenAIError as exc:
            raise GenerationUnavailableError(kind, str(exc)) from exc

        reply: str = (
            completion.choices[0].message.content
            if completion.choices
            else None
        ) or ""
        LOGGER.debug("Model reply for %s: %s", kind.value, reply)

        try:
            payload: t.Any = extract_json(reply)
        except ValueError as exc:
            raise GenerationUnavailableError(
                kind, f"reply is not JSON: {exc}"
            ) from exc

        return coerce_result(kind, payload)


def build_content_generator(settings: Settings) -> ContentGenerator:
    """Create the content generator for the configured provider.

    Args:
        settings (Settings): Application settings.

    Returns:
        ContentGenerator:
            An Azure OpenAI generator when an endpoint is configured, an
            OpenAI generator when only a key is set, else a null generator.
    """
    if not settings.openai_api_key:
        LOGGER.info("No OpenAI key configured, using offline content only")
        return NullContentGenerator()

    client: AsyncOpenAI
    if settings.azure_openai_endpoint:
        client = AsyncAzureOpenAI(
            api_key=settings.openai_api_key,
            azure_endpoint=settings.azure_openai_endpoint,
            api_version=settings.azure_openai_api_version,
            timeout=settings.openai_timeout_seconds,
        )
    else:
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout_seconds,
        )
    return OpenAIContentGenerator(client, settings.openai_model)
