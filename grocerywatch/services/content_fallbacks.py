"""Deterministic offline content used when generation is unavailable."""

import typing as t

from grocerywatch.core.models import ItemCategory, ItemStatus
from grocerywatch.schemas.content import (
    NutritionFacts,
    Recipe,
    RecipeIngredient,
)
from grocerywatch.schemas.grocery_item import GroceryItemRecord, WastedItemValue
from grocerywatch.schemas.health import (
    HealthAnalysis,
    HealthFact,
    HealthMetricsResponse,
    SugarRecommendations,
)

DEFAULT_PRICE_PER_UNIT: float = 2.50

PRICE_PER_UNIT: t.Dict[ItemCategory, float] = {
    ItemCategory.MEAT: 6.00,
    ItemCategory.DAIRY: 3.50,
    ItemCategory.FRUITS: 2.00,
    ItemCategory.VEGETABLES: 2.00,
    ItemCategory.GRAINS: 2.75,
    ItemCategory.PANTRY: 2.75,
    ItemCategory.BEVERAGES: 2.25,
}

HIGH_SUGAR_KEYWORDS: t.Tuple[str, ...] = ("juice", "soda", "candy")
HIGH_FAT_KEYWORDS: t.Tuple[str, ...] = ("butter", "cheese", "cream")

SUGAR_RICH_FOODS: t.Tuple[str, ...] = (
    "sugar", "honey", "maple syrup", "agave", "molasses",
    "candy", "chocolate", "cookies", "cake", "donuts",
    "soda", "juice", "energy drinks", "sports drinks",
    "ice cream", "frozen yogurt", "pudding", "jelly",
    "jam", "marmalade", "sweetened yogurt", "cereal",
    "granola bars", "trail mix", "dried fruits",
    "white bread", "white rice", "pasta", "potatoes",
    "bananas", "grapes", "mangoes", "pineapple",
)

SUGAR_FRIENDLY_ALTERNATIVES: t.Tuple[str, ...] = (
    "Fresh vegetables (broccoli, spinach, kale)",
    "Lean proteins (chicken, fish, tofu)",
    "Whole grains (quinoa, brown rice, oats)",
    "Nuts and seeds (almonds, walnuts, chia seeds)",
    "Berries (strawberries, blueberries, raspberries)",
)

HEALTH_FACTS: t.Tuple[HealthFact, ...] = (
    HealthFact(
        fact=(
            "1.3 billion tons of food is wasted globally each year, while "
            "820 million people go hungry"
        ),
        source="United Nations Food and Agriculture Organization",
        impact="Global food security crisis",
    ),
    HealthFact(
        fact=(
            "Food waste accounts for 8% of global greenhouse gas emissions, "
            "contributing to climate change"
        ),
        source="United Nations Environment Programme",
        impact="Environmental degradation",
    ),
    HealthFact(
        fact=(
            "The average household wastes 30-40% of purchased food, costing "
            "families $1,500 annually"
        ),
        source="USDA Economic Research Service",
        impact="Economic burden on families",
    ),
    HealthFact(
        fact=(
            "Proper meal planning and grocery management can reduce food "
            "waste by up to 50%"
        ),
        source="Harvard School of Public Health",
        impact="Sustainable living potential",
    ),
    HealthFact(
        fact=(
            "Consuming expired or spoiled food leads to 48 million foodborne "
            "illnesses annually in the US alone"
        ),
        source="Centers for Disease Control and Prevention",
        impact="Public health risk",
    ),
)


def _has_product(items: t.Sequence[GroceryItemRecord], keyword: str) -> bool:
    return any(keyword in item.product_name.lower() for item in items)


def _has_category(
    items: t.Sequence[GroceryItemRecord], category: ItemCategory
) -> bool:
    return any(item.category == category for item in items)


def _as_ingredient(item: GroceryItemRecord) -> RecipeIngredient:
    unit: str = "pieces" if item.quantity > 1 else "piece"
    return RecipeIngredient(
        name=item.product_name,
        amount=f"{item.quantity} {unit}",
        expiring=True,
    )


def _chicken_recipe(items: t.Sequence[GroceryItemRecord]) -> Recipe:
    return Recipe(
        title="Simple Chicken Stir-Fry",
        type="Main Course",
        ingredients=[
            RecipeIngredient(
                name="Chicken",
                amount="1 lb, diced",
                expiring=_has_product(items, "chicken"),
            ),
            RecipeIngredient(
                name="Vegetables",
                amount="2 cups mixed",
                expiring=_has_category(items, ItemCategory.VEGETABLES),
            ),
            RecipeIngredient(name="Oil", amount="2 tbsp"),
            RecipeIngredient(name="Soy Sauce", amount="3 tbsp"),
        ],
        steps=[
            "Heat oil in a large pan over medium-high heat",
            "Add diced chicken and cook until golden brown",
            "Add vegetables and stir-fry for 3-4 minutes",
            "Add soy sauce and cook for another 2 minutes",
            "Serve hot over rice or noodles",
        ],
        tips="Cut chicken into uniform pieces for even cooking",
    )


def _pasta_recipe(items: t.Sequence[GroceryItemRecord]) -> Recipe:
    return Recipe(
        title="Quick Pasta Delight",
        type="Main Course",
        ingredients=[
            RecipeIngredient(
                name="Pasta",
                amount="8 oz",
                expiring=_has_product(items, "pasta"),
            ),
            RecipeIngredient(
                name="Tomatoes",
                amount="2 medium, diced",
                expiring=_has_product(items, "tomato"),
            ),
            RecipeIngredient(
                name="Garlic",
                amount="3 cloves, minced",
                expiring=_has_product(items, "garlic"),
            ),
            RecipeIngredient(name="Olive Oil", amount="3 tbsp"),
        ],
        steps=[
            "Cook pasta according to package instructions",
            "Heat olive oil in a pan and sauté garlic",
            "Add diced tomatoes and cook until soft",
            "Toss cooked pasta with the sauce",
            "Season with salt and pepper to taste",
        ],
        tips="Reserve some pasta water to help the sauce stick better",
    )


def _salad_recipe(items: t.Sequence[GroceryItemRecord]) -> Recipe:
    return Recipe(
        title="Fresh Garden Salad",
        type="Appetizer",
        ingredients=[
            RecipeIngredient(
                name="Lettuce",
                amount="1 head, chopped",
                expiring=_has_product(items, "lettuce"),
            ),
            RecipeIngredient(
                name="Tomatoes",
                amount="2 medium, sliced",
                expiring=_has_product(items, "tomato"),
            ),
            RecipeIngredient(
                name="Cucumber",
                amount="1 medium, sliced",
                expiring=_has_product(items, "cucumber"),
            ),
            RecipeIngredient(name="Olive Oil", amount="2 tbsp"),
            RecipeIngredient(name="Lemon Juice", amount="1 tbsp"),
        ],
        steps=[
            "Wash and chop all vegetables",
            "Combine lettuce, tomatoes, and cucumber in a bowl",
            "Whisk together olive oil and lemon juice",
            "Drizzle dressing over salad and toss gently",
            "Serve immediately",
        ],
        tips="Add dressing just before serving to keep vegetables crisp",
    )


KEYWORD_RECIPES: t.Tuple[
    t.Tuple[str, t.Callable[[t.Sequence[GroceryItemRecord]], Recipe]], ...
] = (
    ("chicken", _chicken_recipe),
    ("pasta", _pasta_recipe),
    ("salad", _salad_recipe),
)


def fallback_recipe(context: t.Mapping[str, t.Any]) -> Recipe:
    """Pick the offline recipe matching the query.

    Args:
        context (Mapping[str, Any]):
            ``query`` and ``available_items``.

    Returns:
        Recipe: The first keyword match, chicken stir-fry otherwise.
    """
    query: str = str(context.get("query", "")).lower()
    items: t.Sequence[GroceryItemRecord] = context.get("available_items", [])
    for keyword, build in KEYWORD_RECIPES:
        if keyword in query:
            return build(items)
    return _chicken_recipe(items)


def fallback_recipe_suggestions(
    context: t.Mapping[str, t.Any],
) -> t.List[Recipe]:
    """Build recipes from the categories of the expiring items.

    Args:
        context (Mapping[str, Any]): ``expiring_items``.

    Returns:
        List[Recipe]: At least one recipe.
    """
    expiring: t.Sequence[GroceryItemRecord] = context.get(
        "expiring_items", []
    )

    def in_category(category: ItemCategory) -> t.List[RecipeIngredient]:
        return [
            _as_ingredient(item)
            for item in expiring
            if item.category == category
        ]

    dairy = in_category(ItemCategory.DAIRY)
    vegetables = in_category(ItemCategory.VEGETABLES)
    fruits = in_category(ItemCategory.FRUITS)
    meat = in_category(ItemCategory.MEAT)

    suggestions: t.List[Recipe] = []
    if dairy and vegetables:
        suggestions.append(
            Recipe(
                title="Creamy Vegetable Soup",
                type="Soup",
                ingredients=dairy
                + vegetables
                + [
                    RecipeIngredient(name="Onions", amount="1 medium"),
                    RecipeIngredient(name="Garlic", amount="2 cloves"),
                    RecipeIngredient(name="Salt", amount="to taste"),
                    RecipeIngredient(name="Black pepper", amount="to taste"),
                ],
                steps=[
                    "Chop all vegetables into small pieces",
                    "Heat oil in a large pot and sauté onions and garlic",
                    "Add vegetables and cook until tender",
                    "Add dairy products and mix well",
                    "Add water or stock and bring to a boil",
                    "Simmer for 15-20 minutes",
                    "Season with salt and pepper",
                    "Blend until smooth and serve hot",
                ],
                tips=(
                    "This soup is perfect for using up expiring dairy and "
                    "vegetables. You can also add herbs for extra flavor."
                ),
            )
        )

    if fruits:
        suggestions.append(
            Recipe(
                title="Fresh Fruit Smoothie",
                type="Beverage",
                ingredients=fruits
                + [
                    RecipeIngredient(name="Yogurt", amount="1 cup"),
                    RecipeIngredient(name="Honey", amount="2 tbsp"),
                    RecipeIngredient(name="Ice cubes", amount="1/2 cup"),
                ],
                steps=[
                    "Wash and chop all fruits",
                    "Add fruits to a blender",
                    "Add yogurt and honey",
                    "Add ice cubes and blend until smooth",
                    "Taste and adjust sweetness if needed",
                    "Pour into glasses and serve immediately",
                ],
                tips=(
                    "This smoothie is a great way to use up expiring fruits. "
                    "You can also freeze it for later use."
                ),
            )
        )

    if meat and vegetables:
        suggestions.append(
            Recipe(
                title="Quick Stir-Fry",
                type="Main Course",
                ingredients=meat
                + vegetables
                + [
                    RecipeIngredient(name="Soy sauce", amount="2 tbsp"),
                    RecipeIngredient(name="Garlic", amount="2 cloves"),
                    RecipeIngredient(name="Ginger", amount="1 inch piece"),
                    RecipeIngredient(name="Oil", amount="2 tbsp"),
                ],
                steps=[
                    "Cut meat and vegetables into bite-sized pieces",
                    "Heat oil in a wok or large pan",
                    "Add garlic and ginger, cook for 30 seconds",
                    "Add meat and cook until almost done",
                    "Add vegetables and stir-fry for 3-4 minutes",
                    "Add soy sauce and mix well",
                    "Cook for another 2-3 minutes",
                    "Serve hot with rice or noodles",
                ],
                tips=(
                    "This stir-fry is perfect for using up expiring meat and "
                    "vegetables. Cook on high heat for best results."
                ),
            )
        )

    if not suggestions:
        suggestions.append(
            Recipe(
                title="Everything-But-The-Kitchen-Sink Recipe",
                type="Main Course",
                ingredients=[_as_ingredient(item) for item in expiring]
                + [
                    RecipeIngredient(name="Salt", amount="to taste"),
                    RecipeIngredient(name="Pepper", amount="to taste"),
                    RecipeIngredient(name="Oil", amount="2 tbsp"),
                ],
                steps=[
                    "Gather all your expiring ingredients",
                    "Chop or prepare ingredients as needed",
                    "Heat oil in a large pan or pot",
                    "Add ingredients in order of cooking time (hardest first)",
                    "Cook until all ingredients are tender",
                    "Season with salt and pepper",
                    "Mix well and serve hot",
                    "Enjoy your creative dish!",
                ],
                tips=(
                    "This recipe is designed to use up all your expiring "
                    "items. Feel free to add spices or herbs you have on "
                    "hand."
                ),
            )
        )

    return suggestions


def fallback_nutrition(context: t.Mapping[str, t.Any]) -> NutritionFacts:
    """Rough per-100 g ranges by recipe type.

    Args:
        context (Mapping[str, Any]): ``recipe``.

    Returns:
        NutritionFacts: Range estimates.
    """
    recipe: Recipe | None = context.get("recipe")
    recipe_type: str = (recipe.type if recipe else "").lower()

    if "dessert" in recipe_type:
        return NutritionFacts(
            calories="300-400",
            protein="4-6",
            carbs="45-60",
            fats="12-18",
            fiber="1-2",
            vitamins="Vitamin A, C",
        )
    if "salad" in recipe_type:
        return NutritionFacts(
            calories="80-120",
            protein="3-5",
            carbs="10-15",
            fats="4-6",
            fiber="3-5",
            vitamins="Vitamin A, C, K",
        )
    if "soup" in recipe_type:
        return NutritionFacts(
            calories="100-150",
            protein="6-10",
            carbs="15-25",
            fats="3-6",
            fiber="2-4",
            vitamins="Vitamin A, C, B6",
        )
    return NutritionFacts(
        calories="150-200",
        protein="8-12",
        carbs="20-30",
        fats="5-8",
        fiber="2-4",
        vitamins="Vitamin C, B6, Folate",
    )


def fallback_health_facts(context: t.Mapping[str, t.Any]) -> t.List[HealthFact]:
    """The fixed food-waste facts, truncated to ``count``."""
    count: int = int(context.get("count", len(HEALTH_FACTS)))
    return list(HEALTH_FACTS[: max(count, 0)])


def fallback_pricing(context: t.Mapping[str, t.Any]) -> t.List[WastedItemValue]:
    """Price each item with the per-category table.

    Args:
        context (Mapping[str, Any]): ``items``.

    Returns:
        List[WastedItemValue]: One entry per item, in input order.
    """
    values: t.List[WastedItemValue] = []
    for item in context.get("items", []):
        price: float = PRICE_PER_UNIT.get(item.category, DEFAULT_PRICE_PER_UNIT)
        values.append(
            WastedItemValue(
                product_name=item.product_name,
                category=item.category.value,
                quantity=item.quantity,
                price_per_unit=price,
                total_wasted_amount=round(item.quantity * price, 2),
            )
        )
    return values


def fallback_health_analysis(
    context: t.Mapping[str, t.Any],
) -> HealthAnalysis:
    """Threshold rules over the latest metrics and the active inventory.

    Args:
        context (Mapping[str, Any]): ``metrics`` and ``available_items``.

    Returns:
        HealthAnalysis: Risk level, risks and item advice.
    """
    metrics: HealthMetricsResponse = context.get(
        "metrics"
    ) or HealthMetricsResponse()
    active: t.List[GroceryItemRecord] = [
        item
        for item in context.get("available_items", [])
        if item.status == ItemStatus.ACTIVE
    ]

    risk_level: str = "Low"
    risks: t.List[str] = []
    recommendations: t.List[str] = []

    sugar: float = metrics.sugar_level or 0
    if sugar > 126:
        risk_level = "High"
        risks.append("High blood sugar levels detected")
        recommendations.append("Monitor blood sugar levels regularly")
    elif sugar > 100:
        risk_level = "Medium"
        risks.append("Elevated blood sugar levels")
        recommendations.append("Consider reducing sugar intake")

    if (metrics.cholesterol or 0) > 200:
        risk_level = "High"
        risks.append("High cholesterol levels")
        recommendations.append(
            "Limit saturated fats and increase fiber intake"
        )

    if (metrics.blood_pressure_systolic or 0) > 140 or (
        metrics.blood_pressure_diastolic or 0
    ) > 90:
        risk_level = "High"
        risks.append("High blood pressure")
        recommendations.append(
            "Reduce sodium intake and increase physical activity"
        )

    high_sugar = [
        item
        for item in active
        if any(k in item.product_name.lower() for k in HIGH_SUGAR_KEYWORDS)
    ]
    high_fat = [
        item
        for item in active
        if any(k in item.product_name.lower() for k in HIGH_FAT_KEYWORDS)
    ]
    avoid_items: t.List[str] = [
        f"{item.product_name}: High sugar content can affect blood sugar "
        "levels"
        for item in high_sugar[:2]
    ] + [
        f"{item.product_name}: High saturated fat content can affect "
        "cholesterol levels"
        for item in high_fat[:1]
    ]

    return HealthAnalysis(
        risk_level=risk_level,
        risks=risks,
        recommendations=recommendations,
        avoid_items=avoid_items[:3],
        preferred_items=[
            "Leafy Greens: Low in calories and high in nutrients",
            "Whole Grains: High in fiber, helps manage blood sugar",
            "Lean Proteins: Essential for muscle health and satiety",
        ],
    )


def fallback_sugar_recommendations(
    context: t.Mapping[str, t.Any],
) -> SugarRecommendations:
    """HbA1c range advice plus the sugar-rich items still in stock.

    Args:
        context (Mapping[str, Any]): ``hba1c`` and ``available_items``.

    Returns:
        SugarRecommendations: Range, flagged items and alternatives.
    """
    hba1c: float = context.get("hba1c") or 0
    if hba1c >= 6.5:
        hba1c_range, summary = (
            "Diabetes",
            "Diabetes range detected - strict sugar control recommended.",
        )
    elif hba1c >= 5.7:
        hba1c_range, summary = (
            "Prediabetes",
            "Prediabetes range - monitor sugar intake carefully.",
        )
    else:
        hba1c_range, summary = (
            "Normal",
            "Normal range - maintain healthy eating habits.",
        )

    flagged: t.List[str] = [
        f"{item.product_name} ({item.category.value})"
        for item in context.get("available_items", [])
        if item.status == ItemStatus.ACTIVE
        and any(
            food in item.product_name.lower() for food in SUGAR_RICH_FOODS
        )
    ]
    recommendations: t.List[str] = (
        [
            "Limit consumption of these items",
            "Consider sugar-free alternatives",
            "Monitor portion sizes",
            "Check nutrition labels for added sugars",
        ]
        if flagged
        else ["No high-sugar items detected in your current inventory"]
    )

    return SugarRecommendations(
        hba1c_range=hba1c_range,
        summary=summary,
        high_sugar_items=flagged,
        recommendations=recommendations,
        alternatives=list(SUGAR_FRIENDLY_ALTERNATIVES),
    )
