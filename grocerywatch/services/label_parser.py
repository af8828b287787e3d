"""Best-effort extraction of item fields from recognised label text."""

import abc
import logging
import re
import typing as t
from datetime import date

from grocerywatch.core.models import ItemCategory
from grocerywatch.schemas.grocery_item import LabelGuess
from grocerywatch.utils.dates import today

LOGGER: logging.Logger = logging.getLogger(__name__)

SKIP_PATTERNS: t.Tuple[re.Pattern[str], ...] = (
    re.compile(r"expiry|exp|best before|use by|sell by", re.IGNORECASE),
    re.compile(r"net weight|weight|qty|quantity", re.IGNORECASE),
    re.compile(r"ingredients|nutrition", re.IGNORECASE),
    re.compile(r"manufactured|packed|distributed", re.IGNORECASE),
    re.compile(r"^\d+[/\-.]\d+[/\-.]\d+$"),
    re.compile(r"^\d+\s*(g|kg|lb|lbs|oz|ml|l)$", re.IGNORECASE),
    re.compile(r"^[0-9\s/\-.]+$"),
)

DATE_TOKEN: str = r"(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4}|\d{2})\b"
DATE_PATTERNS: t.Tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:expiry|exp|best before|use by|sell by)[\s:]*" + DATE_TOKEN,
        re.IGNORECASE,
    ),
    re.compile(r"\b" + DATE_TOKEN),
)

QUANTITY_PATTERNS: t.Tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:qty|quantity|count)[\s:]*(\d+)\b", re.IGNORECASE),
    re.compile(r"\b(\d+)\s*(?:pack|count|pieces|pcs|items)\b", re.IGNORECASE),
)

CATEGORY_KEYWORDS: t.Dict[ItemCategory, t.Tuple[str, ...]] = {
    ItemCategory.FRUITS: (
        "apple", "banana", "orange", "grape", "strawberry", "blueberry",
        "mango", "pineapple", "kiwi", "lemon", "lime", "peach", "pear",
        "cherry", "watermelon", "melon", "avocado", "berry", "citrus",
    ),
    ItemCategory.VEGETABLES: (
        "carrot", "potato", "tomato", "onion", "lettuce", "spinach",
        "broccoli", "cauliflower", "cabbage", "pepper", "cucumber", "celery",
        "mushroom", "corn", "bean", "pea", "asparagus", "zucchini",
        "eggplant",
    ),
    ItemCategory.DAIRY: (
        "milk", "cheese", "yogurt", "butter", "cream", "dairy", "mozzarella",
        "cheddar", "parmesan", "gouda", "swiss", "brie", "feta",
    ),
    ItemCategory.MEAT: (
        "chicken", "beef", "pork", "lamb", "turkey", "fish", "salmon",
        "tuna", "meat", "steak", "bacon", "sausage", "ham", "deli",
    ),
    ItemCategory.GRAINS: (
        "bread", "rice", "pasta", "cereal", "oats", "quinoa", "barley",
        "wheat", "flour", "grain", "bagel", "muffin", "croissant",
    ),
    ItemCategory.BEVERAGES: (
        "juice", "soda", "water", "coffee", "tea", "beer", "wine", "drink",
        "beverage", "smoothie",
    ),
    ItemCategory.SNACKS: (
        "chips", "crackers", "nuts", "cookies", "candy", "chocolate",
        "popcorn", "snack", "pretzel", "trail mix",
    ),
    ItemCategory.FROZEN: ("frozen", "ice cream"),
    ItemCategory.PANTRY: (
        "oil", "vinegar", "salt", "sugar", "spice", "herb", "sauce",
        "condiment", "honey", "syrup", "jam", "jelly",
    ),
}


class LabelExtractor(abc.ABC):  # pylint: disable=too-few-public-methods
    """Turns raw label content into a partial item."""

    @abc.abstractmethod
    def extract(self, raw: str) -> LabelGuess:
        """Extract whatever fields can be recognised.

        Args:
            raw (str): The label content.

        Returns:
            LabelGuess: Recognised fields; missing ones are ``None``.
        """


class TextLabelExtractor(LabelExtractor):
    """Parse text already produced by OCR."""

    reference_day: t.Callable[[], date]

    def __init__(self, reference_day: t.Callable[[], date] = today) -> None:
        """Initialize TextLabelExtractor.

        Args:
            reference_day (Callable[[], date]):
                Supplies the century for two-digit years.
        """
        self.reference_day = reference_day

    def extract(self, raw: str) -> LabelGuess:
        lines: t.List[str] = [
            line.strip() for line in raw.splitlines() if line.strip()
        ]
        if not lines:
            return LabelGuess()

        flat: str = " ".join(raw.split()).lower()
        product_name: str = self._product_name(lines)

        guess: LabelGuess = LabelGuess(
            product_name=product_name,
            expiry_date=self._expiry_date(flat),
            quantity=self._quantity(flat),
            category=self._category(product_name.lower(), flat),
        )
        LOGGER.debug("Parsed label: %s", guess)
        return guess

    @staticmethod
    def _product_name(lines: t.Sequence[str]) -> str:
        best: str = ""
        for line in lines:
            if any(pattern.search(line) for pattern in SKIP_PATTERNS):
                continue
            if len(line) > 3 and len(line) > len(best):
                best = line
        return best or lines[0]

    def _expiry_date(self, flat: str) -> date | None:
        century: int = self.reference_day().year // 100 * 100
        for pattern in DATE_PATTERNS:
            for match in pattern.finditer(flat):
                month, day, year = (int(part) for part in match.groups())
                if year < 100:
                    year += century
                try:
                    return date(year, month, day)
                except ValueError:
                    continue
        return None

    @staticmethod
    def _quantity(flat: str) -> int | None:
        for pattern in QUANTITY_PATTERNS:
            match: re.Match[str] | None = pattern.search(flat)
            if match and int(match.group(1)) >= 1:
                return int(match.group(1))
        return None

    @staticmethod
    def _category(product_name: str, flat: str) -> ItemCategory:
        for text in (product_name, flat):
            for category, keywords in CATEGORY_KEYWORDS.items():
                if any(keyword in text for keyword in keywords):
                    return category
        return ItemCategory.OTHER
