"""Date utilities."""

import typing as t
from datetime import date, datetime

DateLike = t.Union[date, datetime, str]

LABEL_DATE_FORMATS: t.Tuple[str, ...] = ("%m/%d/%Y", "%m/%d/%y")


class InvalidDateError(ValueError):
    """Raised when a value cannot be interpreted as a calendar date."""

    value: t.Any

    def __init__(self, value: t.Any) -> None:
        """Initialize InvalidDateError.

        Args:
            value (Any): The value that failed to parse.
        """
        self.value = value
        super().__init__(f"Invalid date: {value!r}")


def today() -> date:
    """Return the current calendar day.

    Returns:
        date: Today's date in local time.
    """
    return date.today()


def parse_date(value: DateLike) -> date:
    """Interpret a value as a calendar date, ignoring any time of day.

    Args:
        value (DateLike):
            A date, a datetime, an ISO 8601 string or a label-style
            ``MM/DD/YYYY`` string.

    Raises:
        InvalidDateError: If the value cannot be parsed.

    Returns:
        date: The calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(value)

    text: str = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in LABEL_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise InvalidDateError(value)


def calculate_days_until_expiration(expiry_date: date, reference: date) -> int:
    """Calculate the number of whole days until the expiry date.

    Args:
        expiry_date (date): The expiry date.
        reference (date): The day counted from.

    Returns:
        int: Days left; negative once the expiry date has passed.
    """
    return (expiry_date - reference).days
