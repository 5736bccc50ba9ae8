"""
Date parsing/formatting for API payloads
"""
from datetime import date, datetime, timezone

_MONTHS_SHORT = [
    "Ene", "Feb", "Mar", "Abr", "May", "Jun",
    "Jul", "Ago", "Sep", "Oct", "Nov", "Dic",
]


def parse_datetime(value) -> datetime | None:
    """
    Parse an API date ("2024-01-01", "2024-01-01T10:00:00Z", datetime, date)

    Naive values are taken as UTC so every result is comparable.

    Returns:
        Aware datetime, or None if value is empty / not a date
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_short_date(value) -> str:
    """
    "2024-03-05" -> "5 Mar, 2024"
    """
    parsed = parse_datetime(value)
    if parsed is None:
        return "Fecha no disponible"
    return f"{parsed.day} {_MONTHS_SHORT[parsed.month - 1]}, {parsed.year}"
