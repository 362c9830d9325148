from datetime import date, datetime, timezone
from typing import Optional, Union


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime into a naive UTC datetime.

    Returns None when the value cannot be read as a calendar date.
    Bare dates resolve to midnight.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return to_naive_utc(parsed)


def format_utc(value: datetime) -> str:
    """Render as ISO-8601 UTC with millisecond precision, e.g. ``2024-01-15T00:00:00.000Z``."""
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"
