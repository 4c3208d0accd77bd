"""Timestamp parsing utilities."""

from datetime import datetime, timedelta, UTC
from dateutil import parser as date_parser


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp string into an aware UTC datetime.

    Supports:
    - Relative words: "now", "today" (midnight), "yesterday" (midnight)
    - Relative offsets: "3 days ago", "2 hours ago"
    - Absolute dates and times: "2024-01-15", "2024-01-15T08:30:00-06:00",
      "January 15, 2024 8:30"

    Naive absolute values are taken as UTC.

    Args:
        value: Timestamp string

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If the string cannot be parsed
    """
    text = value.strip().lower()
    now = datetime.now(UTC)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    relative = {
        "now": now,
        "today": midnight,
        "yesterday": midnight - timedelta(days=1),
    }
    if text in relative:
        return relative[text]

    # Handle "<n> <unit> ago"
    parts = text.split()
    if len(parts) == 3 and parts[2] == "ago":
        try:
            count = int(parts[0])
        except ValueError:
            raise ValueError(f"Could not parse timestamp '{value}'")
        unit = parts[1].rstrip("s")
        units = {"minute": "minutes", "hour": "hours", "day": "days", "week": "weeks"}
        if unit not in units:
            raise ValueError(f"Unknown unit '{parts[1]}' in '{value}'")
        return now - timedelta(**{units[unit]: count})

    try:
        parsed = date_parser.parse(value.strip())
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse timestamp '{value}': {e}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_date(value: str):
    """Parse a date string (absolute or relative) into a date."""
    return parse_timestamp(value).date()
