"""Helpers for turning extracted date and time text into UTC instants."""

import re
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

TIME_TEXT_PATTERN = re.compile(
    r"^\s*(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*([ap])?\.?\s*(m)?\.?\s*$",
    re.IGNORECASE,
)

# Formats tried, in order, for free-form date strings
_DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
]

_DATE_TIME_SPLIT = re.compile(r"^(.*?\d{4})(?:[T ,]+|\s+at\s+)(\d{1,2}(?::\d{2}){0,2}\s*(?:[ap]\.?m\.?)?)\s*$", re.IGNORECASE)


def month_number(name: str) -> Optional[int]:
    return MONTHS.get(name.lower().rstrip("."))


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_time_text(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a clock time such as ``8 pm``, ``8:30 p.m.`` or ``20:15``.

    Returns:
        (hour, minute) in 24-hour form, or None when the text is not a valid time
    """
    if not value:
        return None
    lowered = value.strip().lower()
    if lowered == "midnight":
        return (0, 0)
    if lowered == "noon":
        return (12, 0)

    match = TIME_TEXT_PATTERN.match(lowered)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = match.group(4)

    if minute > 59:
        return None
    if meridiem:
        if hour < 1 or hour > 12:
            return None
        if meridiem == "p" and hour < 12:
            hour += 12
        elif meridiem == "a" and hour == 12:
            hour = 0
    elif hour > 23:
        return None
    elif match.group(2) is None:
        # a bare number is not a time
        return None

    return (hour, minute)


def combine_date_time(day: Optional[date], clock: Optional[Tuple[int, int]] = None) -> Optional[datetime]:
    """Combine a calendar date and optional clock time into a UTC instant (00:00 by default)."""
    if day is None:
        return None
    hour, minute = clock or (0, 0)
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date_text(value: str) -> Optional[date]:
    cleaned = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", value.strip())
    cleaned = cleaned.replace("Sept ", "Sep ")
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime_value(value: Optional[str]) -> Optional[datetime]:
    """Parse a free-form date/time string into a UTC instant.

    Accepts ISO 8601 (with or without offset), common US and long-form dates,
    and either of those followed by a clock time. Anything else, including
    relative expressions like "last Tuesday", yields None.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()

    try:
        return to_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    day = parse_date_text(text)
    if day is not None:
        return combine_date_time(day)

    match = _DATE_TIME_SPLIT.match(text)
    if match:
        day = parse_date_text(match.group(1))
        clock = parse_time_text(match.group(2))
        if day is not None and clock is not None:
            return combine_date_time(day, clock)

    return None
