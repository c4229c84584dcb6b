"""Shared weekday and time-of-day helpers."""

import re
from datetime import time

DAYS_ORDER: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_DAY_LOOKUP: dict[str, str] = {day.lower(): day for day in DAYS_ORDER}

# "9:00 AM", "9.00pm", "Starts 10:30 PM" - searched anywhere in the text
_AMPM_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
# "18:45" - the whole text must be the time
_HM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def canonical_day(label: str | None) -> str | None:
    """Return the canonical weekday name for a label, case-insensitively."""
    if not label:
        return None
    return _DAY_LOOKUP.get(label.strip().lower())


def day_index(day: str) -> int:
    """Position of a weekday in DAYS_ORDER; unknown labels sort last."""
    try:
        return DAYS_ORDER.index(day)
    except ValueError:
        return len(DAYS_ORDER)


def parse_time(text: str | None) -> time | None:
    """Parse a schedule time cell into a time of day.

    Accepts "H:MM AM/PM" (dots allowed instead of the colon) or a bare
    "H:MM" 24-hour value. Returns None when neither pattern matches or the
    numbers are out of range.
    """
    if not text:
        return None
    value = text.strip().upper().replace(".", ":")

    match = _AMPM_RE.search(value)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        meridiem = match.group(3).upper()
        if meridiem == "PM" and hour != 12:
            hour += 12
        if meridiem == "AM" and hour == 12:
            hour = 0
        return _build_time(hour, minute)

    match = _HM_RE.match(value)
    if match:
        return _build_time(int(match.group(1)), int(match.group(2)))

    return None


def _build_time(hour: int, minute: int) -> time | None:
    if 0 <= hour <= 23 and 0 <= minute <= 59:
        return time(hour, minute)
    return None


def format_time(value: time | None) -> str:
    """Render a time of day as "h:mm AM/PM" (e.g. "9:00 AM", "12:15 PM")."""
    if value is None:
        return ""
    meridiem = "AM" if value.hour < 12 else "PM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {meridiem}"
