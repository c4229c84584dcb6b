"""Join key correlating scheduled classes with attendance report rows.

Both the schedule extractor and the attendance aggregator key their records
through attendance_key(); any difference in normalization between the two
sides would make every lookup miss without raising.
"""

import re
from typing import Protocol

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


class KeyedClass(Protocol):
    class_name: str
    day: str
    time: str
    location: str


def _strip_punctuation(value: str) -> str:
    return _PUNCT_RE.sub("", value)


def _collapse_spaces(value: str) -> str:
    return _SPACE_RE.sub(" ", value)


def attendance_key(occurrence: KeyedClass | None) -> str:
    """Build "class|day|time|location" for a class occurrence.

    Example:
        "Studio Amped Up!", "Monday", "7:15 AM", "Kwality House, Kemps Corner"
        -> "studio amped up|monday|7:15 am|kwality house kemps corner"
    """
    if occurrence is None:
        return ""

    class_name = (occurrence.class_name or "").lower().strip()
    class_name = _collapse_spaces(_strip_punctuation(class_name)).strip()

    day = (occurrence.day or "").lower().strip()

    time = _collapse_spaces((occurrence.time or "").lower().strip())

    location = (occurrence.location or "").lower().strip()
    location = _strip_punctuation(location).strip()

    return f"{class_name}|{day}|{time}|{location}"
