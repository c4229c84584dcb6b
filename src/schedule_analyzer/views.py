"""Data operations behind the board, summary and detail views.

Views never re-parse files: they work on the ScheduleData and attendance
map produced by the extractor and aggregator.
"""

from collections import Counter
from datetime import time

from src.schedule_analyzer.keys import attendance_key
from src.schedule_analyzer.models import (
    AttendanceData,
    ClassOccurrence,
    ScheduleData,
    ScheduleFilters,
    ScheduleSummary,
)
from src.schedule_analyzer.utils import DAYS_ORDER, day_index

NOON = time(12, 0)
EVENING = time(17, 0)


def all_classes(schedule: ScheduleData) -> list[ClassOccurrence]:
    """Flatten the schedule in Monday..Sunday order."""
    return [c for day in DAYS_ORDER for c in schedule.get(day, [])]


def time_of_day(value: time | None) -> str | None:
    """Bucket a class start: morning (<12:00), afternoon (<17:00) or evening."""
    if value is None:
        return None
    if value < NOON:
        return "morning"
    if value < EVENING:
        return "afternoon"
    return "evening"


def matches(occurrence: ClassOccurrence, filters: ScheduleFilters) -> bool:
    if filters.day and filters.day != occurrence.day:
        return False
    if filters.location and filters.location != occurrence.location:
        return False
    if filters.trainer and filters.trainer != occurrence.trainer1:
        return False
    if filters.class_name and filters.class_name != occurrence.class_name:
        return False
    if filters.difficulty and filters.difficulty != occurrence.difficulty:
        return False
    # Classes without a parsed time are never hidden by the time filter
    if filters.time_of_day and occurrence.time_date is not None:
        return time_of_day(occurrence.time_date) == filters.time_of_day
    return True


def filter_classes(
    schedule: ScheduleData, filters: ScheduleFilters | None = None
) -> list[ClassOccurrence]:
    """Classes that pass every set filter, in board order."""
    classes = all_classes(schedule)
    if filters is None:
        return classes
    return [c for c in classes if matches(c, filters)]


def filter_options(classes: list[ClassOccurrence]) -> dict[str, list[str]]:
    """Distinct non-empty values offered by each filter dropdown."""

    def distinct(attr: str) -> list[str]:
        return sorted({getattr(c, attr) for c in classes if getattr(c, attr)})

    return {
        "days": sorted({c.day for c in classes if c.day}, key=day_index),
        "locations": distinct("location"),
        "trainers": distinct("trainer1"),
        "class_names": distinct("class_name"),
        "difficulties": distinct("difficulty"),
    }


def _count_by(classes: list[ClassOccurrence], attr: str) -> list[tuple[str, int]]:
    counts = Counter(
        value for value in (getattr(c, attr) for c in classes) if value.strip()
    )
    # Counter keeps first-seen order, so ties stay in board order
    return sorted(counts.items(), key=lambda item: -item[1])


def summarize(schedule: ScheduleData) -> ScheduleSummary:
    """Occurrence counts for the summary cards."""
    classes = all_classes(schedule)
    return ScheduleSummary(
        by_location=_count_by(classes, "location"),
        by_trainer=_count_by(classes, "trainer1"),
        by_day=sorted(_count_by(classes, "day"), key=lambda item: day_index(item[0])),
        by_class=_count_by(classes, "class_name"),
    )


def group_by_day(classes: list[ClassOccurrence]) -> dict[str, list[ClassOccurrence]]:
    """Group (filtered) classes under their weekday, Monday first."""
    grouped: dict[str, list[ClassOccurrence]] = {}
    for c in classes:
        grouped.setdefault(c.day, []).append(c)
    return {day: grouped[day] for day in sorted(grouped, key=day_index)}


def group_by_class_name(
    classes: list[ClassOccurrence],
) -> dict[str, list[ClassOccurrence]]:
    """Group classes by class name, names sorted alphabetically."""
    grouped: dict[str, list[ClassOccurrence]] = {}
    for c in classes:
        grouped.setdefault(c.class_name, []).append(c)
    return {name: grouped[name] for name in sorted(grouped)}


def lookup_attendance(
    attendance: dict[str, AttendanceData], occurrence: ClassOccurrence
) -> AttendanceData | None:
    """Historical statistics for a scheduled class, None if never recorded."""
    return attendance.get(attendance_key(occurrence))
