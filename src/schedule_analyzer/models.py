"""Pydantic models for schedule and attendance data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
"""

from datetime import time as dtime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["beginner", "intermediate", "advanced"]
TimeOfDay = Literal["morning", "afternoon", "evening"]


class ClassOccurrence(BaseModel):
    """A single scheduled class on the weekly board.

    Built by the schedule extractor from one (data row, location column) pair
    of the wide schedule CSV. The attendance aggregator also builds
    occurrence-shaped records (only day/time/location/class_name filled in)
    to compute join keys.
    """

    day: str  # "Monday" ... "Sunday", or the raw day label if unrecognized
    time_raw: str = ""  # Cell text as written, e.g. "9.00 am"
    time: str = ""  # Canonical "9:00 AM", empty when time_raw is unparseable
    time_date: dtime | None = None  # Set iff time_raw is a recognized time
    location: str = ""
    class_name: str = ""
    trainer1: str = ""  # Cover trainer when a cover is present
    cover: str = ""  # Raw cover cell
    notes: str = ""  # Cover substitution narrative
    date: str = ""  # Date label from the row above the day row
    difficulty: Difficulty = "intermediate"
    unique_key: str = ""


# Weekday name -> occurrences sorted by time_date, in Monday..Sunday insertion order
ScheduleData = dict[str, list[ClassOccurrence]]


class AttendanceData(BaseModel):
    """Finalized attendance statistics for one class slot."""

    model_config = ConfigDict(frozen=True)

    avg_attendance: str  # total checked in / total classes, 2 decimals
    total_classes: int
    checked_in_count: int
    participants: int = 0
    late_cancellations: int = 0
    non_paid_customers: int = 0
    comps_checked_in: int = 0
    notes: str = ""


class AttendanceAggregate(BaseModel):
    """Running totals for one attendance key while the report is processed."""

    total_checked_in: int = 0
    total_classes: int = 0
    participants: int = 0
    late_cancellations: int = 0
    non_paid_customers: int = 0
    comps_checked_in: int = 0

    def finalize(self) -> AttendanceData:
        """Freeze the totals into AttendanceData.

        Raises:
            ValueError: If no rows contributed to this aggregate.
        """
        if self.total_classes < 1:
            raise ValueError("Cannot average attendance over zero classes")
        return AttendanceData(
            avg_attendance=f"{self.total_checked_in / self.total_classes:.2f}",
            total_classes=self.total_classes,
            checked_in_count=self.total_checked_in,
            participants=self.participants,
            late_cancellations=self.late_cancellations,
            non_paid_customers=self.non_paid_customers,
            comps_checked_in=self.comps_checked_in,
        )


class RawClassSchedule(BaseModel):
    """One class entry as returned by the AI extraction service.

    Field aliases match the camelCase keys of the AI response schema.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: str  # YYYY-MM-DD
    day: str
    time: str
    location: str | None = None
    class_name: str | None = Field(default=None, alias="className")
    trainer1: str | None = None
    trainer2: str | None = None
    cover: str | None = None
    status: Literal["Scheduled", "Canceled"] = "Scheduled"


class BusyTime(BaseModel):
    day: str
    time: str
    reason: str = ""


class ScheduleInsights(BaseModel):
    """Narrative analysis of the schedule returned by the AI service."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    trends: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    busy_times: list[BusyTime] = Field(default_factory=list, alias="busyTimes")
    improvements: list[str] = Field(default_factory=list)


class ScheduleFilters(BaseModel):
    """Board filters. Empty/None fields do not filter."""

    day: str | None = None
    location: str | None = None
    trainer: str | None = None
    class_name: str | None = None
    difficulty: Difficulty | None = None
    time_of_day: TimeOfDay | None = None


class ScheduleSummary(BaseModel):
    """Occurrence counts per location, trainer, day and class name."""

    by_location: list[tuple[str, int]] = Field(default_factory=list)
    by_trainer: list[tuple[str, int]] = Field(default_factory=list)
    by_day: list[tuple[str, int]] = Field(default_factory=list)
    by_class: list[tuple[str, int]] = Field(default_factory=list)


class UploadResult(BaseModel):
    """Outcome of processing an upload pair.

    Each source succeeds or fails on its own; a failed source leaves its
    result as None and records the message in the matching *_error field.
    """

    schedule: ScheduleData | None = None
    attendance: dict[str, AttendanceData] = Field(default_factory=dict)
    raw_schedule: list[RawClassSchedule] | None = None
    schedule_error: str | None = None
    attendance_error: str | None = None
    ai_error: str | None = None

    @property
    def ok(self) -> bool:
        """True when every attempted source succeeded."""
        return not (self.schedule_error or self.attendance_error or self.ai_error)
