"""Schedule analyzer for the studio class schedule and Momence attendance exports.

Parses the weekly schedule CSV and the attendance ZIP, normalizes trainer,
class and location names, and joins each scheduled class to its historical
attendance.
"""

from src.schedule_analyzer.attendance import process_attendance_data
from src.schedule_analyzer.extractor import extract_schedule_data
from src.schedule_analyzer.keys import attendance_key
from src.schedule_analyzer.models import (
    AttendanceData,
    ClassOccurrence,
    ScheduleData,
    ScheduleFilters,
)
from src.schedule_analyzer.normalize import (
    normalize_class_name,
    normalize_location,
    normalize_trainer_name,
)
from src.schedule_analyzer.pipeline import process_uploads

__all__ = [
    "extract_schedule_data",
    "process_attendance_data",
    "process_uploads",
    "attendance_key",
    "normalize_class_name",
    "normalize_location",
    "normalize_trainer_name",
    "AttendanceData",
    "ClassOccurrence",
    "ScheduleData",
    "ScheduleFilters",
]
