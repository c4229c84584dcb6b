"""Attendance aggregator - historical check-in statistics per class slot.

Reads the Momence payroll export: a ZIP whose aggregate report
(momence-teachers-payroll-report-aggregate-combined*.csv) has one row per
class session, e.g.

    Class name,Class date,Location,Checked in,Participants,...
    Barre 57,"2025-08-25, 7:15 AM",Kwality House,12,14,...

Rows are grouped by the same join key the schedule board uses, so each
weekly slot (class, weekday, time, location) maps to the average of all its
past sessions.
"""

import csv
import io
import re
import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import BinaryIO

from src.schedule_analyzer.config import get_config
from src.schedule_analyzer.errors import ReportNotFoundError, StructuralParseError
from src.schedule_analyzer.keys import attendance_key
from src.schedule_analyzer.logging import get_logger
from src.schedule_analyzer.models import (
    AttendanceAggregate,
    AttendanceData,
    ClassOccurrence,
)
from src.schedule_analyzer.normalize import DEFAULT_NORMALIZER, Normalizer
from src.schedule_analyzer.utils import DAYS_ORDER, format_time, parse_time

log = get_logger(__name__)

# Report column -> AttendanceAggregate field
COUNTER_COLUMNS: dict[str, str] = {
    "Checked in": "total_checked_in",
    "Participants": "participants",
    "Late cancellations": "late_cancellations",
    "Non Paid Customers": "non_paid_customers",
    "Comps Checked In": "comps_checked_in",
}

# Accepted formats for the date part of "Class date"
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y",
    "%B %d %Y",
    "%a %b %d %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

ZipSource = bytes | str | Path | BinaryIO


def parse_report_date(text: str) -> date | None:
    """Parse the date part of the report's "Class date" column."""
    value = " ".join(text.replace(",", " ").split())
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_count(value: str | None) -> int:
    """Leading integer of a counter cell; 0 when missing or not a number."""
    if not value:
        return 0
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else 0


def find_report_entry(archive: zipfile.ZipFile, pattern: str) -> zipfile.ZipInfo:
    """Find the attendance report inside the export archive.

    Raises:
        ReportNotFoundError: If no file entry name contains the pattern.
    """
    needle = pattern.lower()
    for info in archive.infolist():
        if not info.is_dir() and needle in info.filename.lower():
            return info
    raise ReportNotFoundError(
        "Could not find the required attendance report file in the ZIP."
    )


def _row_occurrence(
    row: dict[str, str], normalizer: Normalizer
) -> ClassOccurrence | None:
    """Occurrence-shaped record for one report row, or None if it must be skipped."""
    class_name = normalizer.class_name(row.get("Class name") or "")
    class_date = (row.get("Class date") or "").strip()
    location_raw = (row.get("Location") or "").strip()
    if not class_name or not class_date or not location_raw:
        return None

    parts = class_date.split(",")
    if len(parts) < 2:
        log.debug("attendance_row_skipped", reason="no_time_part", class_date=class_date)
        return None

    session_date = parse_report_date(parts[0])
    if session_date is None:
        log.warning("attendance_row_skipped", reason="unparseable_date", class_date=class_date)
        return None

    time_raw = parts[1].strip()
    time = format_time(parse_time(time_raw))
    if not time:
        log.warning("attendance_row_skipped", reason="unparseable_time", time=time_raw)
        return None

    return ClassOccurrence(
        class_name=class_name,
        day=DAYS_ORDER[session_date.weekday()],
        time=time,
        location=normalizer.location(location_raw),
    )


def process_attendance_csv(
    csv_text: str, normalizer: Normalizer = DEFAULT_NORMALIZER
) -> dict[str, AttendanceData]:
    """Aggregate report rows into per-slot attendance statistics.

    Args:
        csv_text: Text of the aggregate report (header row first).
        normalizer: Name tables shared with the schedule extractor.

    Returns:
        Mapping of attendance key to finalized statistics.
    """
    try:
        rows = list(csv.DictReader(io.StringIO(csv_text.lstrip("\ufeff"))))
    except csv.Error as e:
        raise StructuralParseError(f"Error parsing attendance CSV: {e}") from e

    aggregates: dict[str, AttendanceAggregate] = {}
    skipped = 0
    for row in rows:
        occurrence = _row_occurrence(row, normalizer)
        if occurrence is None:
            skipped += 1
            continue

        key = attendance_key(occurrence)
        aggregate = aggregates.setdefault(key, AttendanceAggregate())
        for column, field in COUNTER_COLUMNS.items():
            setattr(aggregate, field, getattr(aggregate, field) + parse_count(row.get(column)))
        aggregate.total_classes += 1

    log.info(
        "attendance_aggregated",
        rows=len(rows),
        skipped=skipped,
        slots=len(aggregates),
    )
    return {key: aggregate.finalize() for key, aggregate in aggregates.items()}


def process_attendance_data(
    zip_source: ZipSource,
    normalizer: Normalizer = DEFAULT_NORMALIZER,
    report_pattern: str | None = None,
) -> dict[str, AttendanceData]:
    """Aggregate historical attendance from the Momence export ZIP.

    Args:
        zip_source: ZIP bytes, a path, or a binary file object.
        normalizer: Name tables shared with the schedule extractor.
        report_pattern: Filename fragment of the report entry
            (defaults to the configured attendance_report_pattern).

    Raises:
        ReportNotFoundError: If the archive has no matching report.
        StructuralParseError: If the archive or report cannot be read.
    """
    if report_pattern is None:
        report_pattern = get_config().attendance_report_pattern
    if isinstance(zip_source, bytes):
        zip_source = io.BytesIO(zip_source)

    try:
        with zipfile.ZipFile(zip_source) as archive:
            entry = find_report_entry(archive, report_pattern)
            raw = archive.read(entry)
    except zipfile.BadZipFile as e:
        raise StructuralParseError(f"Attendance upload is not a valid ZIP: {e}") from e

    log.info("attendance_report_found", entry=entry.filename, size=len(raw))
    return process_attendance_csv(raw.decode("utf-8-sig", errors="replace"), normalizer)
