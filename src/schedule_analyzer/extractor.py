"""Schedule extractor - turns the studio's weekly schedule CSV into class occurrences.

Sheet layout (exported from the shared planning spreadsheet):
  row  date row   ->  , 25 Aug 2025 ,,,,, 26 Aug 2025 ,,,,
  row  day row    ->  , Monday      ,,,,, Tuesday     ,,,,
  row  header row ->  Time, Location, Class, Trainer 1, Trainer 2, Cover, Location, Class, ...
  rows data rows  ->  7:15 AM, Kemps, Barre57, Karan, , Anisha, Bandra, ...

Day blocks repeat horizontally: every "Location" header column starts a
block whose day/date label is the nearest non-empty cell at or left of it
in the day/date rows. Within a block the class is at +1, trainer 1 at +2,
trainer 2 at +3 (unused) and the cover at +4. Title rows, notes and blank
rows may appear anywhere above the date row, so the header and day rows are
located by content rather than position.
"""

import csv
import io
from datetime import time as dtime

from src.schedule_analyzer.errors import StructuralParseError
from src.schedule_analyzer.logging import get_logger
from src.schedule_analyzer.models import ClassOccurrence, ScheduleData
from src.schedule_analyzer.normalize import (
    CANCELED_MARKER,
    DEFAULT_NORMALIZER,
    Normalizer,
)
from src.schedule_analyzer.utils import DAYS_ORDER, canonical_day, format_time, parse_time

log = get_logger(__name__)

MIN_ROWS = 4

CLASS_OFFSET = 1
TRAINER1_OFFSET = 2
COVER_OFFSET = 4


def read_rows(csv_text: str) -> list[list[str]]:
    """Parse CSV text into a grid of cells, dropping blank lines.

    Rows keep their original (ragged) width; rows made only of separators
    such as ",,," are kept because they still occupy a position in the sheet.
    """
    try:
        reader = csv.reader(io.StringIO(csv_text.lstrip("\ufeff")))
        return [row for row in reader if row and row != [""]]
    except csv.Error as e:
        raise StructuralParseError(f"Error parsing CSV file: {e}") from e


def _cell(row: list[str], index: int) -> str:
    if 0 <= index < len(row):
        return (row[index] or "").strip()
    return ""


def _is_header_row(row: list[str]) -> bool:
    cells = {(cell or "").strip().lower() for cell in row}
    return "time" in cells and "location" in cells


def _is_day_row(row: list[str]) -> bool:
    return any(canonical_day(cell) for cell in row)


def find_header_row(rows: list[list[str]]) -> int:
    """Index of the first row holding both a "Time" and a "Location" cell."""
    for index, row in enumerate(rows):
        if _is_header_row(row):
            return index
    raise StructuralParseError(
        'Could not find a valid header row with "Time" and "Location".'
    )


def find_day_row(rows: list[list[str]], header_index: int) -> int:
    """Nearest row above the header that names a weekday."""
    for index in range(header_index - 1, -1, -1):
        if _is_day_row(rows[index]):
            return index
    raise StructuralParseError(
        'Could not find a valid Day row (e.g., "Monday", "Tuesday") above the header row.'
    )


def _label_left_of(row: list[str], column: int) -> str:
    """First non-empty cell scanning left from column (inclusive)."""
    for index in range(column, -1, -1):
        value = _cell(row, index)
        if value:
            return value
    return ""


def _build_occurrence(
    row: list[str],
    *,
    loc_col: int,
    time_raw: str,
    day: str,
    date: str,
    normalizer: Normalizer,
) -> ClassOccurrence | None:
    """Build the occurrence for one location column of a data row.

    Returns None for slots without a usable class (empty or canceled).
    """
    location = normalizer.location(_cell(row, loc_col))
    class_raw = _cell(row, loc_col + CLASS_OFFSET)
    trainer1_raw = _cell(row, loc_col + TRAINER1_OFFSET)
    cover_raw = _cell(row, loc_col + COVER_OFFSET)

    class_name = normalizer.class_name(class_raw, trainer1_raw)
    if not class_name or class_name.lower() == CANCELED_MARKER:
        return None

    trainer1 = normalizer.trainer_name(trainer1_raw)
    notes = ""
    if cover_raw:
        cover = normalizer.trainer_name(cover_raw)
        if trainer1:
            notes = f"Cover ({cover}) replaces Trainer 1 ({trainer1})"
        else:
            notes = f"Cover: {cover}"
        trainer1 = cover

    time_date = parse_time(time_raw)
    time = format_time(time_date)
    unique_key = "".join(
        (day + time + class_name + trainer1 + location + date).lower().split()
    )

    return ClassOccurrence(
        day=day,
        time_raw=time_raw,
        time=time,
        time_date=time_date,
        location=location,
        class_name=class_name,
        trainer1=trainer1,
        cover=cover_raw,
        notes=notes,
        date=date,
        difficulty=normalizer.difficulty(class_name),
        unique_key=unique_key,
    )


def arrange_by_day(classes: list[ClassOccurrence]) -> ScheduleData:
    """Group occurrences by weekday in Monday..Sunday order, sorted by time.

    Occurrences without a parsed time sort as midnight; the sort is stable so
    ties keep sheet order.
    """
    by_day: dict[str, list[ClassOccurrence]] = {}
    for occurrence in classes:
        by_day.setdefault(occurrence.day, []).append(occurrence)

    unknown_days = [day for day in by_day if day not in DAYS_ORDER]
    if unknown_days:
        log.warning("schedule_unknown_days_dropped", days=unknown_days)

    schedule: ScheduleData = {}
    for day in DAYS_ORDER:
        if day in by_day:
            schedule[day] = sorted(
                by_day[day],
                key=lambda c: c.time_date or dtime.min,
            )
    return schedule


def extract_schedule_data(
    csv_text: str, normalizer: Normalizer = DEFAULT_NORMALIZER
) -> ScheduleData:
    """Extract the weekly schedule from the schedule CSV.

    Args:
        csv_text: Raw text of the schedule CSV.
        normalizer: Name tables to canonicalize trainers, classes and locations.

    Returns:
        Mapping of weekday name to its classes, sorted by time.

    Raises:
        StructuralParseError: If the sheet is too short or the header row,
            day row or time column cannot be found.
    """
    rows = read_rows(csv_text)
    log.debug("schedule_csv_parsed", rows=len(rows))

    if len(rows) < MIN_ROWS:
        raise StructuralParseError("CSV does not have enough rows to process.")

    header_index = find_header_row(rows)
    day_index = find_day_row(rows, header_index)
    date_index = day_index - 1 if day_index > 0 else -1

    header_row = rows[header_index]
    day_row = rows[day_index]
    date_row = rows[date_index] if date_index != -1 else []

    headers = [(cell or "").strip().lower() for cell in header_row]
    if "time" not in headers:
        raise StructuralParseError('"Time" column not found in header.')
    time_col = headers.index("time")
    location_cols = [i for i, h in enumerate(headers) if h == "location"]

    log.info(
        "schedule_layout_found",
        header_row=header_index,
        day_row=day_index,
        date_row=date_index,
        location_columns=len(location_cols),
    )

    classes: list[ClassOccurrence] = []
    processed_rows = 0
    for row in rows[header_index + 1 :]:
        time_raw = _cell(row, time_col)
        if not time_raw or not any((cell or "").strip() for cell in row):
            continue
        processed_rows += 1

        for loc_col in location_cols:
            if not _cell(row, loc_col):
                continue
            day_label = _label_left_of(day_row, loc_col)
            occurrence = _build_occurrence(
                row,
                loc_col=loc_col,
                time_raw=time_raw,
                day=canonical_day(day_label) or day_label,
                date=_label_left_of(date_row, loc_col),
                normalizer=normalizer,
            )
            if occurrence is None:
                log.debug("schedule_slot_skipped", time=time_raw, column=loc_col)
                continue
            if occurrence.time_date is None:
                log.debug("schedule_time_unparsed", time=time_raw)
            classes.append(occurrence)

    schedule = arrange_by_day(classes)
    log.info(
        "schedule_extracted",
        processed_rows=processed_rows,
        classes=len(classes),
        locations=sorted({c.location for c in classes}),
        per_day={day: len(items) for day, items in schedule.items()},
    )
    return schedule
