"""Analyze a studio schedule CSV (and optional attendance ZIP) as JSON or table.

Standalone CLI for the schedule analyzer. Extracts the weekly schedule,
aggregates historical attendance, joins the two and prints the result.

Run with: python scripts/analyze_schedule.py --schedule schedule.csv
Attendance: python scripts/analyze_schedule.py --schedule schedule.csv --attendance export.zip
Table:    python scripts/analyze_schedule.py --schedule schedule.csv --table
Filters:  python scripts/analyze_schedule.py --schedule schedule.csv --day Monday --time-of-day morning
Summary:  python scripts/analyze_schedule.py --schedule schedule.csv --summary
AI:       python scripts/analyze_schedule.py --schedule schedule.csv --ai --insights

Exit codes:
  0 = success (JSON or table on stdout, or file written with --output)
  1 = error (message on stderr)
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.schedule_analyzer.errors import AIServiceError  # noqa: E402
from src.schedule_analyzer.logging import setup_logging  # noqa: E402
from src.schedule_analyzer.models import (  # noqa: E402
    AttendanceData,
    ClassOccurrence,
    ScheduleFilters,
)
from src.schedule_analyzer.pipeline import process_uploads_sync  # noqa: E402
from src.schedule_analyzer.services.gemini import GeminiClient  # noqa: E402
from src.schedule_analyzer.views import (  # noqa: E402
    filter_classes,
    group_by_day,
    lookup_attendance,
    summarize,
)


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Analyze a studio class schedule and its attendance history.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--schedule", required=True, help="Path to the schedule CSV.")
    parser.add_argument("--attendance", help="Path to the Momence attendance ZIP.")

    filters = parser.add_argument_group("filters")
    filters.add_argument("--day", help="Only classes on this weekday.")
    filters.add_argument("--location", help="Only classes at this (canonical) location.")
    filters.add_argument("--trainer", help="Only classes taught by this trainer.")
    filters.add_argument("--class-name", help="Only classes with this class name.")
    filters.add_argument(
        "--difficulty", choices=["beginner", "intermediate", "advanced"]
    )
    filters.add_argument(
        "--time-of-day", choices=["morning", "afternoon", "evening"]
    )

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable table to stdout.",
    )
    output_group.add_argument(
        "--summary",
        action="store_true",
        help="Output class counts by location, trainer, day and class name.",
    )

    parser.add_argument(
        "--ai",
        action="store_true",
        help="Also run the Gemini extraction of the raw schedule (needs GEMINI_API_KEY).",
    )
    parser.add_argument(
        "--insights",
        action="store_true",
        help="Ask Gemini for narrative insights on the filtered schedule.",
    )
    parser.add_argument("--output", help="Write JSON to this file instead of stdout.")
    return parser.parse_args(argv)


def _class_row(
    occurrence: ClassOccurrence, attendance: dict[str, AttendanceData]
) -> dict[str, Any]:
    row = occurrence.model_dump(mode="json")
    stats = lookup_attendance(attendance, occurrence)
    row["attendance"] = stats.model_dump(mode="json") if stats else None
    return row


def _format_table(
    classes: list[ClassOccurrence], attendance: dict[str, AttendanceData]
) -> str:
    """Format classes as a human-readable table.

    Columns: Day | Time | Class | Trainer | Location | Level | Avg
    """
    if not classes:
        return "(no classes scheduled)"

    headers = ["Day", "Time", "Class", "Trainer", "Location", "Level", "Avg"]

    rows = []
    for c in classes:
        stats = lookup_attendance(attendance, c)
        rows.append(
            [
                c.day,
                c.time or c.time_raw,
                c.class_name,
                c.trainer1 or "-",
                c.location or "-",
                c.difficulty,
                stats.avg_attendance if stats else "-",
            ]
        )

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)
    row_lines = [
        " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)) for row in rows
    ]
    return "\n".join([header_line, separator, *row_lines])


def main(args: argparse.Namespace) -> int:
    setup_logging()

    schedule_path = Path(args.schedule)
    if not schedule_path.exists():
        _log(f"ERROR: schedule file not found: {schedule_path}")
        return 1

    ai_client = GeminiClient() if (args.ai or args.insights) else None
    result = process_uploads_sync(
        schedule_csv=schedule_path.read_text(encoding="utf-8-sig"),
        attendance_zip=Path(args.attendance) if args.attendance else None,
        ai_client=ai_client if args.ai else None,
    )

    if result.schedule is None:
        _log(f"ERROR: {result.schedule_error}")
        return 1
    if result.attendance_error:
        _log(f"  Attendance not loaded: {result.attendance_error}")
    if result.ai_error:
        _log(f"  Schedule processed, but AI extraction failed: {result.ai_error}")

    filters = ScheduleFilters(
        day=args.day,
        location=args.location,
        trainer=args.trainer,
        class_name=args.class_name,
        difficulty=args.difficulty,
        time_of_day=args.time_of_day,
    )
    classes = filter_classes(result.schedule, filters)
    _log(f"  {len(classes)} classes after filters")

    if args.table:
        print(_format_table(classes, result.attendance))
        return 0

    if args.summary:
        output: Any = summarize(group_by_day(classes)).model_dump(mode="json")
    else:
        output = {
            "classes": [_class_row(c, result.attendance) for c in classes],
            "attendance_slots": len(result.attendance),
        }
        if result.raw_schedule is not None:
            output["raw_schedule"] = [
                entry.model_dump(mode="json", by_alias=True) for entry in result.raw_schedule
            ]
        if args.insights and ai_client is not None:
            try:
                insights = ai_client.generate_insights(classes, result.attendance)
                output["insights"] = insights.model_dump(mode="json", by_alias=True)
            except AIServiceError as e:
                _log(f"  AI insights unavailable: {e}")

    text = json.dumps(output, indent=2, ensure_ascii=False)
    if args.output:
        output_file = Path(args.output)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(text, encoding="utf-8")
        _log(f"  Written to: {output_file}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    args = _parse_args()
    try:
        sys.exit(main(args))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
