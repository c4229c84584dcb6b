"""Upload orchestration - process a schedule CSV and attendance ZIP together.

The schedule extraction, the attendance aggregation and the optional AI
extraction are independent: they run concurrently in worker threads and a
failure in one never discards the others' results.
"""

import asyncio
from typing import Any

from src.schedule_analyzer.attendance import ZipSource, process_attendance_data
from src.schedule_analyzer.errors import ScheduleAnalyzerError
from src.schedule_analyzer.extractor import extract_schedule_data
from src.schedule_analyzer.logging import get_logger
from src.schedule_analyzer.models import UploadResult
from src.schedule_analyzer.services.gemini import GeminiClient

log = get_logger(__name__)


def _describe(error: BaseException) -> str:
    if isinstance(error, ScheduleAnalyzerError):
        return str(error)
    return f"{type(error).__name__}: {error}"


async def process_uploads(
    schedule_csv: str | None = None,
    attendance_zip: ZipSource | None = None,
    ai_client: GeminiClient | None = None,
) -> UploadResult:
    """Process whichever inputs were provided and collect per-source outcomes.

    Args:
        schedule_csv: Text of the schedule CSV.
        attendance_zip: Attendance export (bytes, path or binary file).
        ai_client: If given (and a schedule is given), also run the AI
            extraction on the schedule text.

    Returns:
        UploadResult with each source's result or error message.
    """
    # One coroutine per provided source, all awaited by gather()
    tasks: dict[str, Any] = {}
    if schedule_csv is not None:
        tasks["schedule"] = asyncio.to_thread(extract_schedule_data, schedule_csv)
        if ai_client is not None:
            tasks["ai"] = asyncio.to_thread(ai_client.extract_schedule, schedule_csv)
    if attendance_zip is not None:
        tasks["attendance"] = asyncio.to_thread(process_attendance_data, attendance_zip)

    outcomes = dict(
        zip(tasks, await asyncio.gather(*tasks.values(), return_exceptions=True))
    )

    result = UploadResult()
    for source, outcome in outcomes.items():
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            message = _describe(outcome)
            log.error("upload_source_failed", source=source, error=message)
            setattr(result, f"{source}_error", message)
        elif outcome is not None:
            field = "raw_schedule" if source == "ai" else source
            setattr(result, field, outcome)

    log.info(
        "uploads_processed",
        schedule_days=len(result.schedule or {}),
        attendance_slots=len(result.attendance),
        ai_entries=len(result.raw_schedule or []),
        ok=result.ok,
    )
    return result


def process_uploads_sync(
    schedule_csv: str | None = None,
    attendance_zip: ZipSource | None = None,
    ai_client: GeminiClient | None = None,
) -> UploadResult:
    """Blocking wrapper around process_uploads for scripts and tests."""
    return asyncio.run(process_uploads(schedule_csv, attendance_zip, ai_client))
