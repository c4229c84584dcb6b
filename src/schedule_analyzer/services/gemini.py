"""Gemini client for AI-assisted schedule extraction and insights.

Talks to the Gemini generateContent REST endpoint with a prompt plus a JSON
response schema. Network hiccups, 5xx and 429 responses are retried with
exponential backoff; anything else fails fast. Nothing here feeds back into
the core schedule/attendance pipeline: callers treat a failure as "advanced
views unavailable".
"""

import json
from typing import Any

import requests
from pydantic import ValidationError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.schedule_analyzer.config import get_config
from src.schedule_analyzer.errors import (
    AIResponseError,
    ConfigurationError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.schedule_analyzer.keys import attendance_key
from src.schedule_analyzer.logging import get_logger
from src.schedule_analyzer.models import (
    AttendanceData,
    ClassOccurrence,
    RawClassSchedule,
    ScheduleInsights,
)

log = get_logger(__name__)

EXTRACTION_PROMPT = """
You are an expert data processor. Your task is to analyze the provided raw text from a CSV file, which represents a weekly class schedule, and convert it into a structured JSON format. The CSV has a complex, non-tabular layout with repeating weekly blocks horizontally.

Here are the rules you must follow:
1.  Identify each weekly block. A block is defined by a row of dates followed by a row of days of the week.
2.  For each day within a block, extract the full date (e.g., "25 Aug 2025") and the day of the week (e.g., "Monday").
3.  The columns for each day are typically: 'Location', 'Class', 'Trainer 1', 'Trainer 2', 'Cover'. The 'Time' column is the very first column for all days in that row.
4.  Iterate through each time slot row for each day.
5.  If a row for a specific day and time has class information (a class name or trainer), create a JSON object for it.
6.  Extract the following fields for each class:
    - "id": Generate a unique string ID for each entry, for example, combining date, time, and location.
    - "date": The full date for that column's block, formatted as YYYY-MM-DD.
    - "day": The day of the week.
    - "time": The time from the first column of the row.
    - "location": The value from the 'Location' column.
    - "className": The value from the 'Class' column.
    - "trainer1": The value from the 'Trainer 1' column.
    - "trainer2": The value from the 'Trainer 2' column.
    - "cover": The value from the 'Cover' column.
    - "status": If the 'Class' value is 'Class canceled', set this to 'Canceled'. Otherwise, set it to 'Scheduled'.
7.  Skip any rows that are entirely empty or contain metadata like "Guidelines" or non-schedule related notes.
8.  Handle empty or placeholder cells (like '#REF!') gracefully. If a trainer, location, or class is not specified, represent it as null in the JSON.
9.  Ignore the extra non-schedule columns at the end of the CSV data like 'Any class?', 'VM Road', 'C+C', etc. Also ignore the specific 'Trainer Off' columns.
10. Combine all extracted class schedules from all weeks into a single flat array.

Your output MUST be a JSON object with a single key "schedules" which is an array of schedule objects, conforming to the provided schema.
"""

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "schedules": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING", "description": "Unique ID for the entry"},
                    "date": {"type": "STRING", "description": "Date of the class (YYYY-MM-DD)"},
                    "day": {"type": "STRING", "description": "Day of the week"},
                    "time": {"type": "STRING", "description": "Time of the class"},
                    "location": {"type": "STRING", "description": "Location of the class"},
                    "className": {"type": "STRING", "description": "Name of the class"},
                    "trainer1": {"type": "STRING", "description": "Primary trainer"},
                    "trainer2": {"type": "STRING", "description": "Secondary trainer"},
                    "cover": {"type": "STRING", "description": "Covering trainer"},
                    "status": {
                        "type": "STRING",
                        "enum": ["Scheduled", "Canceled"],
                        "description": "Status of the class",
                    },
                },
                "required": ["id", "date", "day", "time", "status"],
            },
        },
    },
}

INSIGHTS_PROMPT = """
You are a fitness studio operations analyst. Below is this week's class schedule as JSON.
Each class lists its day, time, location, class name, trainer and difficulty, and, when
historical data exists, its average attendance and number of past sessions.

Analyze the schedule and return:
- "summary": two or three sentences on the overall shape of the week.
- "trends": notable patterns (popular formats, strong or weak locations, time bands).
- "recommendations": concrete scheduling changes to improve attendance.
- "busyTimes": the busiest slots as objects with "day", "time" and "reason".
- "improvements": smaller operational improvements (trainer load, class mix, difficulty balance).
"""

INSIGHTS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "trends": {"type": "ARRAY", "items": {"type": "STRING"}},
        "recommendations": {"type": "ARRAY", "items": {"type": "STRING"}},
        "busyTimes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "day": {"type": "STRING"},
                    "time": {"type": "STRING"},
                    "reason": {"type": "STRING"},
                },
                "required": ["day", "time"],
            },
        },
        "improvements": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["summary", "trends", "recommendations", "busyTimes", "improvements"],
}


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper the model sometimes adds."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[len("```json") :]
    elif text.startswith("```"):
        text = text[len("```") :]
    else:
        return text
    if text.endswith("```"):
        text = text[: -len("```")]
    return text.strip()


def parse_json_response(text: str) -> Any:
    """Decode the model's JSON answer.

    Raises:
        AIResponseError: If the text is not valid JSON.
    """
    try:
        return json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise AIResponseError(f"AI response is not valid JSON: {e}") from e


def serialize_classes(
    classes: list[ClassOccurrence], attendance: dict[str, AttendanceData]
) -> list[dict[str, Any]]:
    """Compact JSON-ready view of the schedule for prompting."""
    payload = []
    for c in classes:
        item: dict[str, Any] = {
            "day": c.day,
            "time": c.time or c.time_raw,
            "location": c.location,
            "className": c.class_name,
            "trainer": c.trainer1,
            "difficulty": c.difficulty,
        }
        stats = attendance.get(attendance_key(c))
        if stats is not None:
            item["avgAttendance"] = stats.avg_attendance
            item["pastSessions"] = stats.total_classes
        payload.append(item)
    return payload


class GeminiClient:
    """Thin wrapper around the Gemini generateContent endpoint.

    The API key is only checked when a request is made, so the rest of the
    application works without AI configuration.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        session: requests.Session | None = None,
        wait: Any = None,
    ) -> None:
        config = get_config()
        self.api_key = api_key if api_key is not None else config.gemini_api_key
        self.model = model or config.gemini_model
        self.base_url = (base_url or config.gemini_base_url).rstrip("/")
        self.timeout = timeout or config.ai_timeout_seconds
        self.max_attempts = max_attempts or config.ai_max_attempts
        self.session = session or requests.Session()
        self.wait = wait if wait is not None else wait_exponential(multiplier=1, min=2, max=30)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def extract_schedule(self, csv_text: str) -> list[RawClassSchedule]:
        """Let the model extract every class of the raw schedule CSV.

        Raises:
            ConfigurationError: If no API key is configured.
            AIResponseError: If the answer lacks a valid "schedules" array.
            TransientError: If the service stayed unavailable after all retries.
            PermanentError: If the request was rejected.
        """
        prompt = f"{EXTRACTION_PROMPT}\n\nHere is the CSV data:\n\n{csv_text}"
        data = self.generate_json(prompt, EXTRACTION_SCHEMA)

        schedules = data.get("schedules") if isinstance(data, dict) else None
        if not isinstance(schedules, list):
            raise AIResponseError("AI response did not contain a 'schedules' array.")
        try:
            result = [RawClassSchedule.model_validate(item) for item in schedules]
        except ValidationError as e:
            raise AIResponseError(f"AI schedule entries failed validation: {e}") from e

        log.info("ai_schedule_extracted", entries=len(result))
        return result

    def generate_insights(
        self,
        classes: list[ClassOccurrence],
        attendance: dict[str, AttendanceData] | None = None,
    ) -> ScheduleInsights:
        """Ask the model for a narrative analysis of the schedule."""
        payload = serialize_classes(classes, attendance or {})
        prompt = f"{INSIGHTS_PROMPT}\n\nSchedule:\n{json.dumps(payload, ensure_ascii=False)}"
        data = self.generate_json(prompt, INSIGHTS_SCHEMA)
        try:
            return ScheduleInsights.model_validate(data)
        except ValidationError as e:
            raise AIResponseError(f"AI insights failed validation: {e}") from e

    def generate_json(self, prompt: str, schema: dict[str, Any]) -> Any:
        """Send a prompt with a response schema and decode the JSON answer."""
        if not self.api_key:
            raise ConfigurationError(
                "Gemini API key not set (GEMINI_API_KEY or API_KEY). "
                "AI processing is unavailable."
            )

        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        retryer = Retrying(
            retry=retry_if_exception_type(TransientError),
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            before_sleep=self._log_retry,
            reraise=True,
        )
        text = retryer(self._post, body)
        return parse_json_response(text)

    def _post(self, body: dict[str, Any]) -> str:
        """One generateContent call, classified into transient/permanent errors."""
        try:
            response = self.session.post(
                self.endpoint,
                headers={"x-goog-api-key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientError(f"Gemini request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitError("Gemini rate limit exceeded")
        if response.status_code >= 500:
            raise TransientError(
                f"Gemini unavailable ({response.status_code}): {response.text[:200]}"
            )
        if response.status_code >= 400:
            raise PermanentError(
                f"Gemini rejected the request ({response.status_code}): {response.text[:200]}"
            )

        try:
            candidates = response.json()["candidates"]
            parts = candidates[0]["content"]["parts"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIResponseError("Gemini response has no candidate content") from e

        text = "".join(part.get("text", "") for part in parts)
        log.debug("gemini_response", model=self.model, chars=len(text))
        return text

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "gemini_retry",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_attempts,
            error=str(error),
        )
