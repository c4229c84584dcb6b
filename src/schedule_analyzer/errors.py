"""Error hierarchy for schedule parsing and AI retry classification.

Parsing errors are fatal for the file being processed: no partial schedule or
attendance map is returned. AI service errors are split into transient
failures (retried by tenacity) and permanent failures (surfaced immediately).

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def extract_schedule(csv_text: str):
        ...
"""


class ScheduleAnalyzerError(Exception):
    """Base exception for all schedule analyzer errors."""

    pass


class ParseError(ScheduleAnalyzerError):
    """Input file could not be turned into structured records."""

    pass


class StructuralParseError(ParseError):
    """The file does not have the structure the parser relies on.

    Examples: no header row with "Time" and "Location", no weekday row above
    the header, a ZIP archive without the attendance report.
    """

    pass


class ReportNotFoundError(StructuralParseError):
    """The attendance ZIP does not contain the expected report entry."""

    pass


class AIServiceError(ScheduleAnalyzerError):
    """Base exception for generative-AI service failures."""

    pass


class TransientError(AIServiceError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, 503 Service Unavailable, dropped connections.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded - needs longer backoff.

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(AIServiceError):
    """Failure that won't succeed on retry.

    Examples: rejected request, invalid model name, malformed response.
    """

    pass


class ConfigurationError(PermanentError):
    """The AI service is not configured (e.g. missing API key)."""

    pass


class AIResponseError(PermanentError):
    """The AI service answered, but not with the expected JSON payload."""

    pass
