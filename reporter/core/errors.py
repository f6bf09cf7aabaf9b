"""Error taxonomy for the report pipeline.

None of these escape ``ReportOrchestrator.generate_report``; they are turned
into ``ReportOutcome`` statuses and then into report-shaped Markdown.
"""


class ReportError(Exception):
    """Base exception for report generation failures."""


class DataNotFoundError(ReportError):
    """No persisted financial record exists for the company."""


class GenerationError(ReportError):
    """Base class for classified LLM failures."""

    kind: str = "unknown"
    default_message: str = "Failed to generate LLM response"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class AuthenticationError(GenerationError):
    """API key missing or rejected."""

    kind = "authentication"
    default_message = "Invalid or missing Anthropic API key. Please check ANTHROPIC_API_KEY in your .env file"


class RateLimitError(GenerationError):
    """Quota or rate limit exceeded."""

    kind = "rate_limit"
    default_message = "LLM API rate limit exceeded. Please try again later"


class ModelUnavailableError(GenerationError):
    """Model-specific failure."""

    kind = "model_unavailable"
    default_message = "LLM model error. The model may be temporarily unavailable"


class UnknownGenerationError(GenerationError):
    """Unclassified LLM failure."""

    kind = "unknown"
    default_message = "Failed to generate LLM response"
