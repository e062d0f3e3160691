from __future__ import annotations

_MAX_REPORT_CHARS = 2000


class LLMProofreaderError(Exception):
    """Base class for failures surfaced by the proofreading workflow."""


class AlreadyRunningError(LLMProofreaderError):
    """Raised when a send is requested while another run is still active."""


class _RawOutputError(LLMProofreaderError):
    """Failure that keeps the raw model output around for inspection."""

    def __init__(self, message: str, *, response_text: str | None = None) -> None:
        super().__init__(message)
        self.response_text = response_text

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.response_text is not None:
            # Truncate very long responses for readability
            text = self.response_text
            if len(text) > _MAX_REPORT_CHARS:
                text = text[:_MAX_REPORT_CHARS] + "... [truncated]"
            parts.append(f"\n--- LLM Output ---\n{text}")
        return "".join(parts)


class ProcessFailureError(_RawOutputError):
    """Raised when the model CLI cannot be launched, exits non-zero or is killed."""

    def __init__(
        self,
        message: str,
        *,
        response_text: str | None = None,
        event: str | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message, response_text=response_text)
        self.event = event
        self.returncode = returncode


class ExtractionFailedError(_RawOutputError):
    """Raised when the model exited cleanly but printed no balanced JSON array."""


class CorrectionFileNotFoundError(LLMProofreaderError, FileNotFoundError):
    """Raised when no side file exists at the resolved path."""

    def __init__(self, path) -> None:
        super().__init__(f"No corrections file found at {path}")
        self.path = path


class CorrectionParseError(LLMProofreaderError, ValueError):
    """Raised when a side file is not a JSON array of correction objects."""


class PromptTemplateError(LLMProofreaderError, ValueError):
    """Raised when a prompt template has no slot for the document text."""
