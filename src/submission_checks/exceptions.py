"""Exception hierarchy for submission-checks."""

from typing import Optional


class SubmissionChecksError(Exception):
    """Base exception for all submission-checks errors."""

    def __init__(self, message: str, details: Optional[dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class HistoryBackendError(SubmissionChecksError):
    """Git could not enumerate commits or compute a diff.

    Distinct from an empty result: the history is unreadable, so any
    anomaly analysis would be unreliable.
    """


class CloneError(SubmissionChecksError):
    """The submitted repository could not be cloned."""


class ConfigurationError(SubmissionChecksError):
    """Settings are missing or malformed."""
