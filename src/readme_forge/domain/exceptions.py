"""Domain exception hierarchy.

Only the fetching-stage errors ever reach the caller; analysis and summary
failures are recovered inside the pipeline.  The interface layer maps each
surfaced exception to an HTTP status code.
"""

from __future__ import annotations


class ReadmeForgeError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryError(ReadmeForgeError):
    """The supplied reference does not name a GitHub repository."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class RepositoryNotFoundError(ReadmeForgeError):
    """The repository or branch does not exist or is not accessible."""


class RateLimitedError(ReadmeForgeError):
    """GitHub API quota exhausted (429 / 403 with rate-limit header)."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RemoteApiError(ReadmeForgeError):
    """Network failure or unexpected status from the hosting API."""


# ── LLM errors ──────────────────────────────────────────────────────────────


class LlmError(ReadmeForgeError):
    """Any error originating from the LLM provider."""


class ExtractionError(ReadmeForgeError):
    """A file or chunk analysis returned unusable output."""


class SummaryEnrichmentError(ReadmeForgeError):
    """The aggregate summary call failed or returned unusable output."""
