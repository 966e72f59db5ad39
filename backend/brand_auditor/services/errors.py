"""
Audit error taxonomy.

Request-level errors (InvalidRequest) stop a batch before any network I/O.
Everything else is scoped to a single URL or a single selector.
"""
from typing import Optional


class AuditError(Exception):
    """Base class for all audit pipeline errors."""


class InvalidRequest(AuditError):
    """Request shape is unusable; fatal to the whole batch."""


class InvalidUrl(AuditError):
    """A single submitted URL could not be parsed."""

    def __init__(self, raw: str, reason: str = ""):
        self.raw = raw
        self.reason = reason
        message = f"Invalid URL: {raw!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class FetchFailed(AuditError):
    """HTTP or transport failure for one URL."""

    def __init__(self, url: str, cause: str, status_code: Optional[int] = None):
        self.url = url
        self.cause = cause
        self.status_code = status_code
        super().__init__(f"Could not retrieve content from {url}: {cause}")


class NoContent(AuditError):
    """Extraction produced no analyzable text."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Could not extract meaningful content from {url}")


class AnalysisFailed(AuditError):
    """Analysis service call failed or returned an invalid report."""

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(f"Analysis failed: {cause}")


class CaptureFailed(AuditError):
    """The page itself could not be loaded for element capture."""
