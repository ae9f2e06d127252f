"""
Exception hierarchy for the scanner.

Only ScanPhaseError reaches callers of a scan; the others are raised by
components and either wrapped by the orchestrator or handled locally.
"""

from typing import Optional


class VisibilityEngineError(Exception):
    """Base class for scanner errors."""


class ProfileExtractionError(VisibilityEngineError):
    """The profile extraction response could not be parsed."""


class ProviderError(VisibilityEngineError):
    """An LLM provider call failed."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Client errors other than rate limits are not worth retrying."""
        if self.status_code is None:
            return True
        return not (400 <= self.status_code < 500 and self.status_code != 429)


class StoreError(VisibilityEngineError):
    """A persistence operation failed."""


class ScanPhaseError(VisibilityEngineError):
    """A fatal pipeline phase failed; the scan is aborted."""

    def __init__(self, phase: str, cause: BaseException):
        super().__init__(f"Scan failed in phase '{phase}': {cause}")
        self.phase = phase
        self.cause = cause
