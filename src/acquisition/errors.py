"""Exception hierarchy for the book page download pipeline."""

from pathlib import Path
from typing import Optional


class BookFetchError(RuntimeError):
    """Base exception for download pipeline failures."""


class ConfigurationError(BookFetchError):
    """Raised when the book id, start page or worker settings are invalid."""


class FetchFailure(BookFetchError):
    """Raised when a network retrieval or page decoding step fails."""

    stage = "fetch"

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        if self.url:
            return f"[{self.stage}] {message} ({self.url})"
        return f"[{self.stage}] {message}"


class ManifestFetchError(FetchFailure):
    stage = "manifest"


class ManifestReadError(FetchFailure):
    stage = "manifest-read"


class PageFetchError(FetchFailure):
    stage = "page-fetch"


class PageReadError(FetchFailure):
    stage = "page-read"


class PageDecodeError(FetchFailure):
    stage = "decode"


class PageExtractError(FetchFailure):
    stage = "extract"


class OutputIOError(BookFetchError):
    """Raised when the merged document cannot be written."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = Path(path)


class FailureThresholdExceeded(BookFetchError):
    """Raised when more pages failed than the run allows."""

    def __init__(self, failed: int, allowed: int) -> None:
        super().__init__(f"{failed} pages failed, at most {allowed} allowed")
        self.failed = failed
        self.allowed = allowed
