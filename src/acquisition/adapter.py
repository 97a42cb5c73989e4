"""Data structures shared by the page index resolver, fetcher and coordinator."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import FetchFailure


@dataclass(frozen=True)
class FetchJob:
    """A single page download, positioned within the offset-sliced page list."""
    index: int
    page_file: str
    url: str


@dataclass
class PageResult:
    """Outcome of one fetch job: a decoded page or the error that stopped it."""
    index: int
    page_file: str
    url: str
    page: Optional[Any] = None
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.page is not None


@dataclass(frozen=True)
class PageFailure:
    """Failure record for a page that could not be fetched."""
    index: int
    page_file: str
    url: str
    stage: str
    message: str

    @classmethod
    def from_result(cls, result: PageResult) -> "PageFailure":
        error = result.error
        if isinstance(error, FetchFailure):
            stage = error.stage
        else:
            stage = type(error).__name__ if error is not None else "unknown"
        return cls(
            index=result.index,
            page_file=result.page_file,
            url=result.url,
            stage=stage,
            message=str(error) if error is not None else "No page returned",
        )


@dataclass
class DownloadResult:
    """Result of downloading every page of a book, in manifest order."""
    pages: list = field(default_factory=list)
    failures: list[PageFailure] = field(default_factory=list)
    total_jobs: int = 0

    @property
    def pages_downloaded(self) -> int:
        return len(self.pages)

    @property
    def pages_failed(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def errors(self) -> list[str]:
        return [f"Page {failure.index} ({failure.page_file}): {failure.message}" for failure in self.failures]

    @property
    def status(self) -> str:
        if not self.failures:
            return "complete"
        return "partial" if self.pages else "failed"
