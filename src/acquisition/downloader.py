"""Concurrent page downloader that restores manifest order after fetching."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional

from .adapter import DownloadResult, FetchJob, PageFailure, PageResult
from .config import DEFAULT_WORKERS
from .errors import ConfigurationError, FailureThresholdExceeded

logger = logging.getLogger(__name__)


def build_jobs(page_files: list[str], start_page: int, page_url: Callable[[str], str]) -> list[FetchJob]:
    """Create one job per page file after the start offset.

    Job indexes are positions within the sliced list, starting at 0.

    Raises:
        ConfigurationError: If start_page is outside 0..len(page_files)
    """
    if isinstance(start_page, bool) or not isinstance(start_page, int):
        raise ConfigurationError(f"Start page must be an integer, got {start_page!r}")
    if start_page < 0 or start_page > len(page_files):
        raise ConfigurationError(
            f"Start page {start_page} out of range (book has {len(page_files)} pages)"
        )

    return [
        FetchJob(index=index, page_file=page_file, url=page_url(page_file))
        for index, page_file in enumerate(page_files[start_page:])
    ]


def _run_job(fetch: Callable[[str], object], job: FetchJob) -> PageResult:
    """Fetch a single job, capturing any failure in the result."""
    try:
        page = fetch(job.url)
    except Exception as e:
        return PageResult(index=job.index, page_file=job.page_file, url=job.url, error=e)
    return PageResult(index=job.index, page_file=job.page_file, url=job.url, page=page)


def run_jobs(jobs: list[FetchJob], fetch: Callable[[str], object], max_workers: int = DEFAULT_WORKERS) -> list[PageResult]:
    """Run every job on a fixed-size worker pool and return results sorted by index.

    Waits for all jobs; a failed page never cancels the others.
    """
    if max_workers < 1:
        raise ConfigurationError(f"Worker count must be at least 1, got {max_workers}")

    if not jobs:
        return []

    results = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(_run_job, fetch, job): job for job in jobs}

        for future in as_completed(futures):
            result = future.result()
            if result.success:
                logger.info(f"Fetched page {result.index} ({result.page_file})")
            else:
                logger.warning(f"Failed page {result.index} ({result.page_file}): {result.error}")
            results.append(result)

    results.sort(key=lambda r: r.index)
    return results


def download_pages(
    page_files: list[str],
    fetch: Callable[[str], object],
    page_url: Callable[[str], str],
    start_page: int = 0,
    max_workers: int = DEFAULT_WORKERS,
) -> DownloadResult:
    """Download every page after start_page concurrently.

    Args:
        page_files: Page file names in manifest order
        fetch: Callable that downloads and decodes one page URL
        page_url: Callable that builds the URL for a page file
        start_page: Number of leading page files to skip
        max_workers: Size of the worker pool

    Returns:
        DownloadResult with successful pages in manifest order and a failure record
    """
    jobs = build_jobs(page_files, start_page, page_url)

    logger.info(f"Downloading {len(jobs)} pages with {max_workers} workers")
    results = run_jobs(jobs, fetch, max_workers=max_workers)

    download_result = DownloadResult(total_jobs=len(jobs))
    for result in results:
        if result.success:
            download_result.pages.append(result.page)
        else:
            download_result.failures.append(PageFailure.from_result(result))

    if download_result.failures:
        logger.warning(f"{download_result.pages_failed} of {len(jobs)} pages failed")
        for error in download_result.errors:
            logger.warning(f"  - {error}")
    else:
        logger.info(f"Downloaded all {len(jobs)} pages")

    return download_result


def check_failure_threshold(result: DownloadResult, max_failures: Optional[int]) -> None:
    """Abort the run when more pages failed than allowed.

    ``None`` keeps partial output regardless of failures.

    Raises:
        FailureThresholdExceeded: If result.pages_failed > max_failures
    """
    if max_failures is None:
        return
    if result.pages_failed > max_failures:
        raise FailureThresholdExceeded(result.pages_failed, max_failures)
