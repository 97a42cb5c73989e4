"""Download CLI commands."""

import logging
from functools import partial
from pathlib import Path

from src.acquisition.config import BookConfig, load_config
from src.acquisition.downloader import build_jobs, check_failure_threshold, download_pages
from src.acquisition.errors import BookFetchError
from src.acquisition.fetcher import fetch_page
from src.acquisition.resolver import resolve_page_files
from src.acquisition.storage import get_page_url
from src.acquisition.transport import create_session
from src.assembly.assembler import assemble_document
from src.assembly.report import write_run_report
from utils.logger import setup_logging

logger = logging.getLogger(__name__)


def _config_from_args(args) -> BookConfig:
    """Load configuration, letting explicit flags override the environment."""
    env_file = Path(args.env_file) if args.env_file else None
    return load_config(
        env_file,
        book_id=args.book_id,
        start_page=args.start_page,
        workers=getattr(args, "workers", None),
        output_path=getattr(args, "output", None),
        timeout=args.timeout,
        max_failures=getattr(args, "max_failures", None),
    )


def run_download(config: BookConfig, session=None) -> Path:
    """Resolve, fetch and merge every page of a book.

    Returns:
        Path of the merged PDF

    Raises:
        BookFetchError: On any fatal failure (configuration, manifest, threshold, output)
    """
    session = session or create_session(config.workers)

    page_files = resolve_page_files(session, config.book_id, config.base_url, config.timeout)
    result = download_pages(
        page_files,
        fetch=partial(fetch_page, session, timeout=config.timeout),
        page_url=partial(get_page_url, config.base_url, config.book_id),
        start_page=config.start_page,
        max_workers=config.workers,
    )
    check_failure_threshold(result, config.max_failures)

    output_path = assemble_document(result.pages, config.output_path)
    report_path = write_run_report(result, config, output_path)
    logger.info(f"Wrote run report: {report_path}")

    if result.success:
        logger.info(f"Successfully downloaded PDF: {output_path}")
    else:
        logger.warning(
            f"Downloaded PDF with {result.pages_failed} missing pages: {output_path}"
        )
    return output_path


def cmd_download(args):
    """Download a book and write the merged PDF."""
    setup_logging(log_path=args.log_file, verbose=args.verbose)

    try:
        config = _config_from_args(args)
        run_download(config)
    except BookFetchError as e:
        logger.error(f"Download process failed: {e}")
        return 1

    return 0


def cmd_list_pages(args):
    """Print the page files a download would fetch."""
    setup_logging(log_path=args.log_file, verbose=args.verbose)

    try:
        config = _config_from_args(args)
        session = create_session(1)
        page_files = resolve_page_files(session, config.book_id, config.base_url, config.timeout)
        jobs = build_jobs(page_files, config.start_page, partial(get_page_url, config.base_url, config.book_id))
    except BookFetchError as e:
        logger.error(f"Listing pages failed: {e}")
        return 1

    if not jobs:
        print(f"No pages found for book: {config.book_id}")
        return 0

    print(f"Found {len(jobs)} pages for {config.book_id}:")
    for job in jobs:
        print(f"  {job.index:4d}  {job.page_file}")
    return 0


def _add_common_arguments(parser):
    parser.add_argument("--env-file", default=".env", help="dotenv file with BOOK_ID and START_PAGE")
    parser.add_argument("--book-id", help="Book identifier (overrides BOOK_ID)")
    parser.add_argument("--start-page", type=int, help="Number of leading pages to skip (overrides START_PAGE)")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, help="Also write log records to this file")


def setup_download_commands(subparsers):
    """Setup download subcommands."""
    # download command
    download_parser = subparsers.add_parser("download", help="Download a book into a single PDF")
    _add_common_arguments(download_parser)
    download_parser.add_argument("--workers", type=int, help="Number of concurrent workers (default 10)")
    download_parser.add_argument("--output", help="Output PDF path (default output/downloaded.pdf)")
    download_parser.add_argument(
        "--max-failures", type=int, help="Abort without writing if more pages than this fail"
    )
    download_parser.set_defaults(func=cmd_download)

    # list-pages command
    list_parser = subparsers.add_parser("list-pages", help="List the page files of a book")
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=cmd_list_pages)
