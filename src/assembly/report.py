"""JSON run report written next to the merged document."""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

from src.acquisition.adapter import DownloadResult
from src.acquisition.config import BookConfig
from src.acquisition.errors import OutputIOError
from src.acquisition.storage import get_report_path


def build_run_report(result: DownloadResult, config: BookConfig, output_path: Path) -> dict:
    """Summarize a run: what was requested, what was written and what failed."""
    return {
        "book_id": config.book_id,
        "start_page": config.start_page,
        "output": str(output_path),
        "total_pages": result.total_jobs,
        "pages_downloaded": result.pages_downloaded,
        "pages_failed": result.pages_failed,
        "status": result.status,
        "failures": [asdict(failure) for failure in result.failures],
        "completed_at": datetime.now(timezone.utc).isoformat(),
    }


def write_run_report(result: DownloadResult, config: BookConfig, output_path: Path) -> Path:
    """Write the run report beside output_path and return its path."""
    report_path = get_report_path(output_path)
    report = build_run_report(result, config, output_path)

    try:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)
    except OSError as e:
        raise OutputIOError(f"Failed to write run report: {e}", report_path) from e

    return report_path
