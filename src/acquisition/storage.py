"""URL templates and output paths for a book download."""

from pathlib import Path


MANIFEST_URL_PATTERN = "{base_url}/cdn_proxy/{book_id}/data.js"
PAGE_URL_PATTERN = "{base_url}/cdn_proxy/{book_id}/media/{page_file}"


def get_manifest_url(base_url: str, book_id: str) -> str:
    """Return the manifest (data.js) URL for a book."""
    return MANIFEST_URL_PATTERN.format(base_url=base_url.rstrip("/"), book_id=book_id)


def get_page_url(base_url: str, book_id: str, page_file: str) -> str:
    """Return the URL of a single page document."""
    return PAGE_URL_PATTERN.format(base_url=base_url.rstrip("/"), book_id=book_id, page_file=page_file)


def get_part_path(output_path: Path) -> Path:
    """Return the temporary path a document is written to before it is published."""
    output_path = Path(output_path)
    return output_path.with_suffix(output_path.suffix + ".part")


def get_report_path(output_path: Path) -> Path:
    """Return the path of the JSON run report next to the merged document.

    Never equal to output_path, so the report cannot replace the document.
    """
    output_path = Path(output_path)
    report_path = output_path.with_suffix(".json")
    if report_path == output_path:
        report_path = output_path.with_name(output_path.stem + ".report.json")
    return report_path
