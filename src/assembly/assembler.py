"""Merge downloaded pages into a single PDF."""

import logging
from pathlib import Path

from pypdf import PdfWriter

from src.acquisition.errors import OutputIOError
from src.acquisition.storage import get_part_path

logger = logging.getLogger(__name__)


def build_document(pages) -> PdfWriter:
    """Append pages, in order, to a new PDF writer."""
    writer = PdfWriter()
    for page in pages:
        writer.add_page(page)
    return writer


def assemble_document(pages, output_path: Path) -> Path:
    """Write the pages as one PDF at output_path.

    The document is written to a .part file first and renamed once complete,
    so a failed write never leaves a truncated file at output_path.

    Args:
        pages: Decoded pages in output order
        output_path: Destination of the merged PDF

    Returns:
        The written path

    Raises:
        OutputIOError: If the directory or file cannot be created or written
    """
    output_path = Path(output_path)
    writer = build_document(pages)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputIOError(f"Failed to create output directory: {e}", output_path) from e

    part_file = get_part_path(output_path)
    logger.info(f"Writing {len(writer.pages)} pages to PDF")
    try:
        with open(part_file, "wb") as f:
            writer.write(f)
        part_file.replace(output_path)
    except Exception as e:
        part_file.unlink(missing_ok=True)
        raise OutputIOError(f"Failed to write PDF: {e}", output_path) from e

    logger.info(f"Saved PDF: {output_path}")
    return output_path
