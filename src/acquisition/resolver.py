"""Page index resolver: turns a book's data.js manifest into ordered page file names."""

import logging
import re

from .errors import ManifestFetchError, ManifestReadError
from .storage import get_manifest_url
from .transport import open_url, read_body

logger = logging.getLogger(__name__)

PAGE_FILE_PATTERN = re.compile(r"page-[0-9a-z]*\.pdf")


def extract_page_files(text: str) -> list[str]:
    """Return every page file name in the manifest text, in order of appearance.

    The manifest is scanned as plain text; duplicates are kept.
    """
    return PAGE_FILE_PATTERN.findall(text)


def resolve_page_files(session, book_id: str, base_url: str, timeout: float = 30.0) -> list[str]:
    """Fetch the manifest for a book and list its page files.

    Args:
        session: requests.Session (or compatible) used for the GET
        book_id: Book identifier
        base_url: Service root, e.g. https://learn.eltngl.com
        timeout: Request timeout in seconds

    Returns:
        Page file names in manifest order (possibly empty)

    Raises:
        ManifestFetchError: If the request fails
        ManifestReadError: If the body cannot be read or decoded
    """
    url = get_manifest_url(base_url, book_id)
    logger.info(f"Fetching manifest: {url}")

    response = open_url(session, url, timeout, ManifestFetchError)
    body = read_body(response, url, ManifestReadError)

    try:
        text = body.decode(response.encoding or "utf-8", errors="replace")
    except LookupError as e:
        raise ManifestReadError(f"Unknown manifest encoding: {e}", url=url) from e

    page_files = extract_page_files(text)
    logger.info(f"Found {len(page_files)} page files for book {book_id}")
    return page_files
