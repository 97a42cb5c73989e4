"""Page fetcher: downloads one page document, repairs its header and decodes it."""

import logging
from io import BytesIO
from typing import Optional

from pypdf import PdfReader

from .errors import PageDecodeError, PageExtractError, PageFetchError, PageReadError
from .transport import open_url, read_body

logger = logging.getLogger(__name__)

CORRUPTED_HEADER = b"%ADF-1.6"
REPAIRED_HEADER = b"%PDF-1.6"


def repair_header(body: bytes) -> bytes:
    """Fix the corrupted magic header served upstream.

    Only the first occurrence is replaced; bodies with a correct header are
    returned unchanged.
    """
    return body.replace(CORRUPTED_HEADER, REPAIRED_HEADER, 1)


def decode_page(body: bytes, url: Optional[str] = None):
    """Decode a page document and return its first page.

    Raises:
        PageDecodeError: If the bytes are not a readable PDF
        PageExtractError: If the document has no pages
    """
    try:
        reader = PdfReader(BytesIO(body))
        page_count = len(reader.pages)
    except Exception as e:
        raise PageDecodeError(f"Failed to read PDF: {e}", url=url) from e

    if page_count == 0:
        raise PageExtractError("Document contains no pages", url=url)

    try:
        return reader.pages[0]
    except Exception as e:
        raise PageExtractError(f"Failed to get page from PDF: {e}", url=url) from e


def fetch_page(session, url: str, timeout: float = 30.0):
    """Download, repair and decode a single page document.

    Args:
        session: requests.Session (or compatible) used for the GET
        url: Page document URL
        timeout: Request timeout in seconds

    Returns:
        The first pypdf page of the document
    """
    logger.debug(f"Fetching page: {url}")

    response = open_url(session, url, timeout, PageFetchError)
    body = read_body(response, url, PageReadError)

    page = decode_page(repair_header(body), url)
    logger.debug(f"Fetched page: {url} ({len(body)} bytes)")
    return page
