"""HTTP helpers shared by the manifest resolver and the page fetcher."""

import requests
from requests.adapters import HTTPAdapter


USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


def create_session(pool_size: int = 10) -> requests.Session:
    """Create a session whose connection pool can serve every worker at once."""
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def open_url(session, url: str, timeout: float, error_cls):
    """Issue a GET and return the response once the status is a success.

    Connection errors, timeouts and non-2xx statuses are raised as ``error_cls``.
    """
    try:
        response = session.get(url, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise error_cls(f"Request failed: {e}", url=url) from e

    try:
        response.raise_for_status()
    except requests.RequestException as e:
        # Release the pooled connection before the error outlives the request
        response.close()
        raise error_cls(f"Request failed: {e}", url=url) from e
    return response


def read_body(response, url: str, error_cls) -> bytes:
    """Read the full response body, raising ``error_cls`` if the transfer breaks."""
    try:
        return response.content
    except (requests.RequestException, OSError) as e:
        raise error_cls(f"Failed to read response body: {e}", url=url) from e
    finally:
        response.close()
