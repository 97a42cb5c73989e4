"""Shared fixtures: in-memory PDFs and a fake requests session."""

import threading
import time
from io import BytesIO

import pytest
import requests
from pypdf import PdfWriter


def make_pdf_bytes(widths=(100,), corrupt=True) -> bytes:
    """Build a PDF with one blank page per width, optionally with the upstream header bug."""
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=200)
    buffer = BytesIO()
    writer.write(buffer)
    data = buffer.getvalue()
    if corrupt:
        header_end = data.index(b"\n")
        data = b"%ADF-1.6" + data[header_end:]
    return data


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, body=b"", status_code=200, read_error=None, encoding=None):
        self._body = body
        self.status_code = status_code
        self.read_error = read_error
        self.encoding = encoding
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    @property
    def content(self):
        if self.read_error is not None:
            raise self.read_error
        return self._body

    def close(self):
        self.closed = True


class FakeSession:
    """Serves canned responses by URL and records concurrency of GET calls."""

    def __init__(self, routes=None, delay=0.0):
        self.routes = dict(routes or {})
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, url, timeout=None, stream=False):
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            route = self.routes.get(url)
            if route is None:
                return FakeResponse(status_code=404)
            if isinstance(route, Exception):
                raise route
            if isinstance(route, FakeResponse):
                return route
            return FakeResponse(route)
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def pdf_factory():
    """Return the PDF builder."""
    return make_pdf_bytes


@pytest.fixture
def fake_session_cls():
    """Return the fake session class."""
    return FakeSession


@pytest.fixture
def fake_response_cls():
    """Return the fake response class."""
    return FakeResponse
