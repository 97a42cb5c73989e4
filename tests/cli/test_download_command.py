"""Tests for the download CLI commands."""

import json

import pytest
import requests
from pypdf import PdfReader

from src.acquisition.config import BookConfig
from src.acquisition.errors import FailureThresholdExceeded, ManifestFetchError
from src.acquisition.storage import get_manifest_url, get_page_url
from src.cli.commands import download as download_command
from src.cli.commands.download import run_download
from src.cli.main import main

BASE_URL = "https://learn.example.com"
BOOK_ID = "book-1"
PAGE_FILES = ["page-a0.pdf", "page-b1.pdf", "page-c2.pdf", "page-d3.pdf"]


@pytest.fixture
def book_session(fake_session_cls, pdf_factory):
    """Fake session serving a four page book, page widths 200, 210, 220, 230."""
    manifest = "var pages = [" + ", ".join(f'"{f}"' for f in PAGE_FILES) + "];"
    routes = {get_manifest_url(BASE_URL, BOOK_ID): manifest.encode("utf-8")}
    for i, page_file in enumerate(PAGE_FILES):
        routes[get_page_url(BASE_URL, BOOK_ID, page_file)] = pdf_factory(widths=(200 + 10 * i,))
    return fake_session_cls(routes)


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep the CLI from reconfiguring pytest's logging handlers."""
    monkeypatch.setattr(download_command, "setup_logging", lambda **kwargs: None)
    for name in ("BOOK_ID", "START_PAGE", "FETCH_WORKERS", "OUTPUT_PATH", "REQUEST_TIMEOUT", "MAX_FAILED_PAGES"):
        monkeypatch.delenv(name, raising=False)


def widths(path):
    return [float(page.mediabox.width) for page in PdfReader(str(path)).pages]


def test_run_download(book_session, tmp_path):
    """Test a full run writes pages in manifest order after the offset."""
    config = BookConfig(book_id=BOOK_ID, start_page=1, base_url=BASE_URL, output_path=tmp_path / "out" / "book.pdf")

    output_path = run_download(config, session=book_session)

    assert output_path == tmp_path / "out" / "book.pdf"
    assert widths(output_path) == [210, 220, 230]
    with open(tmp_path / "out" / "book.json") as f:
        assert json.load(f)["status"] == "complete"


def test_run_download_partial(book_session, tmp_path):
    """Test a failed page is left out of the document and recorded in the report."""
    book_session.routes[get_page_url(BASE_URL, BOOK_ID, "page-c2.pdf")] = b"garbage"
    config = BookConfig(book_id=BOOK_ID, base_url=BASE_URL, output_path=tmp_path / "book.pdf")

    run_download(config, session=book_session)

    assert widths(tmp_path / "book.pdf") == [200, 210, 230]
    with open(tmp_path / "book.json") as f:
        report = json.load(f)
    assert report["status"] == "partial"
    assert report["failures"][0]["index"] == 2
    assert report["failures"][0]["stage"] == "decode"


def test_run_download_threshold(book_session, tmp_path):
    """Test exceeding the failure threshold aborts before writing."""
    book_session.routes.pop(get_page_url(BASE_URL, BOOK_ID, "page-a0.pdf"))
    config = BookConfig(book_id=BOOK_ID, base_url=BASE_URL, output_path=tmp_path / "book.pdf", max_failures=0)

    with pytest.raises(FailureThresholdExceeded):
        run_download(config, session=book_session)

    assert not (tmp_path / "book.pdf").exists()


def test_run_download_manifest_failure(fake_session_cls, tmp_path):
    """Test a manifest failure is fatal and fetches no pages."""
    session = fake_session_cls({get_manifest_url(BASE_URL, BOOK_ID): requests.ConnectionError("down")})
    config = BookConfig(book_id=BOOK_ID, base_url=BASE_URL, output_path=tmp_path / "book.pdf")

    with pytest.raises(ManifestFetchError):
        run_download(config, session=session)

    assert len(session.calls) == 1
    assert not (tmp_path / "book.pdf").exists()


def test_run_download_empty_manifest(fake_session_cls, tmp_path):
    """Test an empty manifest writes an empty document."""
    session = fake_session_cls({get_manifest_url(BASE_URL, BOOK_ID): b"var pages = [];"})
    config = BookConfig(book_id=BOOK_ID, base_url=BASE_URL, output_path=tmp_path / "book.pdf")

    run_download(config, session=session)

    assert widths(tmp_path / "book.pdf") == []


def test_main_download(book_session, tmp_path, monkeypatch):
    """Test the download command end to end."""
    monkeypatch.setattr(download_command, "create_session", lambda pool_size=10: book_session)
    monkeypatch.setenv("SERVICE_BASE_URL", BASE_URL)
    env_file = tmp_path / ".env"
    env_file.write_text(f"BOOK_ID={BOOK_ID}\nSTART_PAGE=2\n")
    output_path = tmp_path / "downloaded.pdf"

    exit_code = main(["download", "--env-file", str(env_file), "--output", str(output_path), "--workers", "2"])

    assert exit_code == 0
    assert widths(output_path) == [220, 230]


def test_main_download_invalid_offset(book_session, tmp_path, monkeypatch):
    """Test an out-of-range start page exits non-zero without fetching pages."""
    monkeypatch.setattr(download_command, "create_session", lambda pool_size=10: book_session)
    monkeypatch.setenv("SERVICE_BASE_URL", BASE_URL)

    exit_code = main(
        ["download", "--env-file", "", "--book-id", BOOK_ID, "--start-page", "9", "--output", str(tmp_path / "x.pdf")]
    )

    assert exit_code == 1
    assert book_session.calls == [get_manifest_url(BASE_URL, BOOK_ID)]


def test_main_download_missing_book_id(tmp_path, monkeypatch):
    """Test missing configuration exits non-zero."""
    monkeypatch.delenv("BOOK_ID", raising=False)

    assert main(["download", "--env-file", str(tmp_path / "missing.env")]) == 1


def test_main_list_pages(book_session, monkeypatch, capsys):
    """Test listing page files after the offset."""
    monkeypatch.setattr(download_command, "create_session", lambda pool_size=10: book_session)
    monkeypatch.setenv("SERVICE_BASE_URL", BASE_URL)

    exit_code = main(["list-pages", "--env-file", "", "--book-id", BOOK_ID, "--start-page", "1"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Found 3 pages" in out
    assert "page-a0.pdf" not in out
    assert "page-d3.pdf" in out


def test_main_no_command(capsys):
    """Test running without a command prints help."""
    assert main([]) == 1


def test_main_log_file_option(book_session, tmp_path, monkeypatch):
    """Test --log-file reaches the logging setup."""
    calls = []
    monkeypatch.setattr(download_command, "setup_logging", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(download_command, "create_session", lambda pool_size=10: book_session)
    monkeypatch.setenv("SERVICE_BASE_URL", BASE_URL)
    log_path = tmp_path / "logs" / "run.log"

    exit_code = main(["list-pages", "--env-file", "", "--book-id", BOOK_ID, "--log-file", str(log_path), "-v"])

    assert exit_code == 0
    assert calls == [{"log_path": log_path, "verbose": True}]
