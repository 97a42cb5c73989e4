"""Run configuration loaded from the environment and an optional .env file."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from .errors import ConfigurationError


DEFAULT_BASE_URL = "https://learn.eltngl.com"
DEFAULT_OUTPUT_PATH = Path("output") / "downloaded.pdf"
DEFAULT_WORKERS = 10
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class BookConfig:
    """Settings for one download run, built once at startup and passed explicitly."""
    book_id: str
    start_page: int = 0
    workers: int = DEFAULT_WORKERS
    output_path: Path = DEFAULT_OUTPUT_PATH
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    max_failures: Optional[int] = None


def _parse_int(name: str, value: str, minimum: int) -> int:
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if parsed < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_float(name: str, value: str) -> float:
    try:
        parsed = float(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive, got {parsed}")
    return parsed


def load_config(
    env_file: Optional[Path] = Path(".env"),
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> BookConfig:
    """Build a BookConfig from a .env file, the process environment and overrides.

    Args:
        env_file: Path to a dotenv file. Skipped if None or missing.
        environ: Environment mapping, defaults to os.environ
        **overrides: Field values (e.g. from CLI flags) that win when not None

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If BOOK_ID is missing or any value is malformed
    """
    values: dict = {}
    if env_file is not None and Path(env_file).is_file():
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})

    # Process environment takes precedence over the .env file
    values.update(os.environ if environ is None else environ)

    settings = {
        "book_id": values.get("BOOK_ID"),
        "start_page": values.get("START_PAGE"),
        "workers": values.get("FETCH_WORKERS"),
        "output_path": values.get("OUTPUT_PATH"),
        "base_url": values.get("SERVICE_BASE_URL"),
        "timeout": values.get("REQUEST_TIMEOUT"),
        "max_failures": values.get("MAX_FAILED_PAGES"),
    }
    for key, value in overrides.items():
        if key not in settings:
            raise TypeError(f"Unknown configuration field: {key}")
        if value is not None:
            settings[key] = value

    book_id = str(settings["book_id"] or "").strip()
    if not book_id:
        raise ConfigurationError("BOOK_ID is required")

    start_page = 0
    if settings["start_page"] not in (None, ""):
        start_page = _parse_int("START_PAGE", settings["start_page"], 0)

    workers = DEFAULT_WORKERS
    if settings["workers"] not in (None, ""):
        workers = _parse_int("FETCH_WORKERS", settings["workers"], 1)

    timeout = DEFAULT_TIMEOUT
    if settings["timeout"] not in (None, ""):
        timeout = _parse_float("REQUEST_TIMEOUT", settings["timeout"])

    max_failures = None
    if settings["max_failures"] not in (None, ""):
        max_failures = _parse_int("MAX_FAILED_PAGES", settings["max_failures"], 0)

    base_url = str(settings["base_url"] or DEFAULT_BASE_URL).rstrip("/")
    output_path = Path(settings["output_path"]) if settings["output_path"] else DEFAULT_OUTPUT_PATH

    return BookConfig(
        book_id=book_id,
        start_page=start_page,
        workers=workers,
        output_path=output_path,
        base_url=base_url,
        timeout=timeout,
        max_failures=max_failures,
    )
