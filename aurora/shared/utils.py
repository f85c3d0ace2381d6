"""
Shared utilities for the Aurora newsletter tooling.
===================================================
Provides:
  - setup_logging       — consistent logging (console + rotating file)
  - http_get_with_retry — HTTP GET with exponential backoff
  - read_json           — strict JSON loading (raises ContentLoadError)
  - read_text           — strict text loading (raises ContentLoadError)
  - write_text_atomic   — atomic text write (temp file → rename)
  - ensure_dir          — mkdir -p helper

The builder and the asset inliner import from here. Keep this file focused
and stable.
"""

import json
import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from aurora.shared.errors import ContentLoadError


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def setup_logging(
    name: str,
    level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure a named logger with console output and optional rotating file.

    Args:
        name:     Logger name (shown in every log line).
        level:    "DEBUG" | "INFO" | "WARNING" | "ERROR"
        log_file: If provided, also write to this rotating log file.

    Returns:
        Configured Logger instance.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate handlers when called multiple times (e.g. in tests)
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        "%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # Rotating file handler: 10 MB max, keep 5 backups
    if log_file:
        ensure_dir(Path(log_file).parent)
        fh = RotatingFileHandler(log_file, maxBytes=10_000_000, backupCount=5, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def http_get_with_retry(
    url: str,
    headers: Optional[dict] = None,
    timeout: int = 30,
    max_retries: int = 3,
    retry_delay: float = 2.0,
    logger: Optional[logging.Logger] = None,
) -> requests.Response:
    """
    HTTP GET with exponential backoff on transient failures.

    Retries on connection errors and HTTP 429/5xx responses.
    Each retry waits retry_delay * 2^(attempt-1) seconds.

    Raises:
        requests.RequestException: after all retries exhausted.
    """
    log = logger or logging.getLogger(__name__)

    session = requests.Session()

    # urllib3-level retry for connection issues (not application-level 4xx/5xx)
    adapter = HTTPAdapter(
        max_retries=Retry(
            total=max_retries,
            backoff_factor=retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    last_exc: Optional[Exception] = None

    for attempt in range(1, max_retries + 1):
        try:
            resp = session.get(url, headers=headers, timeout=timeout)
            resp.raise_for_status()
            return resp
        except requests.RequestException as exc:
            last_exc = exc
            if attempt == max_retries:
                break
            wait = retry_delay * (2 ** (attempt - 1))
            log.warning(
                f"HTTP GET attempt {attempt}/{max_retries} failed ({exc}). "
                f"Retrying in {wait:.1f}s — {url}"
            )
            time.sleep(wait)

    log.error(f"HTTP GET failed after {max_retries} attempts: {url} — {last_exc}")
    raise last_exc  # type: ignore[misc]


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def read_text(path: Path) -> str:
    """Read a UTF-8 text file, raising ContentLoadError if it can't be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ContentLoadError(f"Cannot read {path}: {exc}") from exc


def read_json(path: Path) -> Any:
    """
    Load JSON from a file.

    Unlike a tolerant loader, a missing file or a parse error is fatal here:
    an empty content document would silently produce an empty newsletter.
    """
    raw = read_text(path)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ContentLoadError(f"JSON parse error in {path}: {exc}") from exc


def write_text_atomic(text: str, path: Path, logger: Optional[logging.Logger] = None) -> None:
    """
    Atomically write text to path.

    Writes to a .tmp file first, then renames to the target path, so an
    interrupted build never leaves a half-written newsletter behind.
    """
    log = logger or logging.getLogger(__name__)
    path = Path(path)
    ensure_dir(path.parent)

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)
    except Exception as exc:
        log.error(f"Failed to write {path}: {exc}")
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

def ensure_dir(path: Path) -> None:
    """Create directory (and all parents) if it doesn't already exist."""
    Path(path).mkdir(parents=True, exist_ok=True)
