"""Load raw API document text from a local file or an HTTP(S) URL."""

from pathlib import Path
from urllib.parse import urlparse

import httpx

FETCH_TIMEOUT = 10.0


def is_url(source: str) -> bool:
    """Return True if ``source`` looks like an http or https URL."""
    parsed = urlparse(source.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def get_data(source: str, timeout: float = FETCH_TIMEOUT) -> str | None:
    """Read the document text behind ``source``.

    Returns None when the file cannot be read or the URL cannot be fetched.
    """
    if is_url(source):
        return _get_data_from_url(source.strip(), timeout)
    return _get_data_from_file(Path(source))


def _get_data_from_url(url: str, timeout: float) -> str | None:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError:
        return None
    return response.text


def _get_data_from_file(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
