"""Reading JSON documents (schema snapshots) from disk or over HTTP."""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .core.errors import CodegenError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30


class JSONLoaderError(CodegenError):
    """A JSON document could not be located, fetched or decoded."""

    pass


def _fail(message: str, cause: Exception | None = None) -> JSONLoaderError:
    logger.error(message)
    error = JSONLoaderError(message)
    error.__cause__ = cause
    return error


def load_json_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Decode a local JSON file.

    Returns:
        Tuple of (path as string, decoded document).

    Raises:
        JSONLoaderError: If the file is missing, unreadable or not JSON.
    """
    path = Path(file_path)
    if not path.is_file():
        raise _fail(f"File not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise _fail(f"Error reading file {path}: {e}", e)

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise _fail(f"Invalid JSON in file {path}: {e}", e)

    logger.debug(f"Read {len(text)} bytes of JSON from {path}")
    return str(path), document


def _check_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise _fail(f"Invalid URL: {url}")


def load_json_from_url(url: str, timeout: int = DEFAULT_TIMEOUT) -> tuple[str, Any]:
    """Fetch and decode a JSON document over HTTP(S).

    Raises:
        JSONLoaderError: On a malformed URL, transport or HTTP error, or a
            body that is not JSON.
    """
    _check_url(url)

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise _fail(f"Request timeout after {timeout}s for URL: {url}", e)
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        raise _fail(f"HTTP error {status} for URL: {url}", e)
    except requests.exceptions.RequestException as e:
        raise _fail(f"Request failed for URL {url}: {e}", e)

    try:
        document = response.json()
    except ValueError as e:
        raise _fail(f"Invalid JSON response from URL {url}: {e}", e)

    logger.debug(f"Fetched JSON snapshot from {url}")
    return url, document


def load_json(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> tuple[str, Any]:
    """Load JSON from exactly one of a file path or a URL."""
    if bool(file_path) == bool(url):
        raise _fail("Either file_path or url must be provided, not both")
    if file_path:
        return load_json_from_file(file_path)
    return load_json_from_url(url, timeout)
