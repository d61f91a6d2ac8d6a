"""
Network downloads for claude-setup.

Thin wrappers around ``requests`` used to fetch the version pointer, the
release manifest and the binary itself:
- HTTPS with TLS verification (the default in requests)
- Streaming writes with an incremental SHA-256 digest
- Partial files removed on failure

Requests are never retried: a transient failure aborts the run
exactly like a permanent one.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests
from requests.exceptions import RequestException

from claude_setup.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
DEFAULT_TIMEOUT = 30


@dataclass
class DownloadResult:
    """Result of a file download."""

    path: Path
    sha256: str
    size_bytes: int


class StreamingHasher:
    """Compute a SHA-256 digest incrementally while bytes are written."""

    def __init__(self):
        self.hasher = hashlib.sha256()

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as lowercase hex string."""
        return self.hasher.hexdigest()


def _get(
    url: str,
    timeout: int,
    session: Optional[requests.Session] = None,
    stream: bool = False,
) -> requests.Response:
    """Issue a GET request and raise DownloadError on any failure."""
    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, stream=stream, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e
    return response


def fetch_text(
    url: str,
    timeout: int = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Fetch a small plaintext resource.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds
        session: Optional requests session

    Returns:
        Response body decoded as text

    Raises:
        DownloadError: If the request fails or returns an error status
    """
    logger.debug(f"Fetching {url}")
    return _get(url, timeout, session).text


def fetch_json(
    url: str,
    timeout: int = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """
    Fetch and decode a JSON document.

    Raises:
        DownloadError: If the request fails
        ValueError: If the body is not valid JSON
    """
    logger.debug(f"Fetching {url}")
    return _get(url, timeout, session).json()


def download_file(
    url: str,
    destination: Path,
    timeout: int = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> DownloadResult:
    """
    Download a file, computing its SHA-256 digest while streaming.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Request timeout in seconds
        session: Optional requests session

    Returns:
        DownloadResult with the path, digest and size

    Raises:
        DownloadError: If the download fails (partial file is removed)

    Example:
        >>> result = download_file(url, Path('/tmp/claude'))
        >>> print(result.sha256)
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Downloading {url} to {destination}")
    response = _get(url, timeout, session, stream=True)

    hasher = StreamingHasher()
    downloaded = 0

    try:
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    hasher.update(chunk)
                    downloaded += len(chunk)
    except (RequestException, OSError) as e:
        destination.unlink(missing_ok=True)
        raise DownloadError(f"Error while downloading {url}: {e}") from e

    logger.debug(f"Downloaded {downloaded} bytes to {destination}")
    return DownloadResult(
        path=destination, sha256=hasher.finalize(), size_bytes=downloaded
    )
