"""
Version token resolution.

A version token is what the user asks for: a literal version such as
``2.0.27``, or one of the channel aliases ``stable`` and ``latest``.

- A literal resolves to itself (after validation).
- ``stable`` resolves to the version named by the remote ``stable`` pointer.
  The lookup happens at most once per run; see ``RunContext.stable_version``.
- ``latest`` is never pinned. It stays a floating channel label: cache keys
  for it rotate daily while the installed payload is whatever the stable
  installer provides on that day.
"""

import logging
from typing import Optional

import requests
from packaging.version import InvalidVersion, Version

from claude_setup.core.download import DEFAULT_TIMEOUT, fetch_text
from claude_setup.core.exceptions import VersionResolutionError

logger = logging.getLogger(__name__)

LATEST = "latest"
STABLE = "stable"
CHANNELS = (LATEST, STABLE)


def normalize_token(token: Optional[str]) -> str:
    """
    Normalize a user supplied version token.

    Empty input means ``latest``; channel aliases are matched
    case-insensitively.
    """
    token = (token or "").strip()
    if not token:
        return LATEST
    if token.lower() in CHANNELS:
        return token.lower()
    return token


def validate_version(version: str) -> str:
    """
    Ensure a literal version is a well-formed, comparable version string.

    Returns:
        The version, unchanged

    Raises:
        VersionResolutionError: If the version cannot be parsed
    """
    try:
        Version(version)
    except InvalidVersion as e:
        raise VersionResolutionError(f"Invalid version: {version!r}") from e
    return version


def fetch_stable_version(
    bucket_url: str,
    timeout: int = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Fetch the current stable version from the release bucket.

    Args:
        bucket_url: Base URL of the release bucket
        timeout: Request timeout in seconds
        session: Optional requests session

    Returns:
        The stable version string

    Raises:
        VersionResolutionError: If the pointer is empty or malformed
        DownloadError: If the pointer cannot be fetched
    """
    url = f"{bucket_url}/{STABLE}"
    logger.debug(f"Fetching stable version from: {url}")

    content = fetch_text(url, timeout=timeout, session=session).strip()
    if not content:
        raise VersionResolutionError("Failed to fetch stable version")

    version = validate_version(content)
    logger.debug(f"Stable version: {version}")
    return version


def resolve_version(token: str, context) -> str:
    """
    Resolve a version token to the string used for keys and URLs.

    Args:
        token: Literal version, ``stable`` or ``latest``
        context: RunContext holding the run's memoized stable version

    Returns:
        The literal version, the stable version, or ``"latest"``

    Example:
        >>> resolve_version("1.0.0", context)
        '1.0.0'
        >>> resolve_version("stable", context)
        '2.0.27'
    """
    token = normalize_token(token)

    if token == LATEST:
        return LATEST
    if token == STABLE:
        return context.stable_version()
    return validate_version(token)
