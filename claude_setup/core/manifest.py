"""
Release manifest lookup.

Each release publishes ``{bucket}/{version}/manifest.json``::

    {"platforms": {"linux-x64": {"checksum": "<64 hex chars>"}, ...}}

The manifest is fetched fresh for every install attempt and never stored.
"""

import logging
from typing import Optional

import requests

from claude_setup.core.download import DEFAULT_TIMEOUT, fetch_json
from claude_setup.core.exceptions import ManifestError, ManifestMissingError
from claude_setup.core.verification import validate_checksum

logger = logging.getLogger(__name__)


def manifest_url(bucket_url: str, version: str) -> str:
    """Build the manifest URL of a release."""
    return f"{bucket_url}/{version}/manifest.json"


def extract_checksum(manifest: object, platform_id: str, version: str = "") -> str:
    """
    Extract the expected checksum for a platform from a parsed manifest.

    Args:
        manifest: Parsed manifest document
        platform_id: Platform identifier, e.g. 'linux-x64'
        version: Release version (used in error messages)

    Returns:
        The checksum (64 lowercase hex characters)

    Raises:
        ManifestMissingError: If the platform or its checksum is absent
        InvalidChecksumFormatError: If the checksum is malformed
    """
    if not isinstance(manifest, dict):
        raise ManifestError("Manifest is not a JSON object")

    platforms = manifest.get("platforms")
    platform_data = platforms.get(platform_id) if isinstance(platforms, dict) else None
    if not isinstance(platform_data, dict) or not platform_data.get("checksum"):
        raise ManifestMissingError(platform_id, version)

    return validate_checksum(platform_data["checksum"])


def fetch_checksum(
    bucket_url: str,
    version: str,
    platform_id: str,
    timeout: int = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Download a release manifest and return the checksum for a platform.

    Raises:
        DownloadError: If the manifest cannot be fetched
        ManifestError: If the manifest is not valid JSON
        ManifestMissingError: If the platform is not listed
        InvalidChecksumFormatError: If the listed checksum is malformed
    """
    url = manifest_url(bucket_url, version)
    logger.debug(f"Fetching manifest from: {url}")

    try:
        manifest = fetch_json(url, timeout=timeout, session=session)
    except ValueError as e:
        raise ManifestError(f"Invalid manifest JSON at {url}: {e}") from e

    checksum = extract_checksum(manifest, platform_id, version)
    logger.debug(f"Checksum for {platform_id}: {checksum}")
    return checksum
