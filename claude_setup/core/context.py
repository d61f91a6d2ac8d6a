"""
Per-run context shared by the install pipeline components.

A single ``RunContext`` is created at the start of a run and passed to the
resolver, installer and cache coordinator. It owns the values that must be
computed once and reused for the rest of the run: the detected platform
and the stable version. The stable version in particular must not be
re-fetched mid-run.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

import requests

from claude_setup.core.download import DEFAULT_TIMEOUT
from claude_setup.core.platform import Platform, detect_platform
from claude_setup.core.versions import fetch_stable_version

logger = logging.getLogger(__name__)

GCS_BUCKET = (
    "https://storage.googleapis.com/"
    "claude-code-dist-86c565f3-f756-42ad-8dfa-d59b1c096819/claude-code-releases"
)


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return datetime.now(timezone.utc).date()


class RunContext:
    """
    Initialization-once values for a single run.

    Example:
        >>> context = RunContext()
        >>> context.platform.platform_id
        'linux-x64'
        >>> context.stable_version()  # fetched once, then reused
        '2.0.27'
    """

    def __init__(
        self,
        bucket_url: str = GCS_BUCKET,
        timeout: int = DEFAULT_TIMEOUT,
        platform: Optional[Platform] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], date] = utc_today,
    ):
        """
        Initialize run context.

        Args:
            bucket_url: Base URL of the release bucket
            timeout: Network timeout in seconds
            platform: Platform override (auto-detected if None)
            session: Optional requests session shared by all downloads
            clock: Callable returning today's UTC date
        """
        self.bucket_url = bucket_url.rstrip("/")
        self.timeout = timeout
        self.session = session
        self.clock = clock
        self._platform = platform
        self._stable_version: Optional[str] = None

    @property
    def platform(self) -> Platform:
        """Platform of this run, detected on first access."""
        if self._platform is None:
            self._platform = detect_platform()
        return self._platform

    def stable_version(self) -> str:
        """
        Get the stable version for this run.

        The remote pointer is queried on the first call only; later calls
        return the same value even if the pointer has since moved.
        """
        if self._stable_version is None:
            self._stable_version = fetch_stable_version(
                self.bucket_url, timeout=self.timeout, session=self.session
            )
            logger.debug(f"Pinned stable version for this run: {self._stable_version}")
        return self._stable_version

    def today(self) -> str:
        """Today's UTC date in ISO format (YYYY-MM-DD)."""
        return self.clock().isoformat()
