"""
Cache coordination for Claude CLI installations.

Cache keys:
    Pinned version:  {prefix}-{platform_id}-{version}         (permanent)
    ``stable``:      {prefix}-{platform_id}-{stable_version}  (permanent)
    ``latest``:      {prefix}-{platform_id}-latest-{YYYY-MM-DD} (rotates daily)

``stable`` is resolved to a concrete version before the key is built so a
cached stable install is never reused across a release. ``latest`` rotates
once per UTC day so it eventually picks up new releases.

Restore keys are always two prefixes, from most to least specific::

    ["{primary key prefix}-", "{prefix}-{platform_id}-"]

Cache failures never fail a run: a restore error is a miss, a save error a
warning.
"""

import logging
from pathlib import Path
from typing import List, Optional

from claude_setup.caching.backend import CacheBackend
from claude_setup.core.context import RunContext
from claude_setup.core.paths import InstallPaths, get_install_paths
from claude_setup.core.versions import LATEST, resolve_version

logger = logging.getLogger(__name__)

DEFAULT_CACHE_PREFIX = "claude-code-v2"


class CacheCoordinator:
    """
    Compute cache keys and restore/save installations.

    Example:
        >>> coordinator = CacheCoordinator(context, LocalCacheBackend())
        >>> if not coordinator.restore("stable"):
        ...     BinaryInstaller(context).install("stable")
        ...     coordinator.save("stable")
    """

    def __init__(
        self,
        context: RunContext,
        backend: CacheBackend,
        paths: Optional[InstallPaths] = None,
        prefix: str = DEFAULT_CACHE_PREFIX,
    ):
        """
        Initialize cache coordinator.

        Args:
            context: Run context (platform, memoized stable version, clock)
            backend: Cache store
            paths: Installation paths to cache (default: under home dir)
            prefix: Key prefix, bumped to invalidate every existing entry
        """
        self.context = context
        self.backend = backend
        self.paths = paths or get_install_paths()
        self.prefix = prefix

    def _platform_prefix(self) -> str:
        return f"{self.prefix}-{self.context.platform.platform_id}"

    def _version_prefix(self, version: str) -> str:
        return f"{self._platform_prefix()}-{resolve_version(version, self.context)}"

    def cache_key(self, version: str) -> str:
        """
        Primary cache key for a version token.

        Raises:
            VersionResolutionError: If ``stable`` cannot be resolved
        """
        key = self._version_prefix(version)
        if resolve_version(version, self.context) == LATEST:
            key = f"{key}-{self.context.today()}"
        return key

    def restore_keys(self, version: str) -> List[str]:
        """Ordered fallback key prefixes for a version token."""
        return [
            f"{self._version_prefix(version)}-",
            f"{self._platform_prefix()}-",
        ]

    def cache_paths(self) -> List[Path]:
        """Directories persisted by the cache."""
        return self.paths.cache_paths()

    def restore(self, version: str) -> bool:
        """
        Restore a cached installation.

        Returns:
            True if any entry was restored, False on a miss or cache error
        """
        cache_paths = self.cache_paths()
        primary_key = self.cache_key(version)
        restore_keys = self.restore_keys(version)

        logger.info(f"Cache primary key: {primary_key}")
        logger.debug(f"Cache restore keys: {', '.join(restore_keys)}")
        logger.debug(f"Cache paths: {', '.join(str(p) for p in cache_paths)}")

        try:
            matched = self.backend.restore(cache_paths, primary_key, restore_keys)
        except Exception as e:
            logger.warning(f"Failed to restore cache: {e}")
            return False

        if matched:
            logger.info(f"Cache restored from key: {matched}")
            return True

        logger.info("Cache not found")
        return False

    def save(self, version: str) -> None:
        """Save the installation under the primary key; errors are warnings."""
        cache_paths = self.cache_paths()
        primary_key = self.cache_key(version)

        logger.info(f"Saving to cache with key: {primary_key}")
        logger.debug(f"Cache paths: {', '.join(str(p) for p in cache_paths)}")

        try:
            self.backend.save(cache_paths, primary_key)
        except Exception as e:
            logger.warning(f"Failed to save cache: {e}")
            return

        logger.info("Cache saved successfully")
