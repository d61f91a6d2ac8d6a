"""
Cache stores for installation directories.

``CacheBackend`` is the contract the cache coordinator depends on: a
key-value blob store that can restore a set of directories by exact key or
by ordered key prefixes, and save them under a key.

``LocalCacheBackend`` implements it on the local filesystem: one gzip
tarball per key plus a JSON index, guarded by a file lock so several jobs
sharing a runner can use the same store.

Directory Structure:
    <cache_dir>/
        - index.json       : key -> archive name, creation time, paths
        - archives/        : one .tar.gz per key
        - lock/index.lock  : index lock file
"""

import hashlib
import json
import logging
import os
import sys
import tarfile
import tempfile
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional

from filelock import FileLock, Timeout

from claude_setup.core.exceptions import CacheUnavailableError
from claude_setup.core.filesystem import (
    InsecureArchiveError,
    atomic_write,
    merge_tree,
    validate_archive_member,
)

logger = logging.getLogger(__name__)

INDEX_VERSION = 1


def get_default_cache_dir() -> Path:
    """Default local cache store: ``~/.cache/claude-setup``."""
    return Path.home() / ".cache" / "claude-setup"


class CacheBackend(ABC):
    """Abstract key-value store for cached directories."""

    @abstractmethod
    def restore(
        self, paths: List[Path], primary_key: str, restore_keys: List[str]
    ) -> Optional[str]:
        """
        Restore ``paths`` from the cache.

        The primary key is tried first, then each restore key as a prefix in
        order; within a prefix the newest entry wins.

        Args:
            paths: Directories to restore, in the order they were saved
            primary_key: Exact key to look up
            restore_keys: Ordered fallback key prefixes

        Returns:
            The matched key, or None on a miss

        Raises:
            CacheUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    def save(self, paths: List[Path], key: str) -> None:
        """
        Save ``paths`` under ``key``.

        Raises:
            CacheUnavailableError: If the store cannot be written
        """
        pass


def match_key(
    entries: Dict[str, dict], primary_key: str, restore_keys: List[str]
) -> Optional[str]:
    """
    Pick the cache entry to restore.

    Returns:
        ``primary_key`` if stored, else the newest key starting with the
        first restore key that matches anything, else None

    Example:
        >>> entries = {"k-1.0.0": {"created": 1.0}, "k-2.0.0": {"created": 2.0}}
        >>> match_key(entries, "k-3.0.0", ["k-3.0.0-", "k-"])
        'k-2.0.0'
    """
    if primary_key in entries:
        return primary_key

    for prefix in restore_keys:
        candidates = [key for key in entries if key.startswith(prefix)]
        if candidates:
            return max(candidates, key=lambda k: entries[k].get("created", 0))

    return None


class LocalCacheBackend(CacheBackend):
    """
    Filesystem-backed cache store.

    Example:
        >>> backend = LocalCacheBackend(Path('/tmp/cache'))
        >>> backend.save([bin_dir, data_dir], 'claude-code-v2-linux-x64-2.0.27')
        >>> backend.restore([bin_dir, data_dir], 'claude-code-v2-linux-x64-2.0.27', [])
        'claude-code-v2-linux-x64-2.0.27'
    """

    def __init__(self, cache_dir: Optional[Path] = None, lock_timeout: int = 30):
        """
        Initialize local cache store.

        Args:
            cache_dir: Root of the store (default: ~/.cache/claude-setup)
            lock_timeout: Timeout in seconds for acquiring the index lock
        """
        self.cache_dir = Path(cache_dir) if cache_dir else get_default_cache_dir()
        self.index_path = self.cache_dir / "index.json"
        self.archives_dir = self.cache_dir / "archives"
        self.lock_path = self.cache_dir / "lock" / "index.lock"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized local cache at {self.cache_dir}")

    @contextmanager
    def _lock(self):
        """
        Context manager for exclusive index access.

        Raises:
            CacheUnavailableError: If lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                yield
        except Timeout as e:
            raise CacheUnavailableError(
                f"Could not acquire cache lock within {self.lock_timeout} seconds"
            ) from e

    def _load_index(self) -> dict:
        if not self.index_path.exists():
            return {"version": INDEX_VERSION, "entries": {}}

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise CacheUnavailableError(f"Failed to load cache index: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
            logger.warning("Invalid cache index format, resetting")
            return {"version": INDEX_VERSION, "entries": {}}

        return data

    def _save_index(self, data: dict):
        atomic_write(self.index_path, json.dumps(data, indent=2, sort_keys=True))

    @staticmethod
    def _archive_name(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32] + ".tar.gz"

    def restore(
        self, paths: List[Path], primary_key: str, restore_keys: List[str]
    ) -> Optional[str]:
        try:
            with self._lock():
                entries = self._load_index()["entries"]
                matched = match_key(entries, primary_key, restore_keys)
                if matched is None:
                    return None

                archive = self.archives_dir / entries[matched]["archive"]
                logger.debug(f"Restoring {archive} for key {matched}")
                self._extract(archive, [Path(p) for p in paths])

        except (OSError, tarfile.TarError, InsecureArchiveError, KeyError) as e:
            raise CacheUnavailableError(f"Failed to restore cache: {e}") from e

        return matched

    def save(self, paths: List[Path], key: str) -> None:
        paths = [Path(p) for p in paths]
        if not any(p.exists() for p in paths):
            raise CacheUnavailableError(
                "None of the cache paths exist: " + ", ".join(str(p) for p in paths)
            )

        archive_name = self._archive_name(key)

        try:
            self.archives_dir.mkdir(parents=True, exist_ok=True)
            self._create_archive(self.archives_dir / archive_name, paths)

            with self._lock():
                data = self._load_index()
                data["entries"][key] = {
                    "archive": archive_name,
                    "created": time.time(),
                    "paths": [str(p) for p in paths],
                }
                self._save_index(data)

        except (OSError, tarfile.TarError) as e:
            raise CacheUnavailableError(f"Failed to save cache: {e}") from e

        logger.debug(f"Saved {len(paths)} path(s) under key {key}")

    def _create_archive(self, archive_path: Path, paths: List[Path]) -> None:
        """Write ``paths`` into a tarball, member ``N`` holding path number N."""
        temp_path = archive_path.with_name(f".{archive_path.name}.tmp")
        try:
            with tarfile.open(temp_path, "w:gz") as tar:
                for index, path in enumerate(paths):
                    if path.exists():
                        tar.add(path, arcname=str(index))
            temp_path.replace(archive_path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

    def _extract(self, archive_path: Path, paths: List[Path]) -> None:
        """Extract a tarball and move member ``N`` to ``paths[N]``."""
        allowed = {str(index) for index in range(len(paths))}

        with tempfile.TemporaryDirectory(dir=self.cache_dir) as tmpdir:
            staging = Path(tmpdir)
            with tarfile.open(archive_path, "r:gz") as tar:
                members = tar.getmembers()
                for member in members:
                    if member.name.split("/", 1)[0] not in allowed:
                        raise InsecureArchiveError(
                            f"Unexpected archive member '{member.name}'"
                        )
                    validate_archive_member(member.name, staging)

                links = [m for m in members if m.issym()]
                others = [m for m in members if not m.issym()]
                if sys.version_info >= (3, 12):
                    tar.extractall(staging, members=others, filter="tar")
                else:
                    tar.extractall(staging, members=others)

            # Launcher links point into the data dir by absolute path; created
            # last so no member is ever written through a link
            for member in links:
                link_path = staging / member.name
                link_path.parent.mkdir(parents=True, exist_ok=True)
                os.symlink(member.linkname, link_path)

            for index, path in enumerate(paths):
                source = staging / str(index)
                if source.is_dir():
                    merge_tree(source, path)
