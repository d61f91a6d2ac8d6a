"""
Caching of Claude CLI installations across runs.
"""

from .backend import CacheBackend, LocalCacheBackend, get_default_cache_dir, match_key
from .coordinator import DEFAULT_CACHE_PREFIX, CacheCoordinator

__all__ = [
    "CacheBackend",
    "LocalCacheBackend",
    "get_default_cache_dir",
    "match_key",
    "CacheCoordinator",
    "DEFAULT_CACHE_PREFIX",
]
