"""
Cache-key command implementation.

Prints the primary cache key and the restore keys for a version token,
which is handy when debugging cache misses.
"""

import logging

from claude_setup.caching import CacheCoordinator, LocalCacheBackend
from claude_setup.config import load_config
from claude_setup.core import RunContext, normalize_token

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache-key command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = load_config(args.config)
    version = normalize_token(args.claude_version or config.version)

    context = RunContext(bucket_url=config.bucket_url, timeout=config.timeout)
    coordinator = CacheCoordinator(
        context, LocalCacheBackend(config.cache.dir), prefix=config.cache.prefix
    )

    print(f"primary: {coordinator.cache_key(version)}")
    for restore_key in coordinator.restore_keys(version):
        print(f"restore: {restore_key}")

    return 0
