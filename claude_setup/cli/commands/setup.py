"""
Setup command implementation.

Restores the Claude CLI from cache or installs it, exports it on PATH,
verifies it, and optionally configures plugin marketplaces and plugins.
"""

import logging

import requests

from claude_setup.caching import CacheCoordinator, LocalCacheBackend
from claude_setup.ci import add_to_path, set_output, setup_git_credentials
from claude_setup.config import SetupConfig, load_config
from claude_setup.config.parser import config_summary
from claude_setup.core import (
    BinaryInstaller,
    RunContext,
    get_install_paths,
    normalize_token,
    verify_installation,
)
from claude_setup.plugins import PluginManager, set_github_token

logger = logging.getLogger(__name__)


def apply_cli_overrides(config: SetupConfig, args) -> SetupConfig:
    """Apply command-line flags on top of file and environment settings."""
    if getattr(args, "claude_version", None):
        config.version = args.claude_version
    if getattr(args, "target", None):
        config.target = args.target
    if getattr(args, "github_token", None):
        config.github_token = args.github_token
    if getattr(args, "marketplaces", None):
        config.marketplaces = args.marketplaces
    if getattr(args, "plugins", None):
        config.plugins = args.plugins
    if getattr(args, "cache_dir", None):
        config.cache.dir = args.cache_dir
    if getattr(args, "no_cache", False):
        config.cache.enabled = False
    return config


def run(args) -> int:
    """
    Run the setup command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = apply_cli_overrides(load_config(args.config), args)
    for line in config_summary(config):
        logger.debug(f"Config {line}")

    version = normalize_token(config.version)
    logger.info(f"Setting up Claude Code version: {version}")

    with requests.Session() as session:
        context = RunContext(
            bucket_url=config.bucket_url, timeout=config.timeout, session=session
        )
        paths = get_install_paths()

        coordinator = None
        cache_hit = False
        if config.cache.enabled:
            coordinator = CacheCoordinator(
                context,
                LocalCacheBackend(config.cache.dir),
                paths=paths,
                prefix=config.cache.prefix,
            )
            cache_hit = coordinator.restore(version)
        set_output("cache-hit", "true" if cache_hit else "false")

        if not cache_hit:
            installer = BinaryInstaller(context, download_dir=config.download_dir)
            installer.install(version, target=config.target)
            if coordinator is not None:
                coordinator.save(version)
        else:
            logger.info("Using cached Claude Code installation")

    add_to_path(paths.bin)

    installed = verify_installation(paths)
    set_output("version", installed.version)
    set_output("claude-path", str(installed.path))

    logger.info("Claude Code setup completed successfully!")

    if not (config.marketplaces or config.plugins):
        return 0

    if config.github_token:
        setup_git_credentials(config.github_token)
        set_github_token(config.github_token)

    manager = PluginManager(executable=str(paths.executable))

    if config.marketplaces:
        added = manager.add_or_update_marketplaces(config.marketplaces)
        set_output("marketplaces_added", str(added))

    if config.plugins:
        plugins = manager.install_plugins(config.plugins)
        set_output("plugins_installed", ",".join(plugins))

    logger.info("Plugin setup completed successfully!")
    return 0
