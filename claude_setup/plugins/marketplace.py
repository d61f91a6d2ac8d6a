"""
Plugin marketplace and plugin installation through the Claude CLI.

Marketplaces are added (or updated when already present) and plugins are
installed by shelling out to ``claude plugin ...``. Every name is validated
right before it is used; the first invalid name or failing command aborts
the remaining work.

Installed marketplaces are read from the CLI's machine-readable listing
(``claude plugin marketplace list --json``) rather than from its
human-readable output.
"""

import json
import logging
import os
import re
import subprocess
from dataclasses import dataclass
from typing import List, MutableMapping, Optional

from claude_setup.core.exceptions import PluginCommandError
from claude_setup.plugins.validation import (
    is_github_repo,
    validate_marketplace_source,
    validate_plugin_name,
)

logger = logging.getLogger(__name__)

LIST_SEPARATOR = re.compile(r"[\n,]")


@dataclass
class MarketplaceInfo:
    """An installed marketplace."""

    name: str
    repo: str


def parse_list(text: Optional[str]) -> List[str]:
    """
    Parse a comma and/or newline separated list.

    Example:
        >>> parse_list("item1,item2\\n item3 ,,")
        ['item1', 'item2', 'item3']
    """
    if not text:
        return []
    return [item.strip() for item in LIST_SEPARATOR.split(text) if item.strip()]


def set_github_token(
    token: str, environ: Optional[MutableMapping[str, str]] = None
) -> None:
    """Expose a GitHub token to ``claude`` child processes (private repos)."""
    environ = os.environ if environ is None else environ
    environ["GITHUB_TOKEN"] = token
    logger.debug("GITHUB_TOKEN set for Claude CLI commands")


def _parse_marketplace_listing(data: object) -> List[MarketplaceInfo]:
    """
    Extract marketplaces from the JSON listing.

    Accepts a list of entries or ``{"marketplaces": [...]}``; an entry's
    repository is read from ``repo`` or from ``source.repo``.
    """
    if isinstance(data, dict):
        data = data.get("marketplaces", [])
    if not isinstance(data, list):
        return []

    marketplaces = []
    for entry in data:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            continue
        repo = entry.get("repo")
        source = entry.get("source")
        if not repo and isinstance(source, dict):
            repo = source.get("repo")
        if isinstance(repo, str) and repo:
            marketplaces.append(MarketplaceInfo(name=entry["name"], repo=repo))
    return marketplaces


class PluginManager:
    """
    Manage marketplaces and plugins with the Claude CLI.

    Example:
        >>> manager = PluginManager()
        >>> manager.add_or_update_marketplaces("owner/marketplace")
        1
        >>> manager.install_plugins("dev-tools@marketplace")
        ['dev-tools@marketplace']
    """

    def __init__(self, executable: str = "claude"):
        """
        Initialize plugin manager.

        Args:
            executable: Claude CLI executable (name on PATH or full path)
        """
        self.executable = executable

    def _run(self, *args: str) -> None:
        """Run a CLI command with output streamed to the console."""
        command = [self.executable, *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            result = subprocess.run(command, check=False)
        except OSError as e:
            raise PluginCommandError(f"Failed to run {self.executable}: {e}") from e

        if result.returncode != 0:
            raise PluginCommandError(
                f"Command '{' '.join(command)}' failed with exit code {result.returncode}"
            )

    def list_marketplaces(self) -> List[MarketplaceInfo]:
        """
        List installed marketplaces.

        Returns:
            Installed marketplaces (empty if the listing is unavailable)
        """
        command = [self.executable, "plugin", "marketplace", "list", "--json"]
        try:
            result = subprocess.run(
                command, capture_output=True, text=True, check=False, timeout=60
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Failed to list marketplaces: {e}")
            return []

        if result.returncode != 0:
            logger.debug(f"Failed to list marketplaces: {result.stderr.strip()}")
            return []

        try:
            data = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            logger.debug(f"Unreadable marketplace listing: {e}")
            return []

        return _parse_marketplace_listing(data)

    def find_marketplace(self, repo: str) -> Optional[MarketplaceInfo]:
        """Find an installed marketplace by its GitHub repository."""
        for marketplace in self.list_marketplaces():
            if marketplace.repo == repo:
                return marketplace
        return None

    def add_or_update_marketplace(self, source: str) -> bool:
        """
        Add a marketplace, or update it if already installed.

        Only GitHub sources are checked for an existing installation; other
        sources are always added.

        Returns:
            True if newly added, False if updated

        Raises:
            ValidationError: If the source is rejected
            PluginCommandError: If the CLI command fails
        """
        source = validate_marketplace_source(source)
        logger.info(f"Checking plugin marketplace: {source}")

        if is_github_repo(source):
            existing = self.find_marketplace(source)
            if existing:
                logger.info(f"  Marketplace already installed: {existing.name}")
                logger.info("  Updating marketplace...")
                self._run("plugin", "marketplace", "update", existing.name)
                logger.info("  Marketplace updated successfully")
                return False

        logger.info("  Adding marketplace...")
        self._run("plugin", "marketplace", "add", source)
        logger.info("  Marketplace added successfully")
        return True

    def add_or_update_marketplaces(self, marketplaces_input: str) -> int:
        """
        Add or update every marketplace in a comma/newline separated list.

        Returns:
            Number of marketplaces added or updated

        Raises:
            PluginError: On the first marketplace that fails
        """
        marketplaces = parse_list(marketplaces_input)

        if not marketplaces:
            logger.warning("No marketplaces specified to add")
            return 0

        logger.info(f"Processing {len(marketplaces)} marketplace(s)...")

        processed = 0
        for marketplace in marketplaces:
            was_added = self.add_or_update_marketplace(marketplace)
            processed += 1
            logger.info(f"  {'Added' if was_added else 'Updated'}: {marketplace}")

        logger.info(f"Processed {processed} marketplace(s) successfully")
        return processed

    def install_plugins(self, plugin_list: str) -> List[str]:
        """
        Install every plugin in a comma/newline separated list.

        Returns:
            Names of the installed plugins

        Raises:
            ValidationError: On the first invalid name (earlier plugins stay installed)
            PluginCommandError: If an install command fails
        """
        plugins = parse_list(plugin_list)

        if not plugins:
            logger.warning("No plugins specified to install")
            return []

        logger.info(f"Installing {len(plugins)} plugin(s)...")

        installed = []
        for plugin in plugins:
            plugin = validate_plugin_name(plugin)
            logger.info(f"  Installing: {plugin}")
            self._run("plugin", "install", plugin)
            logger.info("    Installed successfully")
            installed.append(plugin)

        logger.info(f"All {len(installed)} plugin(s) installed successfully")
        return installed
