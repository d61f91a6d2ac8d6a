"""YAML configuration parser for claude-setup.

Settings are layered, lowest to highest precedence:

1. Built-in defaults
2. ``claude-setup.yaml`` (or the file given with ``--config``)
3. GitHub Actions inputs from the environment (``INPUT_VERSION``...)
4. Command-line flags (applied by the CLI)

Example ``claude-setup.yaml``::

    version: stable
    cache:
      enabled: true
      prefix: claude-code-v2
      dir: ~/.cache/claude-setup
    marketplaces:
      - owner/marketplace
    plugins:
      - dev-tools@marketplace
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from claude_setup.caching.coordinator import DEFAULT_CACHE_PREFIX
from claude_setup.core.context import GCS_BUCKET
from claude_setup.core.download import DEFAULT_TIMEOUT
from claude_setup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "claude-setup.yaml"

# GitHub Actions exposes action inputs as INPUT_<NAME> environment variables
ENV_INPUTS = {
    "version": "INPUT_VERSION",
    "target": "INPUT_TARGET",
    "github_token": "INPUT_GITHUB_TOKEN",
    "marketplaces": "INPUT_MARKETPLACES",
    "plugins": "INPUT_PLUGINS",
}


@dataclass
class CacheConfig:
    """Installation cache configuration."""

    enabled: bool = True
    prefix: str = DEFAULT_CACHE_PREFIX
    dir: Optional[Path] = None  # None: ~/.cache/claude-setup


@dataclass
class SetupConfig:
    """Complete claude-setup configuration."""

    version: str = "latest"
    target: Optional[str] = None
    bucket_url: str = GCS_BUCKET
    timeout: int = DEFAULT_TIMEOUT
    download_dir: Optional[Path] = None
    cache: CacheConfig = field(default_factory=CacheConfig)
    github_token: Optional[str] = field(default=None, repr=False)
    marketplaces: str = ""  # comma or newline separated
    plugins: str = ""


def load_config(
    config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> SetupConfig:
    """
    Load configuration from file and environment.

    Args:
        config_path: Explicit config file (must exist); if None, the default
            file in the working directory is used when present
        environ: Environment mapping (default: os.environ)

    Returns:
        Merged configuration

    Raises:
        ConfigError: If the file is missing, malformed, or has invalid values
    """
    environ = os.environ if environ is None else environ

    if config_path is not None:
        config = parse_config(Path(config_path))
    else:
        default_path = Path.cwd() / DEFAULT_CONFIG_FILE
        config = parse_config(default_path) if default_path.exists() else SetupConfig()

    return apply_environment(config, environ)


def parse_config(config_path: Path) -> SetupConfig:
    """
    Parse a claude-setup.yaml configuration file.

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        return SetupConfig()

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def _parse_and_validate(data: dict) -> SetupConfig:
    """Parse and validate configuration data."""
    known = {
        "version",
        "target",
        "bucket_url",
        "timeout",
        "download_dir",
        "cache",
        "github_token",
        "marketplaces",
        "plugins",
    }
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = SetupConfig()

    if "version" in data:
        config.version = _require_str(data, "version")
    if data.get("target") is not None:
        config.target = _require_str(data, "target")
    if "bucket_url" in data:
        config.bucket_url = _require_str(data, "bucket_url").rstrip("/")
    if "timeout" in data:
        timeout = data["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ConfigError(f"timeout must be a positive integer, got: {timeout!r}")
        config.timeout = timeout
    if data.get("download_dir") is not None:
        config.download_dir = Path(_require_str(data, "download_dir")).expanduser()
    if data.get("github_token") is not None:
        config.github_token = _require_str(data, "github_token")

    config.marketplaces = _parse_list_field(data, "marketplaces")
    config.plugins = _parse_list_field(data, "plugins")
    config.cache = _parse_cache_config(data.get("cache") or {})

    return config


def _parse_cache_config(data: dict) -> CacheConfig:
    """Parse the ``cache`` section."""
    if not isinstance(data, dict):
        raise ConfigError("cache must be a mapping")

    unknown = sorted(set(data) - {"enabled", "prefix", "dir"})
    if unknown:
        raise ConfigError(f"Unknown cache keys: {', '.join(unknown)}")

    cache = CacheConfig()
    if "enabled" in data:
        if not isinstance(data["enabled"], bool):
            raise ConfigError(f"cache.enabled must be a boolean: {data['enabled']!r}")
        cache.enabled = data["enabled"]
    if "prefix" in data:
        cache.prefix = _require_str(data, "prefix", "cache.prefix")
    if data.get("dir") is not None:
        cache.dir = Path(_require_str(data, "dir", "cache.dir")).expanduser()
    return cache


def _require_str(data: dict, key: str, label: Optional[str] = None) -> str:
    value = data[key]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # YAML reads `version: 2.0` as a float
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{label or key} must be a non-empty string, got: {value!r}")
    return value.strip()


def _parse_list_field(data: dict, key: str) -> str:
    """Accept either a YAML list or a comma/newline separated string."""
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, list):
        if not all(isinstance(item, str) for item in value):
            raise ConfigError(f"{key} must be a list of strings")
        return "\n".join(value)
    if isinstance(value, str):
        return value
    raise ConfigError(f"{key} must be a list or a string, got: {value!r}")


def apply_environment(config: SetupConfig, environ: Mapping[str, str]) -> SetupConfig:
    """Override configuration with non-empty GitHub Actions inputs."""
    overrides: Dict[str, str] = {}
    for attr, env_name in ENV_INPUTS.items():
        value = environ.get(env_name, "").strip()
        if value:
            overrides[attr] = value

    for attr, value in overrides.items():
        setattr(config, attr, value)

    if overrides:
        logger.debug(f"Applied inputs from environment: {', '.join(sorted(overrides))}")

    return config


def config_summary(config: SetupConfig) -> List[str]:
    """Human readable configuration lines (secrets omitted)."""
    return [
        f"version: {config.version}",
        f"target: {config.target or '-'}",
        f"cache: {'enabled' if config.cache.enabled else 'disabled'}",
        f"github_token: {'set' if config.github_token else 'not set'}",
    ]
