"""
Core install pipeline for claude-setup.

This package contains platform detection, version resolution, manifest
lookup, download/verification and the binary installer.
"""

from .context import GCS_BUCKET, RunContext, utc_today
from .installer import BinaryInstaller, InstalledVersion, verify_installation
from .paths import InstallPaths, get_install_paths
from .platform import Platform, clear_platform_cache, detect_platform
from .versions import LATEST, STABLE, normalize_token, resolve_version

from .exceptions import (
    ClaudeSetupError,
    UnsupportedPlatformError,
    VersionResolutionError,
    DownloadError,
    ManifestError,
    ManifestMissingError,
    InvalidChecksumFormatError,
    ChecksumMismatchError,
    InstallerSubprocessError,
    InstallationVerificationError,
    CacheUnavailableError,
    ConfigError,
    PluginError,
    ValidationError,
    PluginCommandError,
)

__all__ = [
    "GCS_BUCKET",
    "RunContext",
    "utc_today",
    "BinaryInstaller",
    "InstalledVersion",
    "verify_installation",
    "InstallPaths",
    "get_install_paths",
    "Platform",
    "clear_platform_cache",
    "detect_platform",
    "LATEST",
    "STABLE",
    "normalize_token",
    "resolve_version",
    "ClaudeSetupError",
    "UnsupportedPlatformError",
    "VersionResolutionError",
    "DownloadError",
    "ManifestError",
    "ManifestMissingError",
    "InvalidChecksumFormatError",
    "ChecksumMismatchError",
    "InstallerSubprocessError",
    "InstallationVerificationError",
    "CacheUnavailableError",
    "ConfigError",
    "PluginError",
    "ValidationError",
    "PluginCommandError",
]
