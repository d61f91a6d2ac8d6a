"""
Platform detection for claude-setup.

Maps the host operating system and CPU architecture to the platform
identifiers used by the release bucket (``darwin-arm64``, ``linux-x64``,
``linux-x64-musl``...).

Usage:
    from claude_setup.core.platform import detect_platform

    platform_info = detect_platform()
    print(platform_info.platform_id)
"""

import functools
import logging
import platform
from dataclasses import dataclass
from pathlib import Path

from claude_setup.core.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)

# Loader paths that only exist on musl-based distributions (e.g. Alpine)
MUSL_MARKERS = (
    Path("/lib/libc.musl-x86_64.so.1"),
    Path("/lib/libc.musl-aarch64.so.1"),
)


@dataclass(frozen=True)
class Platform:
    """
    Host platform as understood by the release bucket.

    Attributes:
        os: Operating system ('darwin' or 'linux')
        arch: CPU architecture ('x64' or 'arm64')
        platform_id: Canonical identifier, e.g. 'linux-x64-musl'
    """

    os: str
    arch: str
    platform_id: str

    def __str__(self) -> str:
        return self.platform_id


@functools.lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """
    Detect the current platform.

    This function is cached - it only runs detection once per process.

    Returns:
        Platform for the running host

    Raises:
        UnsupportedPlatformError: If the OS or architecture is not supported

    Example:
        >>> detect_platform().platform_id
        'linux-x64'
    """
    os_name = _detect_os()
    arch = _detect_architecture()

    platform_id = f"{os_name}-{arch}"
    if os_name == "linux" and _is_musl():
        platform_id = f"{platform_id}-musl"

    logger.debug(f"Detected platform: {platform_id}")
    return Platform(os=os_name, arch=arch, platform_id=platform_id)


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'darwin' or 'linux'

    Raises:
        UnsupportedPlatformError: If OS is not supported
    """
    system = platform.system().lower()

    if system == "darwin":
        return "darwin"
    elif system == "linux":
        return "linux"
    elif system == "windows" or system.startswith(("cygwin", "msys", "mingw")):
        raise UnsupportedPlatformError("Windows is not supported")
    else:
        raise UnsupportedPlatformError(f"Unsupported OS: {system or 'unknown'}")


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64' or 'arm64'

    Raises:
        UnsupportedPlatformError: If architecture is not supported
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    else:
        raise UnsupportedPlatformError(
            f"Unsupported architecture: {machine or 'unknown'}"
        )


def _is_musl() -> bool:
    """
    Check whether the system uses musl libc.

    Probe failures are treated as "not musl".
    """
    try:
        return any(marker.exists() for marker in MUSL_MARKERS)
    except OSError as e:
        logger.debug(f"musl probe failed, assuming glibc: {e}")
        return False


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "Platform",
    "detect_platform",
    "clear_platform_cache",
]
