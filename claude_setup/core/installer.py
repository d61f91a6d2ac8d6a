"""
Claude CLI binary installer.

Downloads the native binary for the host platform, verifies it against the
release manifest, and runs its built-in ``install`` subcommand, which lays
out the launcher and data directories under the user's home.

The binary fetched is always the stable release, whatever version token the
user asked for: only the stable channel is guaranteed to ship a working
installer subcommand. The requested token only scopes the cache key.
"""

import logging
import os
import subprocess
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from claude_setup.core.context import RunContext
from claude_setup.core.download import download_file
from claude_setup.core.exceptions import (
    ChecksumMismatchError,
    InstallationVerificationError,
    InstallerSubprocessError,
)
from claude_setup.core.manifest import fetch_checksum
from claude_setup.core.paths import InstallPaths, get_install_paths
from claude_setup.core.verification import checksums_match

logger = logging.getLogger(__name__)

BINARY_NAME = "claude"
EXECUTABLE_MODE = 0o755


@dataclass
class InstalledVersion:
    """Result of verifying an installation."""

    version: str
    path: Path


def get_download_dir() -> Path:
    """Directory for transient downloads (runner temp dir when available)."""
    runner_temp = os.environ.get("RUNNER_TEMP")
    return Path(runner_temp) if runner_temp else Path(tempfile.gettempdir())


class BinaryInstaller:
    """
    Install the Claude CLI from the release bucket.

    Example:
        >>> installer = BinaryInstaller(RunContext())
        >>> installer.install()
    """

    def __init__(self, context: RunContext, download_dir: Optional[Path] = None):
        """
        Initialize installer.

        Args:
            context: Run context (platform, bucket, memoized stable version)
            download_dir: Directory for the transient binary download
        """
        self.context = context
        self.download_dir = Path(download_dir) if download_dir else get_download_dir()

    def binary_url(self, version: str, platform_id: str) -> str:
        """Build the download URL of a release binary."""
        return f"{self.context.bucket_url}/{version}/{platform_id}/{BINARY_NAME}"

    def install(self, version: str, target: Optional[str] = None) -> None:
        """
        Download, verify and run the installer.

        Args:
            version: Requested version token (logged; the payload is stable)
            target: Optional target passed to ``claude install``

        Raises:
            UnsupportedPlatformError: If the host is not supported
            VersionResolutionError: If the stable version cannot be resolved
            ManifestError: If the manifest lacks a valid checksum
            ChecksumMismatchError: If the download is corrupt
            InstallerSubprocessError: If ``claude install`` fails
        """
        logger.info(f"Installing Claude Code version: {version}")

        platform_id = self.context.platform.platform_id
        logger.info(f"Detected platform: {platform_id}")

        stable_version = self.context.stable_version()
        logger.info(f"Using installer version: {stable_version}")

        binary_path = self.download_and_verify(stable_version, platform_id)
        try:
            self.run_installer(binary_path, target)
        finally:
            binary_path.unlink(missing_ok=True)

        logger.info("Claude Code installation completed")

    def download_and_verify(self, version: str, platform_id: str) -> Path:
        """
        Download the binary and check it against the manifest checksum.

        Returns:
            Path to the verified, executable binary

        Raises:
            ChecksumMismatchError: If the digest differs (file is deleted)
        """
        expected = fetch_checksum(
            self.context.bucket_url,
            version,
            platform_id,
            timeout=self.context.timeout,
            session=self.context.session,
        )

        url = self.binary_url(version, platform_id)
        logger.info(f"Downloading Claude Code from: {url}")

        destination = self.download_dir / f"{BINARY_NAME}-{uuid.uuid4().hex}"
        result = download_file(
            url, destination, timeout=self.context.timeout, session=self.context.session
        )

        if not checksums_match(result.sha256, expected):
            result.path.unlink(missing_ok=True)
            raise ChecksumMismatchError(expected=expected, actual=result.sha256)

        logger.info("Checksum verification passed")

        result.path.chmod(EXECUTABLE_MODE)
        return result.path

    def run_installer(self, binary_path: Path, target: Optional[str] = None) -> None:
        """
        Run ``<binary> install [target]``.

        Output is streamed to the console.

        Raises:
            InstallerSubprocessError: If the command exits non-zero
        """
        logger.info("Setting up Claude Code...")

        command: List[str] = [str(binary_path), "install"]
        if target:
            command.append(target)

        logger.debug(f"Running: {' '.join(command)}")
        result = subprocess.run(command, check=False)

        if result.returncode != 0:
            raise InstallerSubprocessError(result.returncode, command)


def verify_installation(paths: Optional[InstallPaths] = None) -> InstalledVersion:
    """
    Verify the installed executable and query its version.

    A failure to query the version is only a warning; the version is then
    reported as ``"unknown"``.

    Raises:
        InstallationVerificationError: If the executable does not exist
    """
    paths = paths or get_install_paths()

    if not paths.executable.exists():
        raise InstallationVerificationError(
            f"Claude Code executable not found: {paths.executable}"
        )

    version = "unknown"
    try:
        result = subprocess.run(
            [str(paths.executable), "--version"],
            capture_output=True,
            text=True,
            timeout=60,
            check=True,
        )
        version = result.stdout.strip() or "unknown"
    except (subprocess.SubprocessError, OSError) as e:
        logger.warning(f"Failed to get Claude Code version: {e}")

    logger.info("Claude Code installation verified")
    logger.info(f"   Version: {version}")
    logger.info(f"   Path: {paths.executable}")

    return InstalledVersion(version=version, path=paths.executable)
