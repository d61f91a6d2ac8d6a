"""
Centralized exception hierarchy for claude-setup.

Every fatal condition of a run maps to one of these classes so the CLI can
report it with a single message. ``CacheUnavailableError`` is the only kind
that is never fatal: the cache coordinator downgrades it to a warning.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ClaudeSetupError(Exception):
    """Base exception for all claude-setup errors."""

    pass


# ============================================================================
# Install Pipeline Exceptions
# ============================================================================


class UnsupportedPlatformError(ClaudeSetupError):
    """Raised when the host OS or architecture has no published binary."""

    pass


class VersionResolutionError(ClaudeSetupError):
    """Raised when a version token cannot be turned into a concrete version."""

    pass


class DownloadError(ClaudeSetupError):
    """Raised when a remote resource cannot be fetched."""

    pass


class ManifestError(ClaudeSetupError):
    """Base exception for release manifest problems."""

    pass


class ManifestMissingError(ManifestError):
    """Raised when the manifest has no entry for the requested platform."""

    def __init__(self, platform_id: str, version: str = ""):
        self.platform_id = platform_id
        self.version = version
        msg = f"Platform {platform_id} not found in manifest"
        if version:
            msg += f" for version {version}"
        super().__init__(msg)


class InvalidChecksumFormatError(ManifestError):
    """Raised when a manifest checksum is not 64 lowercase hex characters."""

    def __init__(self, checksum: object):
        self.checksum = checksum
        super().__init__(f"Invalid checksum format: {checksum}")


class ChecksumMismatchError(ClaudeSetupError):
    """Raised when a downloaded binary does not hash to the expected digest."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum verification failed. Expected: {expected}, Got: {actual}"
        )


class InstallerSubprocessError(ClaudeSetupError):
    """Raised when the downloaded binary's installer exits non-zero."""

    def __init__(self, returncode: int, command: list):
        self.returncode = returncode
        self.command = command
        super().__init__(
            f"Installer command {' '.join(command)} failed with exit code {returncode}"
        )


class InstallationVerificationError(ClaudeSetupError):
    """Raised when the installed executable cannot be found."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheUnavailableError(ClaudeSetupError):
    """Raised by cache backends when the store cannot be read or written."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(ClaudeSetupError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Plugin Exceptions
# ============================================================================


class PluginError(ClaudeSetupError):
    """Base exception for plugin and marketplace errors."""

    pass


class ValidationError(PluginError):
    """Raised when a plugin name or marketplace source is rejected."""

    def __init__(self, kind: str, value: str, reason):
        self.kind = kind
        self.value = value
        self.reason = reason
        super().__init__(f'Invalid {kind} "{value}": {reason.value}')


class PluginCommandError(PluginError):
    """Raised when a ``claude plugin`` command fails."""

    pass
