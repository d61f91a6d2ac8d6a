"""
Installation paths of the Claude CLI.

The native installer always lays the CLI out under the user's home
directory; both directories are cached together as one unit.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class InstallPaths:
    """
    Filesystem locations of an installation.

    Attributes:
        bin: Directory holding the launcher (added to PATH)
        data: Directory holding installed versions and application state
        executable: Path to the ``claude`` launcher
    """

    bin: Path
    data: Path
    executable: Path

    def cache_paths(self) -> List[Path]:
        """Directories persisted by the cache, in a fixed order."""
        return [self.bin, self.data]


def get_install_paths(home: Optional[Path] = None) -> InstallPaths:
    """
    Get installation paths for a home directory.

    Args:
        home: Home directory (default: current user's home)

    Returns:
        InstallPaths rooted at ``home``

    Example:
        >>> get_install_paths(Path('/home/runner')).executable
        PosixPath('/home/runner/.local/bin/claude')
    """
    home = Path(home) if home is not None else Path.home()
    bin_dir = home / ".local" / "bin"
    return InstallPaths(
        bin=bin_dir,
        data=home / ".local" / "share" / "claude",
        executable=bin_dir / "claude",
    )
