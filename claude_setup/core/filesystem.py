"""
File system helpers shared by the cache store.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Union


class InsecureArchiveError(Exception):
    """Raised when an archive member would escape its destination."""

    pass


def is_relative_to(path: Path, parent: Path) -> bool:
    """Check whether ``path`` is located under ``parent``."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never observed in a partially-written state; on failure the
    previous content (if any) is left untouched.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def validate_archive_member(name: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / name).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{name}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def merge_tree(source: Path, destination: Path) -> None:
    """
    Copy a directory tree into ``destination``, keeping symlinks as links.

    Existing files in ``destination`` are overwritten; other files are kept.
    """
    destination.mkdir(parents=True, exist_ok=True)
    for item in source.iterdir():
        target = destination / item.name
        if item.is_symlink():
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            os.symlink(os.readlink(item), target)
        elif item.is_dir():
            merge_tree(item, target)
        else:
            if target.is_symlink():
                target.unlink()
            shutil.copy2(item, target)
