"""
SHA-256 checksum validation and comparison.

Checksums published in release manifests are always 64 lowercase hex
characters; anything else is rejected before it is compared against a
computed digest. Comparison is exact (case-sensitive) and constant-time.
"""

import hashlib
import logging
import re
import secrets
from pathlib import Path

from claude_setup.core.exceptions import InvalidChecksumFormatError

logger = logging.getLogger(__name__)

SHA256_PATTERN = re.compile(r"^[a-f0-9]{64}$")


def is_valid_checksum(value: object) -> bool:
    """Return True if ``value`` is a 64-character lowercase hex string."""
    return isinstance(value, str) and SHA256_PATTERN.fullmatch(value) is not None


def validate_checksum(value: object) -> str:
    """
    Ensure a checksum is well formed.

    Returns:
        The checksum, unchanged

    Raises:
        InvalidChecksumFormatError: If it is not 64 lowercase hex characters
    """
    if not is_valid_checksum(value):
        raise InvalidChecksumFormatError(value)
    return value


def compute_file_hash(file_path: Path) -> str:
    """
    Compute the SHA-256 digest of a file, reading it in chunks.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def checksums_match(actual: str, expected: str) -> bool:
    """
    Compare a computed digest against an expected one.

    Both values must be well formed; the comparison is case-sensitive and
    uses constant-time comparison to prevent timing attacks.

    Raises:
        InvalidChecksumFormatError: If ``expected`` is malformed
    """
    validate_checksum(expected)
    return secrets.compare_digest(actual, expected)


def verify_file_checksum(file_path: Path, expected: str) -> bool:
    """
    Verify a file against an expected SHA-256 digest.

    Example:
        >>> if verify_file_checksum(Path('claude'), manifest_checksum):
        ...     print("Binary is valid")
    """
    return checksums_match(compute_file_hash(file_path), expected)
