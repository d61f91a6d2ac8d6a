"""
Input validation for plugin names and marketplace sources.

Both are passed as arguments to the ``claude plugin`` commands, so they are
normalized (Unicode NFC) and checked against a strict character whitelist
before anything is executed.
"""

import re
import unicodedata
from enum import Enum

from claude_setup.core.exceptions import ValidationError

MAX_INPUT_LENGTH = 512

PLUGIN_NAME_PATTERN = re.compile(r"^[A-Za-z0-9@/._-]+$")
GITHUB_REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
URL_PATTERN = re.compile(r"^https?://[A-Za-z0-9._~:/?#\[\]@!$&'()*+,;=%-]+$")
LOCAL_PATH_PATTERN = re.compile(r"^(?:\.{1,2}/|/)[A-Za-z0-9._/~@+-]*$")
TRAVERSAL_PATTERN = re.compile(r"(?:^|[/\\])\.\.(?:[/\\]|$)")

LOCAL_PATH_PREFIXES = ("./", "../", "/")


class RejectionReason(Enum):
    """Why an input was rejected; the value is the user facing message."""

    EMPTY = "must not be empty"
    TOO_LONG = f"exceeds maximum length of {MAX_INPUT_LENGTH} characters"
    PATH_TRAVERSAL = "path traversal detected"
    DISALLOWED_CHARACTERS = "contains disallowed characters"
    INVALID_FORMAT = "must be GitHub (owner/repo), Git URL, or local path"


def _has_traversal(value: str) -> bool:
    return TRAVERSAL_PATTERN.search(value) is not None


def validate_plugin_name(name: str) -> str:
    """
    Validate a plugin name such as ``dev-tools@marketplace``.

    Returns:
        The NFC-normalized name

    Raises:
        ValidationError: With the enumerated rejection reason

    Example:
        >>> validate_plugin_name("plugin@marketplace")
        'plugin@marketplace'
        >>> validate_plugin_name("../etc/passwd")
        Traceback (most recent call last):
        ...
        ValidationError: Invalid plugin name "../etc/passwd": path traversal detected
    """
    normalized = unicodedata.normalize("NFC", name or "")

    if not normalized:
        raise ValidationError("plugin name", name, RejectionReason.EMPTY)
    if len(normalized) > MAX_INPUT_LENGTH:
        raise ValidationError("plugin name", name, RejectionReason.TOO_LONG)
    if _has_traversal(normalized):
        raise ValidationError("plugin name", name, RejectionReason.PATH_TRAVERSAL)
    if not PLUGIN_NAME_PATTERN.fullmatch(normalized):
        raise ValidationError(
            "plugin name", name, RejectionReason.DISALLOWED_CHARACTERS
        )

    return normalized


def is_local_source(source: str) -> bool:
    """Return True if a marketplace source is a local path."""
    return source.startswith(LOCAL_PATH_PREFIXES)


def is_github_repo(source: str) -> bool:
    """Return True if a marketplace source is a GitHub ``owner/repo``."""
    return GITHUB_REPO_PATTERN.fullmatch(source) is not None


def validate_marketplace_source(source: str) -> str:
    """
    Validate a marketplace source.

    Accepted forms:
    - GitHub: ``owner/repo``
    - Git or JSON URL: ``https://gitlab.com/company/plugins.git``
    - Local path: ``./my-marketplace``, ``../shared``, ``/opt/marketplace``

    Relative local paths may legitimately start with ``../``; any other
    source containing a ``..`` path segment is rejected.

    Returns:
        The NFC-normalized source

    Raises:
        ValidationError: With the enumerated rejection reason
    """
    kind = "marketplace source"
    normalized = unicodedata.normalize("NFC", source or "")

    if not normalized.strip():
        raise ValidationError(kind, source, RejectionReason.EMPTY)
    if len(normalized) > MAX_INPUT_LENGTH:
        raise ValidationError(kind, source, RejectionReason.TOO_LONG)

    if is_local_source(normalized):
        if not LOCAL_PATH_PATTERN.fullmatch(normalized):
            raise ValidationError(kind, source, RejectionReason.DISALLOWED_CHARACTERS)
        return normalized

    if _has_traversal(normalized):
        raise ValidationError(kind, source, RejectionReason.PATH_TRAVERSAL)

    if is_github_repo(normalized) or URL_PATTERN.fullmatch(normalized):
        return normalized

    raise ValidationError(kind, source, RejectionReason.INVALID_FORMAT)
