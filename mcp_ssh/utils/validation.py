"""Host name and local path safety helpers."""

import os
import re
from pathlib import PurePath
from typing import Final


class PathTraversalError(ValueError):
    """Attempted path traversal detected."""

    pass


SAFE_HOST_PATTERN: Final = re.compile(r"^[A-Za-z0-9._-]+$")
_UNSAFE_HOST_CHARS: Final = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_host_name(host: str) -> str:
    """Make a host identifier safe for use in a file name.

    Keeps letters, digits, dot, underscore and hyphen; every other
    character becomes an underscore.
    """
    if SAFE_HOST_PATTERN.match(host):
        return host
    return _UNSAFE_HOST_CHARS.sub("_", host)


def ensure_no_escape(template: str, resolved: str) -> str:
    """Reject a substituted path that climbs above where the template points.

    Args:
        template: Path before host substitution
        resolved: Path after host substitution

    Returns:
        The resolved path, unchanged

    Raises:
        PathTraversalError: If the substitution introduced a parent-directory
            escape
    """
    normalized = os.path.normpath(resolved)
    if normalized == os.pardir or normalized.startswith(os.pardir + os.sep):
        raise PathTraversalError(
            f"Invalid path after host substitution: {normalized}"
        )

    # Absolute paths normalize ".." away, so compare segment counts instead
    if PurePath(resolved).parts.count(os.pardir) > PurePath(template).parts.count(
        os.pardir
    ):
        raise PathTraversalError(
            f"Invalid path after host substitution: {normalized}"
        )

    return resolved
