"""Credential redaction for error text returned to callers."""

import re
from collections.abc import Iterable
from typing import Final

REDACTED: Final = "[REDACTED]"

# "name=value" / "name: value" pairs; bare words such as "Host key" are left alone
_SENSITIVE_PATTERNS: Final[list[tuple[re.Pattern[str], str]]] = [
    (re.compile(rf"\b{name}\s*[=:]\s*\S+", re.IGNORECASE), f"{name}: {REDACTED}")
    for name in ("password", "passphrase", "key", "secret", "token", "auth")
]


def error_message(err: BaseException | str) -> str:
    """Human-readable text for an exception, falling back to its type name."""
    if isinstance(err, str):
        return err
    text = str(err).strip()
    return text or type(err).__name__


def sanitize_error(err: BaseException | str, secrets: Iterable[str | None] = ()) -> str:
    """Strip credential-like substrings from an error message.

    Args:
        err: Exception or message to clean
        secrets: Literal values (passwords, key material) that must never
            appear in the output

    Returns:
        Message safe to include in a result payload
    """
    message = error_message(err)

    for secret in secrets:
        if secret:
            message = message.replace(secret, REDACTED)

    for pattern, replacement in _SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)

    return message
