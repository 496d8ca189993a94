"""Per-host results for multi-host operations."""

from dataclasses import asdict, dataclass
from typing import Any


def _without_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class ExecuteResult:
    """Result of running a command on one host.

    A non-zero exit code is a normal result with ``success=False``; a
    connection or transport failure has ``error`` set and no ``exit_code``.
    """

    host: str
    success: bool
    stdout: str | None = None
    stderr: str | None = None
    exit_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation without unset fields."""
        return _without_none(asdict(self))


@dataclass(frozen=True)
class TransferResult:
    """Result of an upload or download for one host."""

    host: str
    success: bool
    local_path: str
    remote_path: str
    bytes_transferred: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation without unset fields."""
        return _without_none(asdict(self))
