"""SFTP upload/download across many hosts.

Downloads from several hosts need one local file per host. The local path
is derived, in order of priority, by:

1. replacing every ``{host}`` placeholder with the sanitized host name
2. adding ``_<host>`` before the extension when more than one host is targeted
3. using the path unchanged
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from mcp_ssh.models import ConnectionOverrides, TransferResult
from mcp_ssh.services.concurrency import run_bounded
from mcp_ssh.services.connection import ConnectionError
from mcp_ssh.services.executors import operation_deadline
from mcp_ssh.utils.sanitize import sanitize_error
from mcp_ssh.utils.validation import (
    PathTraversalError,
    ensure_no_escape,
    sanitize_host_name,
)

if TYPE_CHECKING:
    import asyncssh

    from mcp_ssh.services.connection import SessionFactory

logger = logging.getLogger(__name__)

HOST_PLACEHOLDER = "{host}"

Direction = Literal["upload", "download"]


def substitute_host(local_path: str, host: str) -> str:
    """Replace every host placeholder with the sanitized host name.

    Raises:
        PathTraversalError: If the result escapes to a parent directory
    """
    resolved = local_path.replace(HOST_PLACEHOLDER, sanitize_host_name(host))
    return ensure_no_escape(local_path, resolved)


def add_host_suffix(local_path: str, host: str) -> str:
    """Insert ``_<host>`` between the file name and its extension.

    Example:
        >>> add_host_suffix("./out.txt", "web1")
        './out_web1.txt'
    """
    directory, filename = os.path.split(local_path)
    base, ext = os.path.splitext(filename)
    return os.path.join(directory, f"{base}_{sanitize_host_name(host)}{ext}")


def resolve_download_path(local_path: str, host: str, multi_host: bool) -> str:
    """Derive the local destination for one host's download.

    Args:
        local_path: Path given by the caller, possibly with ``{host}``
        host: Host identifier
        multi_host: Whether more than one host is targeted

    Returns:
        Local path for this host

    Raises:
        PathTraversalError: If host substitution escapes the directory
    """
    if HOST_PLACEHOLDER in local_path:
        return substitute_host(local_path, host)
    if multi_host:
        return add_host_suffix(local_path, host)
    return local_path


async def _sftp_put(
    conn: "asyncssh.SSHClientConnection", local_path: str, remote_path: str
) -> int:
    source = Path(local_path)
    if not source.is_file():
        raise FileNotFoundError(f"Local file not found: {local_path}")
    async with conn.start_sftp_client() as sftp:
        await sftp.put(local_path, remote_path)
    return source.stat().st_size


async def _sftp_get(
    conn: "asyncssh.SSHClientConnection", remote_path: str, local_path: str
) -> int:
    async with conn.start_sftp_client() as sftp:
        await sftp.get(remote_path, local_path)
    destination = Path(local_path)
    return destination.stat().st_size if destination.exists() else 0


async def upload_file(
    factory: "SessionFactory",
    host: str,
    local_path: str,
    remote_path: str,
    overrides: ConnectionOverrides | None = None,
) -> TransferResult:
    """Upload a local file to one host. Never raises."""
    return await _transfer_one(
        factory, "upload", host, local_path, remote_path, overrides
    )


async def download_file(
    factory: "SessionFactory",
    host: str,
    remote_path: str,
    local_path: str,
    overrides: ConnectionOverrides | None = None,
) -> TransferResult:
    """Download a remote file from one host to ``local_path``. Never raises.

    The local parent directory is created if missing.
    """
    return await _transfer_one(
        factory, "download", host, local_path, remote_path, overrides
    )


async def _transfer_one(
    factory: "SessionFactory",
    direction: Direction,
    host: str,
    local_path: str,
    remote_path: str,
    overrides: ConnectionOverrides | None,
) -> TransferResult:
    secrets = (overrides.password,) if overrides else ()
    deadline = operation_deadline(factory)

    def failed(message: str) -> TransferResult:
        return TransferResult(
            host=host,
            success=False,
            local_path=local_path,
            remote_path=remote_path,
            error=message,
        )

    try:
        async with factory.session(host, overrides) as conn:
            if direction == "upload":
                size = await asyncio.wait_for(
                    _sftp_put(conn, local_path, remote_path), timeout=deadline
                )
            else:
                # Created after connecting; unreachable hosts leave no directories
                parent = os.path.dirname(local_path)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                size = await asyncio.wait_for(
                    _sftp_get(conn, remote_path, local_path), timeout=deadline
                )
    except ConnectionError as e:
        return failed(e.reason)
    except asyncio.TimeoutError:
        logger.warning("Transfer on %s exceeded %ss deadline", host, deadline)
        return failed(f"Transfer timed out after {deadline}s")
    except Exception as e:
        message = sanitize_error(e, secrets)
        logger.error("%s on %s failed: %s", direction.capitalize(), host, message)
        return failed(message)

    if direction == "upload":
        logger.info("Uploaded %s -> %s:%s (%d bytes)", local_path, host, remote_path, size)
    else:
        logger.info("Downloaded %s:%s -> %s (%d bytes)", host, remote_path, local_path, size)

    return TransferResult(
        host=host,
        success=True,
        local_path=local_path,
        remote_path=remote_path,
        bytes_transferred=size,
    )


async def run_transfer(
    factory: "SessionFactory",
    direction: Direction,
    hosts: list[str],
    local_path: str,
    remote_path: str,
    overrides: ConnectionOverrides | None = None,
    limit: int | None = None,
) -> list[TransferResult]:
    """Transfer a file to or from multiple hosts with bounded concurrency.

    Uploads send the same local file to every host. Downloads derive one
    local path per host; a host whose derived path is unsafe fails on its
    own without touching the file system.

    Args:
        factory: Session factory
        direction: "upload" (local -> remote) or "download" (remote -> local)
        hosts: Host identifiers
        local_path: Local file path, may contain ``{host}`` for downloads
        remote_path: Remote file path
        overrides: Per-call connection parameters applied to every host
        limit: Concurrency ceiling (default: settings.max_concurrency)

    Returns:
        One TransferResult per host, in input order

    Raises:
        ValueError: If direction is invalid
    """
    if direction not in ("upload", "download"):
        raise ValueError(f"direction must be 'upload' or 'download', got '{direction}'")

    if limit is None:
        limit = factory.settings.max_concurrency

    secrets = (overrides.password,) if overrides else ()
    multi_host = len(hosts) > 1

    async def transfer_host(host: str) -> TransferResult:
        if direction == "upload":
            return await upload_file(factory, host, local_path, remote_path, overrides)

        try:
            host_path = resolve_download_path(local_path, host, multi_host)
        except PathTraversalError as e:
            logger.error("Rejected download path for %s: %s", host, e)
            return TransferResult(
                host=host,
                success=False,
                local_path=local_path,
                remote_path=remote_path,
                error=str(e),
            )
        return await download_file(factory, host, remote_path, host_path, overrides)

    logger.info(
        "Starting %s of %s on %d host(s) (concurrency=%d)",
        direction,
        remote_path,
        len(hosts),
        limit,
    )

    return await run_bounded(
        hosts,
        transfer_host,
        limit,
        on_error=lambda host, exc: TransferResult(
            host=host,
            success=False,
            local_path=local_path,
            remote_path=remote_path,
            error=sanitize_error(exc, secrets),
        ),
    )
