"""Tests for multi-host command execution."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcp_ssh.config.settings import Settings
from mcp_ssh.models import ConnectionOverrides
from mcp_ssh.services.connection import ConnectionError
from mcp_ssh.services.executors import execute_command, run_command, run_on_hosts


def completed(
    stdout: str | bytes | None = b"",
    stderr: str | bytes | None = b"",
    exit_status: int | None = 0,
) -> SimpleNamespace:
    """SSHCompletedProcess stand-in; output is bytes as with encoding=None."""
    if isinstance(stdout, str):
        stdout = stdout.encode()
    if isinstance(stderr, str):
        stderr = stderr.encode()
    return SimpleNamespace(stdout=stdout, stderr=stderr, exit_status=exit_status)


def mock_conn(result: SimpleNamespace) -> MagicMock:
    conn = MagicMock()
    conn.run = AsyncMock(return_value=result)
    return conn


class FakeSessions:
    """Session factory stand-in keyed by host identifier."""

    def __init__(self, conns: dict[str, Any], **settings: Any) -> None:
        self.settings = Settings(**settings)
        self.conns = conns
        self.opened: list[str] = []
        self.closed: list[str] = []

    @asynccontextmanager
    async def session(
        self, host: str, overrides: Any = None, timeout_ms: Any = None
    ) -> AsyncIterator[Any]:
        conn = self.conns.get(host)
        if conn is None:
            raise ConnectionError(host, "getaddrinfo failed: Name or service not known")
        self.opened.append(host)
        try:
            yield conn
        finally:
            self.closed.append(host)


@pytest.mark.asyncio
async def test_run_command_requests_raw_bytes() -> None:
    conn = mock_conn(completed(stdout=b"hello\n", stderr=None, exit_status=0))

    stdout, stderr, exit_code = await run_command(conn, "echo hello")

    assert (stdout, stderr, exit_code) == ("hello", "", 0)
    conn.run.assert_awaited_once_with("echo hello", check=False, encoding=None)


@pytest.mark.asyncio
async def test_invalid_utf8_output_is_kept() -> None:
    sessions = FakeSessions(
        {"web1": mock_conn(completed(stdout=b"\xff\xfeok\n", stderr=b"warn\x80\n"))}
    )

    result = await execute_command(sessions, "web1", "cat /bin/true")

    assert result.success is True
    assert result.stdout == "\ufffd\ufffdok"
    assert result.stderr == "warn\ufffd"


@pytest.mark.asyncio
async def test_execute_success() -> None:
    sessions = FakeSessions({"web1": mock_conn(completed(stdout="up 3 days\n"))})

    result = await execute_command(sessions, "web1", "uptime")

    assert result.success is True
    assert result.exit_code == 0
    assert result.stdout == "up 3 days"
    assert result.error is None
    assert sessions.closed == ["web1"]


@pytest.mark.asyncio
async def test_execute_nonzero_exit_is_a_result_not_an_error() -> None:
    sessions = FakeSessions(
        {"web1": mock_conn(completed(stderr="No such file\n", exit_status=2))}
    )

    result = await execute_command(sessions, "web1", "ls /missing")

    assert result.success is False
    assert result.exit_code == 2
    assert result.stderr == "No such file"
    assert result.error is None


@pytest.mark.asyncio
async def test_execute_connection_failure() -> None:
    sessions = FakeSessions({})

    result = await execute_command(sessions, "ghost", "uptime")

    assert result.success is False
    assert result.exit_code is None
    assert "Name or service not known" in result.error


@pytest.mark.asyncio
async def test_execute_missing_exit_status() -> None:
    sessions = FakeSessions({"web1": mock_conn(completed(stdout="partial", exit_status=None))})

    result = await execute_command(sessions, "web1", "kill -9 $$")

    assert result.success is False
    assert result.exit_code is None
    assert result.stdout == "partial"
    assert "exit status" in result.error


@pytest.mark.asyncio
async def test_execute_operation_deadline() -> None:
    async def slow_run(command: str, **kwargs: Any) -> SimpleNamespace:
        await asyncio.sleep(5)
        return completed()

    conn = MagicMock()
    conn.run = slow_run
    sessions = FakeSessions({"web1": conn})
    sessions.settings = SimpleNamespace(operation_timeout=0.05, max_concurrency=10)

    result = await execute_command(sessions, "web1", "sleep 60")

    assert result.success is False
    assert "timed out" in result.error
    assert sessions.closed == ["web1"]


@pytest.mark.asyncio
async def test_execute_transport_error_is_sanitized() -> None:
    conn = MagicMock()
    conn.run = AsyncMock(side_effect=OSError("channel closed, password=hunter2"))
    sessions = FakeSessions({"web1": conn})

    result = await execute_command(
        sessions, "web1", "uptime", overrides=ConnectionOverrides(password="hunter2")
    )

    assert result.success is False
    assert "hunter2" not in result.error
    assert "channel closed" in result.error


@pytest.mark.asyncio
async def test_run_on_hosts_mixed_outcomes_in_input_order() -> None:
    sessions = FakeSessions(
        {
            "web1": mock_conn(completed(stdout="ok")),
            "web2": mock_conn(completed(stdout="ok")),
        }
    )

    results = await run_on_hosts(sessions, ["web1", "down", "web2"], "true")

    assert [r.host for r in results] == ["web1", "down", "web2"]
    assert [r.success for r in results] == [True, False, True]
    assert results[0].exit_code == 0
    assert results[1].exit_code is None
    assert results[1].error


@pytest.mark.asyncio
async def test_run_on_hosts_respects_limit() -> None:
    in_flight = 0
    peak = 0

    async def tracked_run(command: str, **kwargs: Any) -> SimpleNamespace:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return completed(stdout="ok")

    conns = {}
    for i in range(6):
        conn = MagicMock()
        conn.run = tracked_run
        conns[f"h{i}"] = conn
    sessions = FakeSessions(conns, max_concurrency=2)

    results = await run_on_hosts(sessions, list(conns), "true")

    assert all(r.success for r in results)
    assert peak == 2


@pytest.mark.asyncio
async def test_each_host_gets_its_own_session() -> None:
    sessions = FakeSessions(
        {"a": mock_conn(completed()), "b": mock_conn(completed())}
    )

    await run_on_hosts(sessions, ["a", "b"], "true", limit=1)

    assert sessions.opened == ["a", "b"]
    assert sessions.closed == ["a", "b"]
