"""Tests for SSH agent discovery."""

from pathlib import Path
from unittest.mock import patch

import pytest

from mcp_ssh.services import agent
from mcp_ssh.services.agent import find_agent_socket, is_agent_available


def test_env_socket_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SSH_AUTH_SOCK", "/tmp/agent.sock")

    assert find_agent_socket() == "/tmp/agent.sock"


def test_windows_uses_openssh_pipe(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)
    monkeypatch.delenv("OP_SSH_AUTH_SOCK", raising=False)

    with patch.object(agent.sys, "platform", "win32"):
        assert find_agent_socket() == agent.WINDOWS_OPENSSH_PIPE
        assert is_agent_available(agent.WINDOWS_OPENSSH_PIPE) is True


def test_windows_prefers_onepassword_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)
    monkeypatch.setenv("OP_SSH_AUTH_SOCK", r"\\.\pipe\op-agent")

    with patch.object(agent.sys, "platform", "win32"):
        assert find_agent_socket() == r"\\.\pipe\op-agent"


def test_linux_onepassword_socket(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)
    socket = tmp_path / ".1password" / "agent.sock"
    socket.parent.mkdir()
    socket.touch()

    with (
        patch.object(agent.sys, "platform", "linux"),
        patch.object(agent.Path, "home", return_value=tmp_path),
    ):
        assert find_agent_socket() == str(socket)


def test_no_agent(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)

    with (
        patch.object(agent.sys, "platform", "linux"),
        patch.object(agent.Path, "home", return_value=tmp_path),
    ):
        assert find_agent_socket() is None
        assert is_agent_available() is False


def test_is_agent_available_checks_socket_exists(tmp_path: Path) -> None:
    socket = tmp_path / "agent.sock"

    with patch.object(agent.sys, "platform", "linux"):
        assert is_agent_available(str(socket)) is False
        socket.touch()
        assert is_agent_available(str(socket)) is True
