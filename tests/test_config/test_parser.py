"""Tests for SSHConfigParser."""

import os
from pathlib import Path

import pytest

from mcp_ssh.config.parser import SSHConfigParser
from mcp_ssh.models import current_user


@pytest.fixture
def sample_ssh_config(tmp_path: Path) -> Path:
    """Create sample SSH config file."""
    config = tmp_path / "ssh_config"
    config.write_text("""
Host test-host
    HostName 192.168.1.100
    User admin
    Port 2222
    IdentityFile ~/.ssh/test_key

Host jumped
    HostName 10.0.0.5
    ProxyJump bastion.example.com

Host *
    User root
""")
    return config


def test_parse_ssh_config(sample_ssh_config: Path) -> None:
    """Verify parser extracts hosts from SSH config."""
    hosts = SSHConfigParser(sample_ssh_config).parse()

    assert "test-host" in hosts
    assert hosts["test-host"].hostname == "192.168.1.100"
    assert hosts["test-host"].user == "admin"
    assert hosts["test-host"].port == 2222


def test_parse_reads_proxy_jump(sample_ssh_config: Path) -> None:
    """ProxyJump is carried onto the host."""
    hosts = SSHConfigParser(sample_ssh_config).parse()

    assert hosts["jumped"].proxy_jump == "bastion.example.com"
    assert hosts["jumped"].port == 22


def test_wildcard_block_provides_defaults(sample_ssh_config: Path) -> None:
    """Host * values fill in directives a host does not set itself."""
    hosts = SSHConfigParser(sample_ssh_config).parse()

    assert hosts["jumped"].user == "root"
    # First obtained value wins
    assert hosts["test-host"].user == "admin"


def test_parse_skips_wildcard_hosts(sample_ssh_config: Path) -> None:
    """Wildcard patterns are never listed as hosts."""
    hosts = SSHConfigParser(sample_ssh_config).parse()

    assert "*" not in hosts
    assert list(hosts) == ["test-host", "jumped"]


def test_parse_expands_tilde_in_identity_file(sample_ssh_config: Path) -> None:
    """Parser expands ~ in IdentityFile paths."""
    hosts = SSHConfigParser(sample_ssh_config).parse()

    assert hosts["test-host"].identity_file == os.path.expanduser("~/.ssh/test_key")


def test_parse_missing_config_returns_empty(tmp_path: Path) -> None:
    """Parser returns empty dict for missing config file."""
    assert SSHConfigParser(tmp_path / "nonexistent").parse() == {}


def test_parse_empty_config_returns_empty(tmp_path: Path) -> None:
    """Parser returns empty dict for empty config file."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("")

    assert SSHConfigParser(ssh_config).parse() == {}


def test_parse_multiple_names_on_host_line(tmp_path: Path) -> None:
    """Each name on a Host line becomes its own alias."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("""
Host web1 web2 web-*
    User deploy
    Port 2200
""")
    hosts = SSHConfigParser(ssh_config).parse()

    assert set(hosts) == {"web1", "web2"}
    assert hosts["web1"].hostname == "web1"
    assert hosts["web2"].port == 2200
    assert hosts["web2"].user == "deploy"


def test_parse_question_mark_pattern_applies_but_is_not_listed(tmp_path: Path) -> None:
    """Patterns with ? match hosts without being hosts themselves."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("""
Host db1
    HostName 10.1.1.1

Host db?
    User postgres
""")
    hosts = SSHConfigParser(ssh_config).parse()

    assert list(hosts) == ["db1"]
    assert hosts["db1"].user == "postgres"


def test_negated_pattern_excludes_host(tmp_path: Path) -> None:
    """!pattern stops a block from applying."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("""
Host prod
    HostName prod.example.com

Host staging
    HostName staging.example.com

Host * !prod
    User tester
""")
    hosts = SSHConfigParser(ssh_config).parse()

    assert hosts["staging"].user == "tester"
    assert hosts["prod"].user == current_user()


def test_defaults_when_directives_missing(tmp_path: Path) -> None:
    """HostName defaults to the alias and User to the local user."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("Host bare\n")
    hosts = SSHConfigParser(ssh_config).parse()

    assert hosts["bare"].hostname == "bare"
    assert hosts["bare"].port == 22
    assert hosts["bare"].user == current_user()
    assert hosts["bare"].identity_file is None


@pytest.mark.parametrize("port", ["abc", "0", "70000", "-1"])
def test_invalid_port_falls_back_to_22(tmp_path: Path, port: str) -> None:
    """Unparseable or out-of-range ports fall back to 22."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text(f"Host h\n    HostName h.example.com\n    Port {port}\n")

    assert SSHConfigParser(ssh_config).parse()["h"].port == 22


def test_equals_syntax_and_case_insensitive_keys(tmp_path: Path) -> None:
    """Key=Value and mixed-case keywords are accepted."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("""
host alt
    hostname=alt.example.com
    PORT = 2022
    user=ops
""")
    host = SSHConfigParser(ssh_config).parse()["alt"]

    assert host.hostname == "alt.example.com"
    assert host.port == 2022
    assert host.user == "ops"


def test_match_blocks_are_ignored(tmp_path: Path) -> None:
    """Directives inside Match blocks do not leak onto hosts."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("""
Host app
    HostName app.example.com

Match user root
    Port 2222
""")
    assert SSHConfigParser(ssh_config).parse()["app"].port == 22


def test_comments_and_garbage_lines_are_skipped(tmp_path: Path) -> None:
    """Comments and malformed lines never break parsing."""
    ssh_config = tmp_path / "ssh_config"
    ssh_config.write_text("""
# a comment
Host ok
    HostName ok.example.com
    !!!
    UnknownDirective value
""")
    hosts = SSHConfigParser(ssh_config).parse()

    assert hosts["ok"].hostname == "ok.example.com"
