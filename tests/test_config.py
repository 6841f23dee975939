"""Tests for configuration module."""

from pathlib import Path

import pytest

from bigssh.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "BIGSSH_CONNECT_TIMEOUT",
        "BIGSSH_MIN_ERROR",
        "BIGSSH_TRANSPORT",
        "BIGSSH_HTTP_HOST",
        "BIGSSH_HTTP_PORT",
        "BIGSSH_KNOWN_HOSTS",
        "BIGSSH_STRICT_HOST_KEY_CHECKING",
    ):
        monkeypatch.delenv(key, raising=False)


SSH_CONFIG = """
Host *
    User admin
    IdentityFile ~/.ssh/id_ed25519

Host web1
    HostName 10.0.0.5
    Port 2222

Host db1
    HostName 10.0.0.6
    User postgres
    IdentityFile /keys/db

Host nohostname
    User nobody

Host badport
    HostName 10.0.0.7
    Port nope
"""


def test_parse_ssh_config_extracts_hosts(tmp_path: Path) -> None:
    """Hosts with a HostName are loaded with global defaults applied."""
    ssh_config = tmp_path / "config"
    ssh_config.write_text(SSH_CONFIG)

    hosts = Config(ssh_config_path=ssh_config).get_hosts()

    assert set(hosts) == {"web1", "db1", "badport"}
    assert hosts["web1"].hostname == "10.0.0.5"
    assert hosts["web1"].port == 2222
    assert hosts["web1"].user == "admin"
    assert hosts["web1"].identity_file == str(Path.home() / ".ssh" / "id_ed25519")
    assert hosts["db1"].user == "postgres"
    assert hosts["db1"].identity_file == "/keys/db"
    assert hosts["badport"].port == 22


def test_allowlist_and_blocklist(tmp_path: Path) -> None:
    ssh_config = tmp_path / "config"
    ssh_config.write_text(SSH_CONFIG)

    assert set(Config(ssh_config_path=ssh_config, allowlist=["web*"]).get_hosts()) == {
        "web1"
    }
    assert "db1" not in Config(ssh_config_path=ssh_config, blocklist=["db*"]).get_hosts()


def test_missing_ssh_config(tmp_path: Path) -> None:
    config = Config(ssh_config_path=tmp_path / "nope")

    assert config.get_hosts() == {}
    assert config.get_host("web1") is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BIGSSH_CONNECT_TIMEOUT", "5")
    monkeypatch.setenv("BIGSSH_MIN_ERROR", "3")
    monkeypatch.setenv("BIGSSH_TRANSPORT", "STDIO")
    monkeypatch.setenv("BIGSSH_HTTP_HOST", "127.0.0.1")
    monkeypatch.setenv("BIGSSH_HTTP_PORT", "9000")

    config = Config()

    assert config.connect_timeout == 5
    assert config.min_error == 3
    assert config.transport == "stdio"
    assert config.http_host == "127.0.0.1"
    assert config.http_port == 9000


def test_invalid_env_values_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BIGSSH_CONNECT_TIMEOUT", "-1")
    monkeypatch.setenv("BIGSSH_MIN_ERROR", "abc")
    monkeypatch.setenv("BIGSSH_TRANSPORT", "carrier-pigeon")

    config = Config()

    assert config.connect_timeout == 30
    assert config.min_error == 1
    assert config.transport == "http"


def test_known_hosts_none_disables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BIGSSH_KNOWN_HOSTS", "none")

    assert Config().known_hosts_path is None


def test_known_hosts_custom_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    known_hosts = tmp_path / "known_hosts"
    known_hosts.write_text("")
    monkeypatch.setenv("BIGSSH_KNOWN_HOSTS", str(known_hosts))

    assert Config().known_hosts_path == str(known_hosts)


def test_known_hosts_missing_raises(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BIGSSH_KNOWN_HOSTS", str(tmp_path / "missing"))

    with pytest.raises(FileNotFoundError, match="known_hosts"):
        Config().known_hosts_path


def test_strict_host_key_checking(monkeypatch: pytest.MonkeyPatch) -> None:
    assert Config().strict_host_key_checking is True

    monkeypatch.setenv("BIGSSH_STRICT_HOST_KEY_CHECKING", "false")
    assert Config().strict_host_key_checking is False
