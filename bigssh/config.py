"""Configuration management for bigssh."""

import logging
import os
import re
from contextlib import suppress
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path

from bigssh.models import SSHCredentials

logger = logging.getLogger(__name__)

_HOST_RE = re.compile(r"^Host\s+(\S+)", re.IGNORECASE)
_KV_RE = re.compile(r"^(\w+)\s+(.+)$")


def _get_env_int(key: str) -> int | None:
    if val := os.getenv(key):
        with suppress(ValueError):
            return int(val)
    return None


@dataclass
class Config:
    """bigssh configuration."""

    ssh_config_path: Path = field(
        default_factory=lambda: Path.home() / ".ssh" / "config"
    )
    allowlist: list[str] = field(default_factory=list)
    blocklist: list[str] = field(default_factory=list)
    connect_timeout: int = 30
    min_error: int = 1  # Lowest exit code reported as a failure
    # Transport configuration
    transport: str = "http"  # "http" or "stdio"
    http_host: str = "0.0.0.0"
    http_port: int = 8000

    _hosts: dict[str, SSHCredentials] = field(default_factory=dict, init=False, repr=False)
    _parsed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        """Apply BIGSSH_* environment variable overrides."""
        val = _get_env_int("BIGSSH_CONNECT_TIMEOUT")
        if val is not None:
            if val < 0:
                logger.warning(
                    "BIGSSH_CONNECT_TIMEOUT must be >= 0, got %d. Using default: %d",
                    val,
                    self.connect_timeout,
                )
            else:
                self.connect_timeout = val

        val = _get_env_int("BIGSSH_MIN_ERROR")
        if val is not None:
            self.min_error = val

        transport = os.getenv("BIGSSH_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            self.transport = transport

        if http_host := os.getenv("BIGSSH_HTTP_HOST"):
            self.http_host = http_host

        val = _get_env_int("BIGSSH_HTTP_PORT")
        if val is not None:
            self.http_port = val

        logger.debug(
            "Config initialized: transport=%s, connect_timeout=%d, min_error=%d",
            self.transport,
            self.connect_timeout,
            self.min_error,
        )

    def _store_host(self, name: str | None, data: dict[str, str]) -> None:
        if not name or name == "*" or not data.get("hostname"):
            return
        try:
            port = int(data.get("port", "22"))
        except ValueError:
            port = 22
        self._hosts[name] = SSHCredentials(
            name=name,
            hostname=data["hostname"],
            user=data.get("user", "root"),
            port=port,
            identity_file=data.get("identityfile"),
        )

    def _parse_ssh_config(self) -> None:
        """Parse SSH config file and populate hosts."""
        if self._parsed:
            return
        self._parsed = True

        try:
            content = self.ssh_config_path.read_text()
        except FileNotFoundError:
            logger.warning("SSH config not found: %s", self.ssh_config_path)
            return
        except OSError as e:
            logger.warning("Cannot read SSH config %s: %s", self.ssh_config_path, e)
            return

        current_host: str | None = None
        current_data: dict[str, str] = {}
        global_defaults: dict[str, str] = {}

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            host_match = _HOST_RE.match(line)
            if host_match:
                self._store_host(current_host, current_data)
                current_host = host_match.group(1)
                current_data = global_defaults.copy() if current_host != "*" else {}
                continue

            kv_match = _KV_RE.match(line)
            if kv_match and current_host:
                key = kv_match.group(1).lower()
                value = kv_match.group(2)
                if key == "identityfile":
                    value = os.path.expanduser(value)
                current_data[key] = value
                if current_host == "*":
                    global_defaults[key] = value

        self._store_host(current_host, current_data)
        logger.debug("Parsed %d SSH host(s) from config", len(self._hosts))

    def _is_host_allowed(self, name: str) -> bool:
        """Check if host passes allowlist/blocklist filters."""
        if self.allowlist:
            return any(fnmatch(name, pattern) for pattern in self.allowlist)
        return not any(fnmatch(name, pattern) for pattern in self.blocklist)

    def get_hosts(self) -> dict[str, SSHCredentials]:
        """Get all available SSH hosts after filtering."""
        self._parse_ssh_config()
        return {
            name: host
            for name, host in self._hosts.items()
            if self._is_host_allowed(name)
        }

    def get_host(self, name: str) -> SSHCredentials | None:
        """Get a specific host by name."""
        return self.get_hosts().get(name)

    @property
    def known_hosts_path(self) -> str | None:
        """Path to known_hosts file, or None to disable verification.

        Environment: BIGSSH_KNOWN_HOSTS
        Default: ~/.ssh/known_hosts (must exist)
        Special value: "none" disables verification

        Raises:
            FileNotFoundError: If the known_hosts file doesn't exist
        """
        value = os.getenv("BIGSSH_KNOWN_HOSTS", "").strip()

        if value.lower() == "none":
            logger.critical(
                "SSH host key verification DISABLED (BIGSSH_KNOWN_HOSTS=none). "
                "Connections are vulnerable to man-in-the-middle attacks."
            )
            return None

        path = Path(os.path.expanduser(value)) if value else Path.home() / ".ssh" / "known_hosts"
        if not path.exists():
            raise FileNotFoundError(
                f"SSH host key verification required but known_hosts file not found: {path}\n"
                f"Add host keys with: ssh-keyscan <hostname> >> {path}\n"
                f"or disable verification (NOT RECOMMENDED): export BIGSSH_KNOWN_HOSTS=none"
            )
        return str(path)

    @property
    def strict_host_key_checking(self) -> bool:
        """Whether to reject unknown host keys.

        Environment: BIGSSH_STRICT_HOST_KEY_CHECKING (default: true)
        """
        return os.getenv("BIGSSH_STRICT_HOST_KEY_CHECKING", "true").lower() != "false"
