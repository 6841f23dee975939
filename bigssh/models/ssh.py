"""SSH-related data models."""

from dataclasses import dataclass


@dataclass
class SSHCredentials:
    """Named SSH host with a file-addressed private key."""

    name: str
    hostname: str
    user: str = "root"
    port: int = 22
    identity_file: str | None = None


@dataclass(frozen=True)
class ConnectionParams:
    """Parameters for a single SSH connection attempt.

    Built per execution; ``private_key`` holds the key material read from
    disk for this call only.
    """

    host: str
    port: int
    username: str
    private_key: bytes = b""

    def __repr__(self) -> str:
        return (
            f"ConnectionParams(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, private_key=<{len(self.private_key)} bytes>)"
        )

    @property
    def target(self) -> str:
        """Return ``user@host:port`` for logging."""
        return f"{self.username}@{self.host}:{self.port}"
