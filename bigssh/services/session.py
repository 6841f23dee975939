"""Single-use SSH sessions built on asyncssh."""

import asyncio
import logging
import os
from pathlib import Path

import asyncssh

from bigssh.models import ConnectionParams
from bigssh.services.errors import ConnectionError, CredentialLoadError, ExecLaunchError

logger = logging.getLogger(__name__)


def load_private_key(host: str, path: str | None) -> bytes:
    """Read and validate private key material from disk.

    The file is read on every call so that a corrected or rotated key is
    picked up without restarting.

    Args:
        host: Host the key is for (used in the error)
        path: Path to the private key file

    Returns:
        Raw key bytes

    Raises:
        CredentialLoadError: If the file is missing, unreadable or not a key
    """
    if not path:
        raise CredentialLoadError(host, path, ValueError("no private key file configured"))

    key_path = Path(os.path.expanduser(path))
    try:
        material = key_path.read_bytes()
    except OSError as e:
        raise CredentialLoadError(host, str(key_path), e) from e

    try:
        asyncssh.import_private_key(material)
    except (asyncssh.KeyImportError, ValueError) as e:
        raise CredentialLoadError(host, str(key_path), e) from e

    logger.debug("Loaded private key for %s from %s", host, key_path)
    return material


class SSHSession:
    """One SSH connection used to run one command."""

    def __init__(self, conn: asyncssh.SSHClientConnection, host: str) -> None:
        self._conn = conn
        self.host = host

    async def exec(self, command: str) -> asyncssh.SSHClientProcess:
        """Start ``command`` on the remote host in binary mode.

        Raises:
            ExecLaunchError: If the remote side refuses the command channel
        """
        try:
            return await self._conn.create_process(command, encoding=None)
        except (asyncssh.Error, OSError) as e:
            raise ExecLaunchError(self.host, command, e) from e

    async def close(self) -> None:
        """Close the connection and wait until it is down."""
        self._conn.close()
        await self._conn.wait_closed()
        logger.debug("SSH session to %s closed", self.host)


class SessionFactory:
    """Opens one SSH session per request. No pooling, no retry."""

    def __init__(
        self,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        connect_timeout: float | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            known_hosts: Path to known_hosts file, or None to disable verification
            strict_host_key_checking: Whether to reject unknown host keys
            connect_timeout: Seconds to wait for the handshake, None for no limit
        """
        self._known_hosts = known_hosts
        self._strict_host_key = strict_host_key_checking
        self.connect_timeout = connect_timeout

        if self._known_hosts is None or not self._strict_host_key:
            logger.warning(
                "SSH host key verification DISABLED - vulnerable to MITM attacks. "
                "Set BIGSSH_KNOWN_HOSTS to a valid known_hosts file path."
            )

    @property
    def known_hosts(self) -> str | None:
        """known_hosts argument passed to asyncssh."""
        return self._known_hosts if self._strict_host_key else None

    async def connect(self, params: ConnectionParams) -> SSHSession:
        """Open a session using the key material in ``params``.

        Raises:
            ConnectionError: On authentication, network, handshake or timeout failure
        """
        logger.info("Opening SSH connection to %s", params.target)
        try:
            key = asyncssh.import_private_key(params.private_key)
            conn = await asyncssh.connect(
                params.host,
                port=params.port,
                username=params.username,
                client_keys=[key],
                known_hosts=self.known_hosts,
                connect_timeout=self.connect_timeout,
            )
        except (asyncssh.Error, OSError, asyncio.TimeoutError, ValueError) as e:
            logger.error("SSH connection to %s failed: %s", params.target, e)
            raise ConnectionError(params.host, e) from e

        logger.info("SSH connection established to %s", params.target)
        return SSHSession(conn, params.host)
