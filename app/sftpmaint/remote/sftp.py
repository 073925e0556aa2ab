"""Paramiko-backed SFTP client.

Implements the RemoteFileClient primitives over an SSH session, mapping
paramiko and socket failures onto RemoteError and PathNotFoundError.
"""

import errno
import io
import logging
import stat
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

import paramiko

from sftpmaint.core.config import HostKeyPolicy, MaintenanceProfile
from sftpmaint.remote.client import PathNotFoundError, RemoteError, RemoteFileClient
from sftpmaint.remote.models import DirectoryEntry

logger = logging.getLogger(__name__)

_HOST_KEY_POLICIES: dict[str, type[paramiko.MissingHostKeyPolicy]] = {
    "auto-add": paramiko.AutoAddPolicy,
    "reject": paramiko.RejectPolicy,
    "warning": paramiko.WarningPolicy,
}


def _is_not_found(exc: BaseException) -> bool:
    """Check if an exception reports a missing remote path."""
    return isinstance(exc, FileNotFoundError) or (
        isinstance(exc, OSError) and exc.errno == errno.ENOENT
    )


@contextmanager
def _remote_errors(action: str, path: str) -> Iterator[None]:
    """Translate paramiko and socket failures for one remote call."""
    try:
        yield
    except (OSError, EOFError, paramiko.SSHException) as e:
        if _is_not_found(e):
            raise PathNotFoundError(f"Path not found: {path}") from e
        raise RemoteError(f"Failed to {action} {path}: {e}") from e


def _to_entry(folder: str, attr: paramiko.SFTPAttributes) -> DirectoryEntry:
    """Convert one listdir_attr result into a DirectoryEntry."""
    if attr.st_mode is None:
        msg = f"Server reported no file type for {attr.filename} in {folder}"
        raise RemoteError(msg)
    last_modified = None
    if attr.st_mtime is not None:
        last_modified = datetime.fromtimestamp(attr.st_mtime, UTC)
    return DirectoryEntry(
        name=attr.filename,
        is_directory=stat.S_ISDIR(attr.st_mode),
        last_modified=last_modified,
    )


class SftpClient(RemoteFileClient):
    """SFTP client over a paramiko SSH session.

    Attributes:
        host: Server hostname.
        port: SSH port.
        username: Login user.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        *,
        timeout: float = 30.0,
        host_key_policy: HostKeyPolicy = "auto-add",
    ) -> None:
        """Initialize the client without connecting.

        Args:
            host: Server hostname.
            port: SSH port.
            username: Login user.
            password: Login password.
            timeout: Connect timeout in seconds.
            host_key_policy: Handling of host keys missing from known_hosts.
        """
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self._timeout = timeout
        self._host_key_policy = host_key_policy
        self._ssh: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    @classmethod
    def from_profile(cls, profile: MaintenanceProfile) -> "SftpClient":
        """Build a client from a maintenance profile.

        Raises:
            ConfigError: If the profile's password cannot be resolved.
        """
        return cls(
            profile.host,
            profile.port,
            profile.username,
            profile.resolve_password(),
            timeout=profile.connect_timeout,
            host_key_policy=profile.host_key_policy,
        )

    @property
    def is_connected(self) -> bool:
        """Check if an SFTP channel is open."""
        return self._sftp is not None

    def connect(self) -> None:
        """Open the SSH session and the SFTP channel.

        A partially opened session is closed again before the error is raised.

        Raises:
            RemoteError: If the connection or authentication fails.
        """
        if self._sftp is not None:
            return

        ssh = paramiko.SSHClient()
        try:
            ssh.load_system_host_keys()
            ssh.set_missing_host_key_policy(_HOST_KEY_POLICIES[self._host_key_policy]())
            ssh.connect(
                self.host,
                port=self.port,
                username=self.username,
                password=self._password,
                timeout=self._timeout,
                look_for_keys=False,
                allow_agent=False,
            )
            sftp = ssh.open_sftp()
        except (OSError, EOFError, paramiko.SSHException) as e:
            ssh.close()
            msg = f"Failed to connect to {self.host}:{self.port}: {e}"
            raise RemoteError(msg) from e

        self._ssh = ssh
        self._sftp = sftp
        logger.info("Connected to SFTP server: %s", self.host)

    def disconnect(self) -> None:
        """Close the SFTP channel and the SSH session."""
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None
            logger.info("Disconnected from SFTP server: %s", self.host)

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List a remote directory via listdir_attr.

        Entries without a modification time get last_modified=None.

        Raises:
            RemoteError: If an entry carries no permissions, since it cannot
                be told apart as a file or a directory.
        """
        sftp = self._require_sftp()
        with _remote_errors("list", path):
            attrs = sftp.listdir_attr(path)
        return [_to_entry(path, attr) for attr in attrs]

    def exists(self, path: str) -> bool:
        """Check a remote path with stat; a missing path is not an error."""
        sftp = self._require_sftp()
        try:
            with _remote_errors("stat", path):
                sftp.stat(path)
        except PathNotFoundError:
            return False
        return True

    def create_directory(self, path: str) -> None:
        """Create a remote directory."""
        sftp = self._require_sftp()
        with _remote_errors("create directory", path):
            sftp.mkdir(path)

    def download_file(self, path: str) -> bytes:
        """Download a remote file fully into memory."""
        sftp = self._require_sftp()
        buffer = io.BytesIO()
        with _remote_errors("download", path):
            sftp.getfo(path, buffer)
        return buffer.getvalue()

    def upload_file(self, data: bytes, path: str) -> None:
        """Upload data and confirm the remote size matches."""
        sftp = self._require_sftp()
        with _remote_errors("upload", path):
            sftp.putfo(io.BytesIO(data), path, file_size=len(data), confirm=True)

    def delete_file(self, path: str) -> None:
        """Delete a remote file."""
        sftp = self._require_sftp()
        with _remote_errors("delete", path):
            sftp.remove(path)

    def _require_sftp(self) -> paramiko.SFTPClient:
        """Return the open SFTP channel.

        Raises:
            RemoteError: If connect() has not been called.
        """
        if self._sftp is None:
            msg = f"Not connected to {self.host}"
            raise RemoteError(msg)
        return self._sftp
