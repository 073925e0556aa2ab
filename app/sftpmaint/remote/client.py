"""Abstract base class for remote filesystem clients.

This module defines the RemoteFileClient interface consumed by the
maintenance engine, and the errors its primitives raise.
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self

from sftpmaint.remote.models import DirectoryEntry


class RemoteError(Exception):
    """Raised when a remote operation fails."""


class PathNotFoundError(RemoteError):
    """Raised when a remote path does not exist."""


class RemoteFileClient(ABC):
    """Abstract base class for remote filesystem clients.

    A client wraps one session. Operations are synchronous and only one
    is in flight at a time. The client is a context manager: the session
    is opened on enter and always closed on exit.

    Example:
        >>> with SftpClient("sftp.example.com", 22, "svc", "secret") as client:
        ...     for entry in client.list_directory("/upload"):
        ...         print(entry.name, entry.is_directory)
    """

    @abstractmethod
    def connect(self) -> None:
        """Open the session.

        Raises:
            RemoteError: If the connection or authentication fails.
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Close the session. Safe to call when not connected."""

    @abstractmethod
    def list_directory(self, path: str) -> list[DirectoryEntry]:
        """List the entries of a remote directory.

        Raises:
            PathNotFoundError: If the directory does not exist.
            RemoteError: On any other failure.
        """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a remote path exists.

        Raises:
            RemoteError: If the check itself fails.
        """

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a remote directory (parent must exist).

        Raises:
            RemoteError: If the directory cannot be created.
        """

    @abstractmethod
    def download_file(self, path: str) -> bytes:
        """Read the full content of a remote file.

        Raises:
            PathNotFoundError: If the file does not exist.
            RemoteError: On any other failure.
        """

    @abstractmethod
    def upload_file(self, data: bytes, path: str) -> None:
        """Write data to a remote file, creating or overwriting it.

        Returns only once the server acknowledged the complete write.

        Raises:
            RemoteError: If the write fails.
        """

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Delete a remote file.

        Raises:
            PathNotFoundError: If the file does not exist.
            RemoteError: On any other failure.
        """

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.disconnect()
