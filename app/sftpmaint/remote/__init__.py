"""Remote filesystem access.

This module provides the client interface consumed by the maintenance
engine, its listing model, and the paramiko-backed SFTP implementation.
"""

from sftpmaint.remote.client import PathNotFoundError, RemoteError, RemoteFileClient
from sftpmaint.remote.models import DirectoryEntry
from sftpmaint.remote.sftp import SftpClient

__all__ = [
    "DirectoryEntry",
    "PathNotFoundError",
    "RemoteError",
    "RemoteFileClient",
    "SftpClient",
]
