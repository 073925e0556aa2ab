"""Pytest configuration and shared fixtures.

This module contains an in-memory RemoteFileClient used across the
engine, job and CLI tests, plus fixtures for common profiles.
"""

import logging
import posixpath
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sftpmaint.core.config import MaintenanceProfile
from sftpmaint.remote.client import PathNotFoundError, RemoteError, RemoteFileClient
from sftpmaint.remote.models import DirectoryEntry

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


def days_ago(days: float) -> datetime:
    """Return a timestamp the given number of days before NOW."""
    return NOW - timedelta(days=days)


@dataclass
class _Node:
    is_directory: bool
    last_modified: datetime | None
    data: bytes = b""


class InMemoryRemoteClient(RemoteFileClient):
    """RemoteFileClient over an in-memory tree.

    Listings return entries in insertion order, preceded by "." and ".."
    like a real SFTP server. Every primitive call is recorded in `calls`.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, _Node] = {"/": _Node(True, NOW)}
        self.calls: list[tuple[str, str]] = []
        self.connected = False
        self.connect_count = 0
        self.disconnect_count = 0
        self.connect_error: Exception | None = None
        self._failures: dict[tuple[str, str], Exception] = {}
        self._after_list: dict[str, Callable[[], None]] = {}

    # --- test setup helpers ---

    def add_dir(self, path: str, mtime: datetime = NOW) -> None:
        """Add a directory and any missing parents."""
        parent = posixpath.dirname(path)
        if parent not in self.nodes:
            self.add_dir(parent, mtime)
        self.nodes.setdefault(path, _Node(True, mtime))

    def add_file(
        self, path: str, mtime: datetime | None = NOW, data: bytes | None = None
    ) -> None:
        """Add a file and any missing parent directories."""
        parent = posixpath.dirname(path)
        if parent not in self.nodes:
            self.add_dir(parent)
        content = data if data is not None else f"content of {path}".encode()
        self.nodes[path] = _Node(False, mtime, content)

    def fail(self, operation: str, path: str, error: Exception | None = None) -> None:
        """Make a primitive raise for one path."""
        self._failures[(operation, path)] = error or RemoteError(f"{operation} failed: {path}")

    def after_list(self, path: str, hook: Callable[[], None]) -> None:
        """Run a hook right after a directory has been listed."""
        self._after_list[path] = hook

    def remove_tree(self, path: str) -> None:
        """Remove a directory and everything below it."""
        prefix = path.rstrip("/") + "/"
        for key in [k for k in self.nodes if k == path or k.startswith(prefix)]:
            del self.nodes[key]

    def is_file(self, path: str) -> bool:
        node = self.nodes.get(path)
        return node is not None and not node.is_directory

    def is_dir(self, path: str) -> bool:
        node = self.nodes.get(path)
        return node is not None and node.is_directory

    def content(self, path: str) -> bytes:
        return self.nodes[path].data

    def calls_for(self, operation: str) -> list[str]:
        return [path for op, path in self.calls if op == operation]

    # --- RemoteFileClient ---

    def connect(self) -> None:
        self.connect_count += 1
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    def disconnect(self) -> None:
        self.disconnect_count += 1
        self.connected = False

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        self._enter("list_directory", path)
        if not self.is_dir(path):
            raise PathNotFoundError(f"Path not found: {path}")
        entries = [
            DirectoryEntry(name=".", is_directory=True, last_modified=NOW),
            DirectoryEntry(name="..", is_directory=True, last_modified=NOW),
        ]
        for key, node in self.nodes.items():
            if key != "/" and posixpath.dirname(key) == path:
                entries.append(
                    DirectoryEntry(
                        name=posixpath.basename(key),
                        is_directory=node.is_directory,
                        last_modified=node.last_modified,
                    )
                )
        hook = self._after_list.pop(path, None)
        if hook is not None:
            hook()
        return entries

    def exists(self, path: str) -> bool:
        self._enter("exists", path)
        return path in self.nodes

    def create_directory(self, path: str) -> None:
        self._enter("create_directory", path)
        if path in self.nodes:
            raise RemoteError(f"Already exists: {path}")
        if not self.is_dir(posixpath.dirname(path)):
            raise PathNotFoundError(f"Path not found: {posixpath.dirname(path)}")
        self.nodes[path] = _Node(True, NOW)

    def download_file(self, path: str) -> bytes:
        self._enter("download_file", path)
        if not self.is_file(path):
            raise PathNotFoundError(f"Path not found: {path}")
        return self.nodes[path].data

    def upload_file(self, data: bytes, path: str) -> None:
        self._enter("upload_file", path)
        if not self.is_dir(posixpath.dirname(path)):
            raise PathNotFoundError(f"Path not found: {posixpath.dirname(path)}")
        self.nodes[path] = _Node(False, NOW, bytes(data))

    def delete_file(self, path: str) -> None:
        self._enter("delete_file", path)
        if not self.is_file(path):
            raise PathNotFoundError(f"Path not found: {path}")
        del self.nodes[path]

    def _enter(self, operation: str, path: str) -> None:
        if not self.connected:
            raise RemoteError("Not connected")
        self.calls.append((operation, path))
        error = self._failures.get((operation, path))
        if error is not None:
            raise error


@pytest.fixture
def remote() -> InMemoryRemoteClient:
    """Connected in-memory remote client with /work and /archive roots."""
    client = InMemoryRemoteClient()
    client.add_dir("/work")
    client.add_dir("/archive")
    client.connect()
    client.connect_count = 0
    return client


@pytest.fixture
def profile() -> MaintenanceProfile:
    """Profile pointing at the /work and /archive roots."""
    return MaintenanceProfile(
        host="sftp.example.com",
        username="svc",
        password="secret",
        parent_folder="/work",
        archive_folder="/archive",
    )


@pytest.fixture(autouse=True)
def reset_sftpmaint_logger() -> Iterator[None]:
    """Undo handler setup done by CLI invocations so caplog keeps working."""
    yield
    app_logger = logging.getLogger("sftpmaint")
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG config and state locations at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.delenv("SFTPMAINT_CONFIG", raising=False)
    return tmp_path


PROFILES_TOML = """
[logging]
level = "INFO"

[profiles.invoices]
host = "sftp.example.com"
username = "svc"
password = "secret"
parent_folder = "/work"
archive_folder = "/archive"
move_threshold_days = 7
delete_threshold_days = 30

[profiles.reports]
host = "files.example.org"
username = "reports"
password_env = "REPORTS_PASSWORD"
parent_folder = "/reports"
archive_folder = "/reports/Archive"
"""


@pytest.fixture
def profiles_file(isolated_dirs: Path) -> Path:
    """Profiles file with an "invoices" and a "reports" profile."""
    path = isolated_dirs / "profiles.toml"
    path.write_text(PROFILES_TOML)
    return path
