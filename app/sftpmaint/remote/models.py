"""Remote filesystem listing models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """One entry of a remote directory listing.

    Entries are produced fresh by every listing call and never cached.

    Attributes:
        name: Entry name without any path component.
        is_directory: True for directories.
        last_modified: Server-reported modification time (timezone-aware, UTC),
            or None when the server did not report one.
    """

    name: str
    is_directory: bool
    last_modified: datetime | None

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.name:
            msg = "Entry name cannot be empty"
            raise ValueError(msg)
        if "/" in self.name:
            msg = f"Entry name must not contain a path separator: {self.name!r}"
            raise ValueError(msg)

    @property
    def is_dot_entry(self) -> bool:
        """Check if this is the "." or ".." pseudo-entry."""
        return self.name in (".", "..")
