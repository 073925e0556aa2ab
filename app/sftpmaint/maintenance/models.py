"""Result models for maintenance sweeps.

This module defines the outcome of every remote operation the engine
performs, the per-node results it records, and the per-sweep report that
aggregates them. Nothing here is persisted between runs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from sftpmaint.remote.models import DirectoryEntry


class Outcome(str, Enum):
    """Outcome of one remote operation.

    Attributes:
        OK: The operation succeeded.
        NOT_FOUND: The path no longer exists (benign during traversal).
        FAILED: Any other failure.
    """

    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class NodeAction(str, Enum):
    """Action taken on a visited node.

    Attributes:
        LIST: Directory listing (recorded only when it did not succeed).
        CREATE_DIR: Creation of a mirrored archive directory.
        MOVE: Copy to the archive followed by deletion of the source.
        DELETE: Purge of an archived file.
    """

    LIST = "list"
    CREATE_DIR = "create_dir"
    MOVE = "move"
    DELETE = "delete"


class SweepKind(str, Enum):
    """Policy applied by a sweep."""

    ARCHIVE = "archive"
    PURGE = "purge"


@dataclass(frozen=True, slots=True)
class Listing:
    """Result of listing one remote directory.

    Attributes:
        path: Directory that was listed.
        outcome: Outcome of the listing call.
        entries: Entries without "." and "..", in server order.
        error: Error message when the listing did not succeed.
    """

    path: str
    outcome: Outcome
    entries: tuple[DirectoryEntry, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Check if the listing succeeded."""
        return self.outcome == Outcome.OK


@dataclass(frozen=True, slots=True)
class NodeResult:
    """Result of one action on one remote node.

    Attributes:
        path: Path operated on (the source path for moves).
        action: Action that was taken.
        outcome: Outcome of the action.
        destination: Archive path for moves.
        error: Error message if the action did not succeed.
        size_bytes: Number of bytes copied for moves.
        dry_run: Whether the action was only simulated.
    """

    path: str
    action: NodeAction
    outcome: Outcome
    destination: str | None = None
    error: str | None = None
    size_bytes: int | None = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Check if the action succeeded."""
        return self.outcome == Outcome.OK

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return self.outcome == Outcome.FAILED


@dataclass(slots=True)
class SweepReport:
    """Summary of one sweep.

    Attributes:
        kind: Policy applied by the sweep.
        root: Root folder the sweep started from.
        threshold: Files modified strictly before this are acted on.
        results: Node results in traversal order.
        skipped: Entries classified as "leave in place".
        completed: Whether the sweep reached its end.
    """

    kind: SweepKind
    root: str
    threshold: datetime
    results: list[NodeResult] = field(default_factory=list)
    skipped: int = 0
    completed: bool = False

    def add(self, result: NodeResult) -> NodeResult:
        """Record a node result and return it."""
        self.results.append(result)
        return result

    def _count(self, action: NodeAction, outcome: Outcome = Outcome.OK) -> int:
        return sum(1 for r in self.results if r.action == action and r.outcome == outcome)

    @property
    def moved(self) -> int:
        """Number of files moved (or that would be moved in dry-run)."""
        return self._count(NodeAction.MOVE)

    @property
    def deleted(self) -> int:
        """Number of files purged (or that would be purged in dry-run)."""
        return self._count(NodeAction.DELETE)

    @property
    def created(self) -> int:
        """Number of archive directories created."""
        return self._count(NodeAction.CREATE_DIR)

    @property
    def not_found(self) -> int:
        """Number of directories that vanished before they were listed."""
        return self._count(NodeAction.LIST, Outcome.NOT_FOUND)

    @property
    def failures(self) -> list[NodeResult]:
        """Failed node results."""
        return [r for r in self.results if r.failed]

    @property
    def failed(self) -> int:
        """Number of failed node actions."""
        return len(self.failures)
