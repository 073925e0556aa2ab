"""Tree-walking lifecycle policy engine.

The engine applies two sweeps to a remote tree through a RemoteFileClient:

- the archival sweep moves aged files from the working root into the
  mirrored path below the archive root;
- the purge sweep deletes aged files below the archive root.

Every node is handled in isolation. A failed listing, directory creation,
move or delete is logged and recorded in the SweepReport, and traversal
continues with the next sibling. Nothing raised by the client escapes a
sweep.
"""

import logging
import posixpath
from datetime import UTC, datetime, timedelta

from sftpmaint.maintenance.models import (
    Listing,
    NodeAction,
    NodeResult,
    Outcome,
    SweepKind,
    SweepReport,
)
from sftpmaint.remote.client import PathNotFoundError, RemoteFileClient
from sftpmaint.remote.models import DirectoryEntry

logger = logging.getLogger(__name__)

# Name reserved for an archive folder nested directly under the working root
ARCHIVE_FOLDER_NAME = "Archive"

DEFAULT_MAX_DEPTH = 64


def join_remote(folder: str, name: str) -> str:
    """Join a remote folder and an entry name."""
    return posixpath.join(folder, name)


def archive_path_for(path: str, working_root: str, archive_root: str) -> str:
    """Compute the archive counterpart of a path below the working root.

    Args:
        path: Remote path inside working_root.
        working_root: Working root folder.
        archive_root: Archive root folder.

    Returns:
        archive_root joined with the path relative to working_root.

    Raises:
        ValueError: If path is not inside working_root.
    """
    relative = posixpath.relpath(path, working_root)
    if relative == ".." or relative.startswith("../"):
        msg = f"{path} is not inside {working_root}"
        raise ValueError(msg)
    if relative == ".":
        return archive_root
    return posixpath.join(archive_root, relative)


def compute_threshold(days: int, now: datetime | None = None) -> datetime:
    """Return the cut-off date for an age threshold in days."""
    return (now or datetime.now(UTC)) - timedelta(days=days)


def is_older_than(entry: DirectoryEntry, threshold: datetime) -> bool:
    """Check if an entry was modified strictly before the threshold.

    An entry without a modification time is never old.
    """
    if entry.last_modified is None:
        return False
    return entry.last_modified < threshold


class MaintenanceEngine:
    """Applies the archival and purge policies to a remote tree.

    The engine is pure orchestration over the client's primitives and
    keeps no state between sweeps other than its options.

    Attributes:
        client: Connected remote filesystem client.
        dry_run: If True, report what would change without changing anything.
        max_depth: Deepest directory level visited below a sweep root.
        age_filter_top_level: Apply the move threshold to files directly
            under the working root. Off by default, so top-level files are
            moved regardless of age while nested files are age-filtered.
    """

    def __init__(
        self,
        client: RemoteFileClient,
        *,
        dry_run: bool = False,
        max_depth: int = DEFAULT_MAX_DEPTH,
        age_filter_top_level: bool = False,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            client: Connected remote filesystem client.
            dry_run: If True, simulate mutating operations.
            max_depth: Deepest directory level visited below a sweep root.
            age_filter_top_level: Age-filter files directly under the working root.
            log: Logger to report through. Defaults to this module's logger.
        """
        if max_depth < 0:
            msg = f"max_depth must be >= 0, got {max_depth}"
            raise ValueError(msg)
        self.client = client
        self.dry_run = dry_run
        self.max_depth = max_depth
        self.age_filter_top_level = age_filter_top_level
        self._log = log or logger

    # ------------------------------------------------------------------
    # Archival sweep
    # ------------------------------------------------------------------

    def run_archival_sweep(
        self,
        working_root: str,
        archive_root: str,
        move_threshold: datetime,
    ) -> SweepReport:
        """Move aged files from the working root into the archive.

        Entries named ".", ".." or "Archive" (any case) directly under the
        working root are never visited. Directories are mirrored below the
        archive root and walked by move_old_files_in_subfolder(). Files
        directly under the working root are moved without an age check
        unless age_filter_top_level is set.

        Args:
            working_root: Working root folder.
            archive_root: Archive root folder.
            move_threshold: Files modified before this date are moved.

        Returns:
            SweepReport for the archival sweep.
        """
        report = SweepReport(kind=SweepKind.ARCHIVE, root=working_root, threshold=move_threshold)
        self._log.info(
            "Starting file movement process. Threshold date: %s",
            f"{move_threshold:%Y-%m-%d %H:%M:%S}",
        )

        listing = self._list(working_root, report)
        if listing.ok:
            for entry in listing.entries:
                if entry.name.lower() == ARCHIVE_FOLDER_NAME.lower():
                    self._log.info("Skipping reserved archive entry: %s", entry.name)
                    report.skipped += 1
                    continue

                source_path = join_remote(working_root, entry.name)
                dest_path = archive_path_for(source_path, working_root, archive_root)

                if entry.is_directory:
                    self.ensure_directory_exists(dest_path, report)
                    self.move_old_files_in_subfolder(
                        source_path, dest_path, move_threshold, report, depth=1
                    )
                elif self.age_filter_top_level and not is_older_than(entry, move_threshold):
                    self._keep(report, source_path, entry)
                else:
                    report.add(self.move_file(source_path, dest_path))

        report.completed = True
        self._log.info(
            "File movement process completed: %d moved, %d directories created, "
            "%d left in place, %d failed.",
            report.moved,
            report.created,
            report.skipped,
            report.failed,
        )
        return report

    def move_old_files_in_subfolder(
        self,
        source_folder: str,
        dest_folder: str,
        move_threshold: datetime,
        report: SweepReport | None = None,
        depth: int = 1,
    ) -> SweepReport:
        """Recursively move aged files from a working subfolder.

        A folder that no longer exists ends this branch with a warning; any
        other listing failure ends it with an error. Neither reaches the
        caller, so sibling branches continue.

        Args:
            source_folder: Folder below the working root.
            dest_folder: Mirrored folder below the archive root.
            move_threshold: Files modified before this date are moved.
            report: Report to record into. A new one is created if None.
            depth: Level of source_folder below the working root.

        Returns:
            The report results were recorded into.
        """
        if report is None:
            report = SweepReport(
                kind=SweepKind.ARCHIVE, root=source_folder, threshold=move_threshold
            )
        if not self._within_depth(source_folder, depth, report):
            return report

        listing = self._list(source_folder, report)
        if not listing.ok:
            return report

        for entry in listing.entries:
            source_path = join_remote(source_folder, entry.name)
            dest_path = join_remote(dest_folder, entry.name)

            if entry.is_directory:
                self.ensure_directory_exists(dest_path, report)
                self.move_old_files_in_subfolder(
                    source_path, dest_path, move_threshold, report, depth=depth + 1
                )
            elif is_older_than(entry, move_threshold):
                report.add(self.move_file(source_path, dest_path))
            else:
                self._keep(report, source_path, entry)

        return report

    def ensure_directory_exists(self, path: str, report: SweepReport | None = None) -> bool:
        """Create a remote directory unless it already exists.

        Idempotent: an existing directory is left alone. A failure is
        logged and recorded, never raised; the caller carries on and any
        later operation against the missing directory fails on its own.

        Args:
            path: Remote directory path.
            report: Optional report to record the creation into.

        Returns:
            True if the directory exists or was created.
        """
        try:
            if self.client.exists(path):
                return True
            if not self.dry_run:
                self.client.create_directory(path)
        except Exception as e:
            self._log.error(
                "Failed to create directory %s: %s", path, e, exc_info=self._debug_enabled()
            )
            self._record(
                report,
                NodeResult(
                    path=path,
                    action=NodeAction.CREATE_DIR,
                    outcome=Outcome.FAILED,
                    error=str(e),
                ),
            )
            return False

        if self.dry_run:
            self._log.info("Dry-run: would create directory %s", path)
        else:
            self._log.info("Created directory: %s", path)
        self._record(
            report,
            NodeResult(
                path=path,
                action=NodeAction.CREATE_DIR,
                outcome=Outcome.OK,
                dry_run=self.dry_run,
            ),
        )
        return not self.dry_run

    def move_file(self, source_path: str, dest_path: str) -> NodeResult:
        """Move one file by copying it and then deleting the source.

        The file is downloaded fully into memory and uploaded fully. The
        source is deleted only after the upload returned without error. A
        failed copy leaves the source untouched. A failed delete after a
        successful copy leaves the file in both places; this is reported as
        a failure and the archive copy is kept.

        Args:
            source_path: File below the working root.
            dest_path: Mirrored path below the archive root.

        Returns:
            NodeResult for the move.
        """
        if self.dry_run:
            self._log.info("Dry-run: would move %s -> %s", source_path, dest_path)
            return NodeResult(
                path=source_path,
                action=NodeAction.MOVE,
                outcome=Outcome.OK,
                destination=dest_path,
                dry_run=True,
            )

        try:
            data = self.client.download_file(source_path)
            self.client.upload_file(data, dest_path)
        except Exception as e:
            self._log.error(
                "Failed to move file %s: %s", source_path, e, exc_info=self._debug_enabled()
            )
            return NodeResult(
                path=source_path,
                action=NodeAction.MOVE,
                outcome=Outcome.FAILED,
                destination=dest_path,
                error=str(e),
            )

        try:
            self.client.delete_file(source_path)
        except Exception as e:
            self._log.error(
                "Copied %s to %s but failed to delete the source, file now exists in both: %s",
                source_path,
                dest_path,
                e,
                exc_info=self._debug_enabled(),
            )
            return NodeResult(
                path=source_path,
                action=NodeAction.MOVE,
                outcome=Outcome.FAILED,
                destination=dest_path,
                error=f"Copied but source not deleted: {e}",
                size_bytes=len(data),
            )

        self._log.info("Moved file: %s -> %s", source_path, dest_path)
        return NodeResult(
            path=source_path,
            action=NodeAction.MOVE,
            outcome=Outcome.OK,
            destination=dest_path,
            size_bytes=len(data),
        )

    # ------------------------------------------------------------------
    # Purge sweep
    # ------------------------------------------------------------------

    def run_purge_sweep(self, archive_root: str, delete_threshold: datetime) -> SweepReport:
        """Delete aged files anywhere below the archive root.

        Args:
            archive_root: Archive root folder.
            delete_threshold: Files modified before this date are deleted.

        Returns:
            SweepReport for the purge sweep.
        """
        report = SweepReport(kind=SweepKind.PURGE, root=archive_root, threshold=delete_threshold)
        self._log.info(
            "Starting deletion of old files in archive: %s (Threshold: %s)",
            archive_root,
            f"{delete_threshold:%Y-%m-%d %H:%M:%S}",
        )

        self.delete_old_files_in_folder(archive_root, delete_threshold, report, depth=0)

        report.completed = True
        self._log.info(
            "Old file deletion process completed: %d deleted, %d kept, %d failed.",
            report.deleted,
            report.skipped,
            report.failed,
        )
        return report

    def delete_old_files_in_folder(
        self,
        folder: str,
        delete_threshold: datetime,
        report: SweepReport | None = None,
        depth: int = 0,
    ) -> SweepReport:
        """Recursively delete aged files below a folder.

        Subfolders are always descended into; there are no name
        exclusions. Listing failures end the branch as in the archival
        sweep, and a failed delete does not affect its siblings.

        Args:
            folder: Folder to purge.
            delete_threshold: Files modified before this date are deleted.
            report: Report to record into. A new one is created if None.
            depth: Level of folder below the archive root.

        Returns:
            The report results were recorded into.
        """
        if report is None:
            report = SweepReport(kind=SweepKind.PURGE, root=folder, threshold=delete_threshold)
        if not self._within_depth(folder, depth, report):
            return report

        listing = self._list(folder, report)
        if not listing.ok:
            return report

        for entry in listing.entries:
            path = join_remote(folder, entry.name)
            if entry.is_directory:
                self.delete_old_files_in_folder(path, delete_threshold, report, depth=depth + 1)
            elif is_older_than(entry, delete_threshold):
                report.add(self.delete_file(path))
            else:
                self._keep(report, path, entry)

        return report

    def delete_file(self, path: str) -> NodeResult:
        """Delete one archived file.

        Args:
            path: File below the archive root.

        Returns:
            NodeResult for the delete.
        """
        if self.dry_run:
            self._log.info("Dry-run: would delete %s", path)
            return NodeResult(
                path=path, action=NodeAction.DELETE, outcome=Outcome.OK, dry_run=True
            )

        try:
            self.client.delete_file(path)
        except Exception as e:
            self._log.error("Failed to delete file %s: %s", path, e, exc_info=self._debug_enabled())
            return NodeResult(
                path=path, action=NodeAction.DELETE, outcome=Outcome.FAILED, error=str(e)
            )

        self._log.info("Deleted file: %s", path)
        return NodeResult(path=path, action=NodeAction.DELETE, outcome=Outcome.OK)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _list(self, folder: str, report: SweepReport) -> Listing:
        """List a folder and classify the outcome.

        Unsuccessful listings are logged and recorded; the caller only
        looks at the outcome.
        """
        listing = self._read_directory(folder)
        if listing.outcome == Outcome.NOT_FOUND:
            self._log.warning(
                "Directory not found: %s. It may have been removed already.", folder
            )
        elif listing.outcome == Outcome.FAILED:
            self._log.error(
                "An error occurred while processing folder %s: %s", folder, listing.error
            )
        if not listing.ok:
            report.add(
                NodeResult(
                    path=folder,
                    action=NodeAction.LIST,
                    outcome=listing.outcome,
                    error=listing.error,
                )
            )
        return listing

    def _read_directory(self, folder: str) -> Listing:
        """Call the client and turn its exceptions into a Listing outcome."""
        try:
            entries = self.client.list_directory(folder)
        except PathNotFoundError as e:
            return Listing(path=folder, outcome=Outcome.NOT_FOUND, error=str(e))
        except Exception as e:
            return Listing(path=folder, outcome=Outcome.FAILED, error=str(e))
        return Listing(
            path=folder,
            outcome=Outcome.OK,
            entries=tuple(entry for entry in entries if not entry.is_dot_entry),
        )

    def _within_depth(self, folder: str, depth: int, report: SweepReport) -> bool:
        """Check the depth guard, recording a failure when it trips."""
        if depth <= self.max_depth:
            return True
        self._log.warning(
            "Maximum depth %d exceeded, not descending into %s", self.max_depth, folder
        )
        report.add(
            NodeResult(
                path=folder,
                action=NodeAction.LIST,
                outcome=Outcome.FAILED,
                error=f"Maximum depth {self.max_depth} exceeded",
            )
        )
        return False

    def _keep(self, report: SweepReport, path: str, entry: DirectoryEntry) -> None:
        """Leave a file in place until a later run."""
        if entry.last_modified is None:
            self._log.warning("Keeping %s: server reported no modification time", path)
        else:
            self._log.info(
                "Keeping %s (modified %s, threshold %s)",
                path,
                f"{entry.last_modified:%Y-%m-%d %H:%M:%S}",
                f"{report.threshold:%Y-%m-%d %H:%M:%S}",
            )
        report.skipped += 1

    def _debug_enabled(self) -> bool:
        return self._log.isEnabledFor(logging.DEBUG)

    @staticmethod
    def _record(report: SweepReport | None, result: NodeResult) -> None:
        if report is not None:
            report.add(result)
