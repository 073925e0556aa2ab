"""Maintenance job driver.

Runs both sweeps for one profile inside a single session. The session is
always closed, and no exception escapes run(): a job that cannot connect
is reported through JobResult.error and the log.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from sftpmaint.core.config import ConfigError, MaintenanceProfile
from sftpmaint.maintenance.engine import MaintenanceEngine, compute_threshold
from sftpmaint.maintenance.models import SweepReport
from sftpmaint.remote.client import RemoteError, RemoteFileClient
from sftpmaint.remote.sftp import SftpClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[MaintenanceProfile], RemoteFileClient]


@dataclass(slots=True)
class JobResult:
    """Outcome of one maintenance job.

    A job whose sweeps recorded per-node failures still succeeds; only
    configuration and session failures set error.

    Attributes:
        profile_name: Name of the profile that was run.
        started_at: When the job started (UTC).
        archive_report: Archival sweep report, None if it did not run.
        purge_report: Purge sweep report, None if it did not run.
        error: Session or configuration error that aborted the job.
        dry_run: Whether mutating operations were simulated.
    """

    profile_name: str
    started_at: datetime
    archive_report: SweepReport | None = None
    purge_report: SweepReport | None = None
    error: str | None = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """Check if the job ran to completion."""
        return self.error is None

    @property
    def reports(self) -> list[SweepReport]:
        """Reports of the sweeps that ran, in run order."""
        return [r for r in (self.archive_report, self.purge_report) if r is not None]


class MaintenanceJob:
    """Runs the archival and purge sweeps for one profile.

    Attributes:
        profile_name: Name of the profile.
        profile: Validated profile.
    """

    def __init__(
        self,
        profile_name: str,
        profile: MaintenanceProfile,
        *,
        client_factory: ClientFactory = SftpClient.from_profile,
        dry_run: bool = False,
        run_archive: bool = True,
        run_purge: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the job.

        Args:
            profile_name: Name of the profile.
            profile: Validated profile.
            client_factory: Builds an unconnected client for the profile.
            dry_run: If True, simulate moves, creations and deletes.
            run_archive: Run the archival sweep.
            run_purge: Run the purge sweep.
            clock: Returns the current time; thresholds are computed from it.
        """
        self.profile_name = profile_name
        self.profile = profile
        self._client_factory = client_factory
        self._dry_run = dry_run
        self._run_archive = run_archive
        self._run_purge = run_purge
        self._clock = clock or (lambda: datetime.now(UTC))

    def run(self) -> JobResult:
        """Connect, run the enabled sweeps and disconnect.

        Returns:
            JobResult describing the run.
        """
        now = self._clock()
        result = JobResult(profile_name=self.profile_name, started_at=now, dry_run=self._dry_run)
        profile = self.profile

        move_threshold = compute_threshold(profile.move_threshold_days, now)
        delete_threshold = compute_threshold(profile.delete_threshold_days, now)

        try:
            client = self._client_factory(profile)
        except ConfigError as e:
            logger.error("Cannot prepare SFTP session for %s: %s", self.profile_name, e)
            result.error = str(e)
            return result

        try:
            with client:
                engine = MaintenanceEngine(
                    client,
                    dry_run=self._dry_run,
                    age_filter_top_level=profile.age_filter_top_level,
                )
                if self._run_archive:
                    result.archive_report = engine.run_archival_sweep(
                        profile.parent_folder, profile.archive_folder, move_threshold
                    )
                if self._run_purge:
                    result.purge_report = engine.run_purge_sweep(
                        profile.archive_folder, delete_threshold
                    )
        except RemoteError as e:
            logger.error("SFTP job failed: %s", e)
            result.error = str(e)
        except Exception as e:
            logger.exception("SFTP job failed unexpectedly")
            result.error = str(e) or type(e).__name__
        else:
            logger.info("SFTP maintenance job completed successfully.")

        return result
