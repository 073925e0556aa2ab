"""Maintenance policy engine and job driver.

This module provides the archival and purge sweeps over a remote tree,
their result models, and the job that runs them for one profile.
"""

from sftpmaint.maintenance.engine import (
    ARCHIVE_FOLDER_NAME,
    MaintenanceEngine,
    archive_path_for,
    compute_threshold,
)
from sftpmaint.maintenance.job import JobResult, MaintenanceJob
from sftpmaint.maintenance.models import (
    Listing,
    NodeAction,
    NodeResult,
    Outcome,
    SweepKind,
    SweepReport,
)

__all__ = [
    "ARCHIVE_FOLDER_NAME",
    "JobResult",
    "Listing",
    "MaintenanceEngine",
    "MaintenanceJob",
    "NodeAction",
    "NodeResult",
    "Outcome",
    "SweepKind",
    "SweepReport",
    "archive_path_for",
    "compute_threshold",
]
