"""Maintenance run command.

Provides `sftpmaint run PROFILE`, the entry point for scheduled jobs.
Configuration and session problems are reported on the console and in
the log, and the command still exits with status 0.
"""

import logging
from typing import Annotated

import typer

from sftpmaint.cli.display import print_job_result
from sftpmaint.cli.types import configure_logging
from sftpmaint.core.config import ProfileNotFoundError, require_config
from sftpmaint.maintenance.job import MaintenanceJob
from sftpmaint.utils.formatting import print_error, print_info

logger = logging.getLogger(__name__)


def run(
    ctx: typer.Context,
    profile_name: Annotated[
        str | None,
        typer.Argument(
            metavar="PROFILE",
            help="Name of the profile to run.",
            show_default=False,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be moved and deleted."),
    ] = False,
    skip_archive: Annotated[
        bool,
        typer.Option("--skip-archive", help="Do not run the archival sweep."),
    ] = False,
    skip_purge: Annotated[
        bool,
        typer.Option("--skip-purge", help="Do not run the purge sweep."),
    ] = False,
) -> None:
    """Run the archival and purge sweeps for one profile."""
    obj = ctx.ensure_object(dict)

    if not profile_name:
        logger.error("No profile provided. Please pass a profile name as an argument.")
        print_error("Please provide a profile name as an argument.")
        return

    config = require_config(obj.get("config_path"))
    if config is None:
        return
    configure_logging(obj, config.logging)

    try:
        profile = config.get_profile(profile_name)
    except ProfileNotFoundError as e:
        logger.error("%s", e)
        print_error(str(e))
        return

    logger.info("Starting SFTP maintenance job for profile: %s", profile_name)
    if dry_run:
        print_info("Dry-run: remote files will not be changed.")

    job = MaintenanceJob(
        profile_name,
        profile,
        dry_run=dry_run,
        run_archive=not skip_archive,
        run_purge=not skip_purge,
    )
    result = job.run()

    print_job_result(result)
