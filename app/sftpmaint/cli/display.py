"""Rich display functions for maintenance results.

Provides table builders and summary printers for sweep reports and
job results.
"""

from rich.markup import escape
from rich.table import Table

from sftpmaint.maintenance.job import JobResult
from sftpmaint.maintenance.models import NodeAction, NodeResult, Outcome, SweepKind, SweepReport
from sftpmaint.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

_SWEEP_TITLES = {
    SweepKind.ARCHIVE: "Archival Sweep",
    SweepKind.PURGE: "Purge Sweep",
}

_ACTION_LABELS = {
    NodeAction.LIST: "list",
    NodeAction.CREATE_DIR: "mkdir",
    NodeAction.MOVE: "move",
    NodeAction.DELETE: "delete",
}


def create_report_table(report: SweepReport, dry_run: bool = False) -> Table:
    """Create a Rich table listing the node results of a sweep.

    Args:
        report: Sweep report to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for result display.
    """
    title = _SWEEP_TITLES[report.kind]
    if dry_run:
        title = f"{title} (Dry Run)"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Action", width=7)
    table.add_column("Path", no_wrap=True)
    table.add_column("Details")

    for result in report.results:
        table.add_row(
            _format_status(result),
            _ACTION_LABELS[result.action],
            escape(result.path),
            f"[muted]{escape(_format_details(result))}[/muted]",
        )

    return table


def print_report_summary(report: SweepReport) -> None:
    """Print the counters of a sweep report."""
    if report.kind == SweepKind.ARCHIVE:
        parts = [
            f"[moved]{report.moved} moved[/moved]",
            f"{report.created} directories created",
            f"{report.skipped} left in place",
        ]
    else:
        parts = [
            f"[removed]{report.deleted} deleted[/removed]",
            f"{report.skipped} kept",
        ]
    if report.not_found:
        parts.append(f"[warning]{report.not_found} vanished[/warning]")
    if report.failed:
        parts.append(f"[error]{report.failed} failed[/error]")

    threshold = f"{report.threshold:%Y-%m-%d %H:%M}"
    summary = ", ".join(parts)
    root = escape(report.root)
    console.print(f"{_SWEEP_TITLES[report.kind]} of {root} (before {threshold}): {summary}")


def print_job_result(result: JobResult) -> None:
    """Print the tables and summaries for a finished job.

    Args:
        result: Result returned by MaintenanceJob.run().
    """
    for report in result.reports:
        if report.results:
            console.print(create_report_table(report, dry_run=result.dry_run))
        print_report_summary(report)

    if not result.success:
        print_error(f"SFTP job failed: {result.error}")
        return

    failures = sum(r.failed for r in result.reports)
    if result.dry_run:
        print_info("Dry-run: no remote files were changed.")
    elif failures:
        print_warning(
            f"Job completed with {failures} failed operation(s); see the log for details."
        )
    else:
        print_success(f"Maintenance job for '{result.profile_name}' completed successfully.")


def _format_status(result: NodeResult) -> str:
    if result.dry_run:
        return "[info]dry-run[/]"
    if result.outcome == Outcome.OK:
        return "[success]OK[/]"
    if result.outcome == Outcome.NOT_FOUND:
        return "[warning]GONE[/]"
    return "[error]FAIL[/]"


def _format_details(result: NodeResult) -> str:
    if result.error:
        return result.error
    if result.destination:
        size = f" ({format_size(result.size_bytes)})" if result.size_bytes is not None else ""
        return f"-> {result.destination}{size}"
    return ""
