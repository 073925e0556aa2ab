"""CLI commands for sftpmaint.

This package contains all subcommand implementations.
"""

from sftpmaint.cli.commands import profiles, run

__all__ = ["profiles", "run"]
