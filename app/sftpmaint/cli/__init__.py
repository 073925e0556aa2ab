"""CLI package for sftpmaint.

This package contains the Typer application and all subcommands.
"""

from sftpmaint.cli.main import app

__all__ = ["app"]
