"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from sftpmaint import __version__
from sftpmaint.cli.commands import profiles, run
from sftpmaint.cli.types import LogLevel, configure_logging

# Create main Typer app
app = typer.Typer(
    name="sftpmaint",
    help="Scheduled archival and purge maintenance for SFTP folders.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sftpmaint version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Profiles file (default: ~/.config/sftpmaint/profiles.toml).",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Log file path (rotated by size).",
        ),
    ] = None,
    log_level: Annotated[
        LogLevel | None,
        typer.Option(
            "--log-level",
            help="Logging level.",
            case_sensitive=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log warnings and errors.",
        ),
    ] = False,
) -> None:
    """sftpmaint - Archive aged files and purge old archives on SFTP servers.

    Each run applies one named profile: files older than the move
    threshold are moved into the mirrored archive folder, and archived
    files older than the delete threshold are removed.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_file"] = log_file
    ctx.obj["log_level"] = log_level
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    configure_logging(ctx.obj)


# Register commands
app.command(name="run")(run.run)
app.add_typer(profiles.app, name="profiles")


if __name__ == "__main__":
    app()
