"""Profile inspection commands.

Provides commands to list and show the configured maintenance profiles
and to create a sample profiles file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from sftpmaint.core.config import (
    ConfigError,
    MaintenanceConfig,
    MaintenanceProfile,
    ProfileNotFoundError,
    config_exists,
    create_sample_config,
    require_config,
    save_config,
)
from sftpmaint.core.paths import get_config_path
from sftpmaint.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Inspect and create maintenance profiles.",
    no_args_is_help=True,
)


@app.command("list")
def list_profiles(ctx: typer.Context) -> None:
    """List configured profiles."""
    config = _require_config(ctx)

    if not config.profiles:
        print_info("No profiles configured.")
        return

    table = Table(
        title="Maintenance Profiles",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Profile", style="bold")
    table.add_column("Server")
    table.add_column("Working Folder")
    table.add_column("Archive Folder")
    table.add_column("Move", justify="right")
    table.add_column("Delete", justify="right")

    for name in config.profile_names:
        profile = config.profiles[name]
        table.add_row(
            escape(name),
            escape(f"{profile.username}@{profile.host}:{profile.port}"),
            escape(profile.parent_folder),
            escape(profile.archive_folder),
            f"{profile.move_threshold_days}d",
            f"{profile.delete_threshold_days}d",
        )

    console.print(table)


@app.command("show")
def show_profile(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Profile name.")],
) -> None:
    """Show one profile with its effective settings."""
    config = _require_config(ctx)

    try:
        profile = config.get_profile(name)
    except ProfileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    table = Table(title=f"Profile: {escape(name)}", show_header=False, border_style="border")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for setting, value in _profile_rows(profile):
        table.add_row(setting, escape(value))

    console.print(table)


@app.command("init")
def init_profiles(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing profiles file."),
    ] = False,
) -> None:
    """Write a sample profiles file."""
    path: Path = ctx.obj.get("config_path") or get_config_path()

    if config_exists(path) and not force:
        print_error(f"Profiles file already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(create_sample_config(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Sample profiles file written to {saved}")
    print_info("Edit the 'example' profile, then run: sftpmaint run example --dry-run")


# === Private helper functions ===


def _require_config(ctx: typer.Context) -> MaintenanceConfig:
    """Load the profiles file or exit with status 1."""
    config = require_config(ctx.obj.get("config_path"))
    if config is None:
        raise typer.Exit(code=1)
    return config


def _profile_rows(profile: MaintenanceProfile) -> list[tuple[str, str]]:
    """Settings of a profile as display rows, password masked."""
    if profile.password is not None:
        password = "********"
    else:
        password = f"from ${profile.password_env}"
    return [
        ("host", profile.host),
        ("port", str(profile.port)),
        ("username", profile.username),
        ("password", password),
        ("parent_folder", profile.parent_folder),
        ("archive_folder", profile.archive_folder),
        ("move_threshold_days", str(profile.move_threshold_days)),
        ("delete_threshold_days", str(profile.delete_threshold_days)),
        ("age_filter_top_level", str(profile.age_filter_top_level).lower()),
        ("connect_timeout", f"{profile.connect_timeout:g}s"),
        ("host_key_policy", profile.host_key_policy),
    ]
