"""Profile configuration models and file I/O.

This module defines the Pydantic models for the profiles.toml file and
provides functions for loading, validating and saving it. Each named
profile describes one SFTP server, its working and archive folders and
the age thresholds applied by the maintenance sweeps.
"""

import os
import tomllib
from pathlib import Path
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sftpmaint.core.paths import get_config_path

# Missing host key handling for the SSH transport
HostKeyPolicy = Literal["auto-add", "reject", "warning"]

DEFAULT_PORT = 22
DEFAULT_MOVE_THRESHOLD_DAYS = 7
DEFAULT_DELETE_THRESHOLD_DAYS = 30


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the profiles file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the profiles file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the profiles file content is invalid."""


class ProfileNotFoundError(ConfigError):
    """Raised when a named profile does not exist."""


class LoggingSettings(BaseModel):
    """Logging section of the profiles file.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        file: Log file path. If None, the XDG state location is used.
        max_size_mb: Size in megabytes at which the log file is rotated.
        backup_count: Number of rotated log files to keep.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR"],
        Field(description="Log level"),
    ] = "INFO"
    file: Annotated[str | None, Field(description="Log file path")] = None
    max_size_mb: Annotated[int, Field(ge=1, le=1024, description="Rotation size")] = 10
    backup_count: Annotated[int, Field(ge=0, le=100, description="Rotated files kept")] = 5

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept level names in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class MaintenanceProfile(BaseModel):
    """One named maintenance profile.

    The working root (parent_folder) and the archive root (archive_folder)
    must not overlap in a way that makes the archival sweep walk into its
    own output. An archive nested directly below the working root must be
    named "Archive"; this is not verified here.

    Attributes:
        host: SFTP server hostname.
        username: Login user.
        password: Login password.
        password_env: Environment variable holding the password instead.
        port: SSH port.
        parent_folder: Absolute remote path of the working root.
        archive_folder: Absolute remote path of the archive root.
        move_threshold_days: Age in days after which files are archived.
        delete_threshold_days: Age in days after which archived files are purged.
        age_filter_top_level: Apply the move threshold to files directly
            under the working root too. Off by default: top-level files are
            always moved.
        connect_timeout: Connect timeout in seconds for the SSH transport.
        host_key_policy: Handling of unknown server host keys.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: Annotated[str, Field(min_length=1, description="SFTP server hostname")]
    username: Annotated[str, Field(min_length=1, description="Login user")]
    password: Annotated[str | None, Field(description="Login password")] = None
    password_env: Annotated[
        str | None,
        Field(description="Environment variable holding the password"),
    ] = None
    port: Annotated[int, Field(ge=1, le=65535, description="SSH port")] = DEFAULT_PORT
    parent_folder: Annotated[str, Field(description="Working root")]
    archive_folder: Annotated[str, Field(description="Archive root")]
    move_threshold_days: Annotated[
        int,
        Field(ge=0, description="Days before files are archived"),
    ] = DEFAULT_MOVE_THRESHOLD_DAYS
    delete_threshold_days: Annotated[
        int,
        Field(ge=0, description="Days before archived files are purged"),
    ] = DEFAULT_DELETE_THRESHOLD_DAYS
    age_filter_top_level: Annotated[
        bool,
        Field(description="Age-filter files directly under the working root"),
    ] = False
    connect_timeout: Annotated[
        float,
        Field(gt=0, le=600, description="Connect timeout in seconds"),
    ] = 30.0
    host_key_policy: Annotated[
        HostKeyPolicy,
        Field(description="Unknown host key handling"),
    ] = "auto-add"

    @field_validator("parent_folder", "archive_folder")
    @classmethod
    def validate_remote_folder(cls, v: str, info: Any) -> str:
        """Require absolute remote paths and drop trailing slashes."""
        folder = v.strip()
        if not folder.startswith("/"):
            msg = f"{info.field_name} must be an absolute remote path, got {v!r}"
            raise ValueError(msg)
        return folder.rstrip("/") or "/"

    @model_validator(mode="after")
    def validate_folders(self) -> "MaintenanceProfile":
        """Validate that the working and archive roots differ."""
        if self.parent_folder == self.archive_folder:
            msg = "parent_folder and archive_folder must be different paths"
            raise ValueError(msg)
        if self.password is None and self.password_env is None:
            msg = "Either password or password_env must be set"
            raise ValueError(msg)
        return self

    def resolve_password(self) -> str:
        """Return the login password.

        Raises:
            ConfigError: If password_env names an unset variable.
        """
        if self.password is not None:
            return self.password
        value = os.environ.get(self.password_env or "")
        if value is None:
            msg = f"Environment variable {self.password_env} is not set"
            raise ConfigError(msg)
        return value


class MaintenanceConfig(BaseModel):
    """Top-level profiles file model.

    Attributes:
        logging: Logging settings.
        profiles: Maintenance profiles keyed by name.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    logging: Annotated[
        LoggingSettings,
        Field(default_factory=LoggingSettings, description="Logging settings"),
    ]
    profiles: Annotated[
        dict[str, MaintenanceProfile],
        Field(default_factory=dict, description="Profiles by name"),
    ]

    def get_profile(self, name: str) -> MaintenanceProfile:
        """Look up a profile by name.

        Raises:
            ProfileNotFoundError: If no profile has this name.
        """
        try:
            return self.profiles[name]
        except KeyError:
            msg = f"No configuration found for profile: {name}"
            raise ProfileNotFoundError(msg) from None

    @property
    def profile_names(self) -> list[str]:
        """Profile names in sorted order."""
        return sorted(self.profiles)


def load_config(path: Path | None = None) -> MaintenanceConfig:
    """Load and validate the profiles file.

    Args:
        path: Path to the profiles file. If None, uses the default path.

    Returns:
        Validated MaintenanceConfig object.

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Profiles file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read profiles file: {e}") from e

    try:
        return MaintenanceConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid profiles file content: {e}") from e


def save_config(config: MaintenanceConfig, path: Path | None = None) -> Path:
    """Save the profiles file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        config: The MaintenanceConfig object to save.
        path: Path to save to. If None, uses the default path.

    Returns:
        Path where the profiles file was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    from tempfile import NamedTemporaryFile

    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write profiles file: {e}") from e

    return config_path


def config_exists(path: Path | None = None) -> bool:
    """Check if the profiles file exists."""
    return (path or get_config_path()).exists()


def create_sample_config() -> MaintenanceConfig:
    """Build a sample configuration with a single example profile."""
    return MaintenanceConfig(
        profiles={
            "example": MaintenanceProfile(
                host="sftp.example.com",
                username="maintenance",
                password_env="SFTPMAINT_EXAMPLE_PASSWORD",
                parent_folder="/upload",
                archive_folder="/upload/Archive",
            ),
        },
    )


def require_config(config_path: Path | None = None) -> MaintenanceConfig | None:
    """Load the profiles file or report why it is unavailable.

    Configuration failures end a run without a non-zero exit code, so
    this helper prints and logs the problem and returns None instead of
    raising.

    Args:
        config_path: Optional custom profiles file path.

    Returns:
        The loaded configuration, or None if it cannot be loaded.
    """
    import logging

    from sftpmaint.utils.formatting import print_error, print_info

    logger = logging.getLogger(__name__)
    path = config_path or get_config_path()
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.error("Profiles file not found: %s", path)
        print_error(f"Profiles file not found: {path}")
        print_info("Run 'sftpmaint profiles init' to create a sample profiles file.")
    except ConfigError as e:
        logger.error("Error reading configuration: %s", e)
        print_error(f"Error reading configuration: {e}")
    return None
