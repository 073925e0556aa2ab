"""XDG-compliant path management for sftpmaint.

Only two files are looked up on the local machine: the profiles file
and the log file. Nothing else is persisted between runs.

XDG defaults:
- Profiles: ~/.config/sftpmaint/profiles.toml
- Log: ~/.local/state/sftpmaint/sftpmaint.log
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "sftpmaint"

# Environment variable overriding the profiles file location
CONFIG_ENV_VAR = "SFTPMAINT_CONFIG"


def _xdg_app_dir(env_var: str, fallback: str) -> Path:
    """Resolve an XDG base directory and append the application name.

    Args:
        env_var: XDG variable to consult, e.g. "XDG_STATE_HOME".
        fallback: Directory below $HOME used when the variable is unset or empty.
    """
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / fallback
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory holding the profiles file (XDG_CONFIG_HOME/sftpmaint)."""
    return _xdg_app_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Directory holding the default log file (XDG_STATE_HOME/sftpmaint)."""
    return _xdg_app_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the default profiles file path.

    SFTPMAINT_CONFIG takes precedence over the XDG location.

    Returns:
        Path to the profiles file.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_config_dir() / "profiles.toml"


def get_log_path() -> Path:
    """Log file used when the profiles file does not name one."""
    return get_state_dir() / f"{APP_NAME}.log"
