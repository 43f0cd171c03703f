"""XDG-compliant path management for hostsync.

Locations:
- User manifests and settings: ~/.config/hostsync/
- System manifests: /usr/share/hostsync/manifests/
- Baseline snapshots: ~/.local/state/hostsync/
"""

import os
from pathlib import Path

APP_NAME = "hostsync"

# Read-only manifest layer shipped with the host image
DEFAULT_SYSTEM_MANIFEST_DIR = Path("/usr/share/hostsync/manifests")

SYSTEM_MANIFEST_DIR_ENV = "HOSTSYNC_SYSTEM_MANIFEST_DIR"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    This is also where the user manifest layer lives.

    Returns:
        Path to ~/.config/hostsync/ (or XDG_CONFIG_HOME/hostsync/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    Returns:
        Path to ~/.local/state/hostsync/ (or XDG_STATE_HOME/hostsync/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_user_manifest_dir() -> Path:
    """Get the directory holding the user manifest layer."""
    return get_config_dir()


def get_system_manifest_dir() -> Path:
    """Get the directory holding the system manifest layer.

    Returns:
        Path from HOSTSYNC_SYSTEM_MANIFEST_DIR if set, otherwise
        /usr/share/hostsync/manifests.
    """
    override = os.environ.get(SYSTEM_MANIFEST_DIR_ENV)
    if override:
        return Path(override)
    return DEFAULT_SYSTEM_MANIFEST_DIR


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/hostsync/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_baseline_path() -> Path:
    """Get the baseline snapshot file path.

    Returns:
        Path to ~/.local/state/hostsync/gsettings-baseline.json.
    """
    return get_state_dir() / "gsettings-baseline.json"


def get_shim_dir() -> Path:
    """Get the directory where path shims are generated.

    Returns:
        Path to ~/.local/toolbox/shims.
    """
    return Path.home() / ".local" / "toolbox" / "shims"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")
