"""hostsync settings.

Settings are stored in ~/.config/hostsync/config.toml:

    [baseline]
    ignore_patterns = ["*.window-size"]
    ignored_namespaces = ["org.gnome.software"]
    use_defaults = true

    [system]
    backend = "rpm-ostree"

A missing file yields the defaults.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hostsync.core.baseline import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_IGNORED_NAMESPACES,
    IgnoreRules,
)
from hostsync.core.paths import get_settings_path

# Package backend used for the system subsystem
SystemBackend = Literal["rpm-ostree", "dnf"]


class BaselineSettings(BaseModel):
    """Ignore rules for baseline diffs.

    Attributes:
        ignore_patterns: Extra glob patterns matched against ``namespace.key``.
        ignored_namespaces: Extra namespaces excluded entirely.
        use_defaults: Whether the built-in noisy patterns also apply.
    """

    model_config = ConfigDict(extra="forbid")

    ignore_patterns: Annotated[
        list[str],
        Field(default_factory=list, description="Glob patterns to ignore"),
    ]
    ignored_namespaces: Annotated[
        list[str],
        Field(default_factory=list, description="Namespaces to ignore entirely"),
    ]
    use_defaults: Annotated[
        bool,
        Field(description="Apply the built-in ignore patterns and namespaces"),
    ] = True

    def to_rules(self) -> IgnoreRules:
        """Build the effective ignore rules."""
        patterns = list(self.ignore_patterns)
        namespaces = list(self.ignored_namespaces)
        if self.use_defaults:
            patterns = DEFAULT_IGNORE_PATTERNS + patterns
            namespaces = DEFAULT_IGNORED_NAMESPACES + namespaces
        return IgnoreRules.from_lists(patterns, namespaces)


class SystemSettings(BaseModel):
    """Settings for the system package subsystem.

    Attributes:
        backend: Package tool used to apply changes.
    """

    model_config = ConfigDict(extra="forbid")

    backend: Annotated[
        SystemBackend,
        Field(description="Package backend ('rpm-ostree' or 'dnf')"),
    ] = "rpm-ostree"


class Settings(BaseModel):
    """Top-level hostsync settings."""

    model_config = ConfigDict(extra="forbid")

    baseline: Annotated[
        BaselineSettings,
        Field(default_factory=BaselineSettings, description="Baseline diff settings"),
    ]
    system: Annotated[
        SystemSettings,
        Field(default_factory=SystemSettings, description="System package settings"),
    ]


class ConfigError(Exception):
    """Base exception for settings errors."""


class ConfigParseError(ConfigError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings. Defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content is invalid.
    """
    config_path = path or get_settings_path()

    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"{config_path}: invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"{config_path}: failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{config_path}: invalid settings: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: Settings to save.
        path: Destination. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_settings_path()
    data = settings.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
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
        raise ConfigError(f"Failed to write settings: {e}") from e

    return config_path
