"""Baseline-relative configuration diff.

A baseline is a snapshot of every configuration value at one point in
time (typically right after a fresh install). Later diffs compare live
values against the snapshot so that only deliberate customizations show
up. Paths are ``namespace.key`` strings; noisy paths are filtered with
glob-style ignore patterns and fully-ignored namespaces.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hostsync.core.paths import get_baseline_path

logger = logging.getLogger(__name__)

# Glob patterns for keys that change on their own (window geometry,
# recently-used lists, timestamps)
DEFAULT_IGNORE_PATTERNS: list[str] = [
    "*.window-size",
    "*.window-position",
    "*.window-state",
    "*.window-maximized",
    "*.window-width",
    "*.window-height",
    "*.sidebar-width",
    "*.last-*",
    "*.recent-*",
    "*.recently-*",
    "org.gnome.shell.app-picker-layout",
    "org.gnome.shell.command-history",
    "org.gnome.desktop.notifications.application-children",
]

# Namespaces whose keys are entirely runtime state
DEFAULT_IGNORED_NAMESPACES: list[str] = [
    "org.gnome.evolution-data-server",
    "org.gnome.online-accounts",
    "org.gnome.software",
    "org.gnome.desktop.app-folders",
]


class BaselineError(Exception):
    """Raised when a baseline snapshot cannot be read or written."""


def split_path(path: str) -> tuple[str, str]:
    """Split a ``namespace.key`` path at its last dot.

    Args:
        path: Configuration path (e.g., 'org.gnome.desktop.interface.gtk-theme').

    Returns:
        Tuple of (namespace, key). A path without a dot has an empty namespace.
    """
    namespace, _, key = path.rpartition(".")
    return namespace, key


@dataclass(frozen=True, slots=True)
class IgnoreRules:
    """Filters deciding which configuration paths are left out of a diff.

    Attributes:
        patterns: Glob patterns matched against the full ``namespace.key`` path.
        namespaces: Namespaces excluded entirely, including nested ones.
    """

    patterns: tuple[str, ...] = ()
    namespaces: tuple[str, ...] = ()

    @classmethod
    def defaults(cls) -> IgnoreRules:
        """Create rules with the built-in noisy patterns and namespaces."""
        return cls(
            patterns=tuple(DEFAULT_IGNORE_PATTERNS),
            namespaces=tuple(DEFAULT_IGNORED_NAMESPACES),
        )

    @classmethod
    def from_lists(
        cls, patterns: Iterable[str] = (), namespaces: Iterable[str] = ()
    ) -> IgnoreRules:
        """Create rules from plain lists (as loaded from settings)."""
        return cls(patterns=tuple(patterns), namespaces=tuple(namespaces))

    def is_ignored(self, path: str) -> bool:
        """Check if a configuration path is ignored.

        Args:
            path: Full ``namespace.key`` path.

        Returns:
            True if the path's namespace is ignored or any pattern matches.
        """
        namespace, _key = split_path(path)
        for ignored in self.namespaces:
            if namespace == ignored or namespace.startswith(ignored + "."):
                return True

        return any(fnmatch.fnmatchcase(path, pattern) for pattern in self.patterns)


@dataclass(frozen=True, slots=True)
class ModifiedValue:
    """A path whose live value differs from the baseline."""

    path: str
    baseline: str
    current: str

    def __str__(self) -> str:
        return f"{self.path}: {self.baseline} → {self.current}"


@dataclass(frozen=True, slots=True)
class AddedValue:
    """A path present live but absent from the baseline."""

    path: str
    value: str

    def __str__(self) -> str:
        return f"{self.path}: {self.value}"


@dataclass(frozen=True, slots=True)
class RemovedValue:
    """A path present in the baseline but no longer present live."""

    path: str
    value: str

    def __str__(self) -> str:
        return f"{self.path}: {self.value}"


@dataclass(frozen=True, slots=True)
class BaselineDiff:
    """Result of comparing live values against a baseline snapshot.

    Attributes:
        modified: Paths whose value changed, sorted by path.
        added: Paths only present live, sorted by path.
        removed: Paths only present in the baseline, sorted by path.
        ignored_count: Number of distinct differing paths filtered out by
            ignore rules.
    """

    modified: tuple[ModifiedValue, ...] = field(default=())
    added: tuple[AddedValue, ...] = field(default=())
    removed: tuple[RemovedValue, ...] = field(default=())
    ignored_count: int = 0

    @property
    def is_empty(self) -> bool:
        """Check if no (non-ignored) differences were found."""
        return not (self.modified or self.added or self.removed)

    @property
    def change_count(self) -> int:
        """Total number of reported differences."""
        return len(self.modified) + len(self.added) + len(self.removed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "modified": [
                {"path": m.path, "baseline": m.baseline, "current": m.current}
                for m in self.modified
            ],
            "added": [{"path": a.path, "value": a.value} for a in self.added],
            "removed": [{"path": r.path, "value": r.value} for r in self.removed],
            "ignored": self.ignored_count,
        }


def compute_baseline_diff(
    baseline: Mapping[str, str],
    live: Mapping[str, str],
    rules: IgnoreRules | None = None,
) -> BaselineDiff:
    """Compare live configuration values against a baseline.

    Only paths that actually differ are subject to ignore rules, so the
    ignored count reports suppressed differences, not every ignored key.

    Args:
        baseline: Snapshot mapping of ``namespace.key`` to value.
        live: Current mapping of ``namespace.key`` to value.
        rules: Ignore rules. None means nothing is ignored.

    Returns:
        BaselineDiff with modified, added and removed paths.
    """
    rules = rules or IgnoreRules()

    modified: list[ModifiedValue] = []
    added: list[AddedValue] = []
    removed: list[RemovedValue] = []
    ignored = 0

    for path in sorted(live.keys() | baseline.keys()):
        in_live = path in live
        in_baseline = path in baseline
        if in_live and in_baseline and live[path] == baseline[path]:
            continue

        if rules.is_ignored(path):
            ignored += 1
            continue

        if in_live and in_baseline:
            modified.append(ModifiedValue(path, baseline[path], live[path]))
        elif in_live:
            added.append(AddedValue(path, live[path]))
        else:
            removed.append(RemovedValue(path, baseline[path]))

    logger.debug(
        "Baseline diff: %d modified, %d added, %d removed, %d ignored",
        len(modified),
        len(added),
        len(removed),
        ignored,
    )
    return BaselineDiff(
        modified=tuple(modified),
        added=tuple(added),
        removed=tuple(removed),
        ignored_count=ignored,
    )


class BaselineSnapshot(BaseModel):
    """Persisted snapshot of configuration values.

    Attributes:
        created: When the snapshot was taken.
        values: Mapping of ``namespace.key`` to serialized value.
    """

    model_config = ConfigDict(extra="forbid")

    created: Annotated[datetime, Field(description="Timestamp when the snapshot was taken")]
    values: Annotated[
        dict[str, str],
        Field(default_factory=dict, description="Configuration values by path"),
    ]

    @classmethod
    def take(cls, values: Mapping[str, str]) -> BaselineSnapshot:
        """Create a snapshot of the given values stamped with the current time."""
        return cls(created=datetime.now(UTC), values=dict(values))


def save_snapshot(snapshot: BaselineSnapshot, path: Path | None = None) -> Path:
    """Save a baseline snapshot atomically.

    Args:
        snapshot: Snapshot to persist.
        path: Destination. Defaults to the state directory baseline path.

    Returns:
        Path where the snapshot was saved.

    Raises:
        BaselineError: If the file cannot be written.
    """
    target = path or get_baseline_path()
    content = json.dumps(snapshot.model_dump(mode="json"), indent=2, sort_keys=True) + "\n"

    tmp_path: Path | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w", encoding="utf-8", dir=target.parent, delete=False, suffix=".tmp"
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise BaselineError(f"Failed to write baseline {target}: {e}") from e

    return target


def load_snapshot(path: Path | None = None) -> BaselineSnapshot:
    """Load a baseline snapshot.

    Args:
        path: Snapshot file. Defaults to the state directory baseline path.

    Returns:
        The validated snapshot.

    Raises:
        BaselineError: If the snapshot is missing or invalid.
    """
    source = path or get_baseline_path()
    if not source.exists():
        raise BaselineError(f"No baseline found at {source}")

    try:
        return BaselineSnapshot.model_validate_json(source.read_text(encoding="utf-8"))
    except OSError as e:
        raise BaselineError(f"Failed to read baseline {source}: {e}") from e
    except ValidationError as e:
        raise BaselineError(f"Invalid baseline {source}: {e}") from e
