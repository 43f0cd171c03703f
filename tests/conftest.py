"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
from hostsync.core.config import Settings, SystemSettings
from hostsync.core.plan import PlanContext
from hostsync.scanners.base import Scanner, ScanError
from hostsync.utils.shell import CommandResult


class StaticScanner(Scanner[Any]):
    """Scanner returning a fixed list of items."""

    command = "static"

    def __init__(self, items: Sequence[Any] = (), available: bool = True) -> None:
        self._items = list(items)
        self._available = available

    def is_available(self) -> bool:
        return self._available

    def scan(self) -> Iterator[Any]:
        yield from self._items


class FailingScanner(Scanner[Any]):
    """Scanner whose query always fails."""

    command = "failing"

    def is_available(self) -> bool:
        return True

    def scan(self) -> Iterator[Any]:
        raise ScanError("query failed")


@pytest.fixture
def static_scanner() -> type[StaticScanner]:
    """The StaticScanner class, for building scanners with fixed items."""
    return StaticScanner


@pytest.fixture
def failing_scanner() -> FailingScanner:
    """A scanner that always raises ScanError."""
    return FailingScanner()


@pytest.fixture
def plan_context(tmp_path: Path) -> PlanContext:
    """Planning context with empty system and user manifest directories."""
    system_dir = tmp_path / "system"
    user_dir = tmp_path / "user"
    system_dir.mkdir()
    user_dir.mkdir()
    return PlanContext(
        system_manifest_dir=system_dir, user_manifest_dir=user_dir, settings=Settings()
    )


@pytest.fixture
def dnf_context(plan_context: PlanContext) -> PlanContext:
    """Planning context using the dnf package backend."""
    return PlanContext(
        system_manifest_dir=plan_context.system_manifest_dir,
        user_manifest_dir=plan_context.user_manifest_dir,
        settings=Settings(system=SystemSettings(backend="dnf")),
    )


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a JSON document to a path, creating parent directories."""

    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def ok_result() -> CommandResult:
    """A successful command result."""
    return CommandResult(stdout="", stderr="", returncode=0)


@pytest.fixture
def failed_result() -> CommandResult:
    """A failed command result."""
    return CommandResult(stdout="", stderr="boom", returncode=1)


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config, state and system manifest locations into tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("HOSTSYNC_SYSTEM_MANIFEST_DIR", str(tmp_path / "system"))
    return tmp_path
