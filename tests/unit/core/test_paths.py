"""Unit tests for path helpers."""

from pathlib import Path

import pytest
from hostsync.core.paths import (
    DEFAULT_SYSTEM_MANIFEST_DIR,
    ensure_state_dir,
    get_baseline_path,
    get_config_dir,
    get_settings_path,
    get_state_dir,
    get_system_manifest_dir,
    get_user_manifest_dir,
)


class TestXdgPaths:
    """Tests for XDG-derived locations."""

    def test_config_dir_respects_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """XDG_CONFIG_HOME overrides the config location."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_config_dir() == tmp_path / "hostsync"
        assert get_user_manifest_dir() == tmp_path / "hostsync"
        assert get_settings_path() == tmp_path / "hostsync" / "config.toml"

    def test_config_dir_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without XDG_CONFIG_HOME the home directory is used."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert get_config_dir() == tmp_path / ".config" / "hostsync"

    def test_state_paths(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Baseline snapshots live in the state directory."""
        monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

        assert get_state_dir() == tmp_path / "hostsync"
        assert get_baseline_path() == tmp_path / "hostsync" / "gsettings-baseline.json"

    def test_ensure_state_dir_creates(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """ensure_state_dir creates the directory."""
        monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

        assert ensure_state_dir().is_dir()


class TestSystemManifestDir:
    """Tests for the system manifest location."""

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The image location is used by default."""
        monkeypatch.delenv("HOSTSYNC_SYSTEM_MANIFEST_DIR", raising=False)

        assert get_system_manifest_dir() == DEFAULT_SYSTEM_MANIFEST_DIR

    def test_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The environment variable overrides the location."""
        monkeypatch.setenv("HOSTSYNC_SYSTEM_MANIFEST_DIR", str(tmp_path))

        assert get_system_manifest_dir() == tmp_path
