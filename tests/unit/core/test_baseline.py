"""Unit tests for baseline-relative configuration diffs."""

from pathlib import Path

import pytest
from hostsync.core.baseline import (
    AddedValue,
    BaselineError,
    BaselineSnapshot,
    IgnoreRules,
    ModifiedValue,
    RemovedValue,
    compute_baseline_diff,
    load_snapshot,
    save_snapshot,
    split_path,
)


class TestComputeBaselineDiff:
    """Tests for compute_baseline_diff."""

    def test_reference_scenario(self) -> None:
        """Changed value is modified and new key is added."""
        diff = compute_baseline_diff(
            baseline={"theme.key": "Adwaita"},
            live={"theme.key": "Dark", "dock.position": "BOTTOM"},
        )

        assert diff.modified == (ModifiedValue("theme.key", "Adwaita", "Dark"),)
        assert diff.added == (AddedValue("dock.position", "BOTTOM"),)
        assert diff.removed == ()
        assert diff.ignored_count == 0

    def test_removed_value(self) -> None:
        """A baseline key missing live is removed."""
        diff = compute_baseline_diff({"a.b": "1"}, {})

        assert diff.removed == (RemovedValue("a.b", "1"),)

    def test_ignore_pattern_excludes_from_all_categories(self) -> None:
        """Ignored paths are only counted."""
        rules = IgnoreRules.from_lists(patterns=["*.window-size"])
        diff = compute_baseline_diff(
            baseline={"app.window-size": "(1, 2)", "app.old.window-size": "x"},
            live={"app.window-size": "(3, 4)", "app.new.window-size": "y"},
            rules=rules,
        )

        assert diff.is_empty
        assert diff.ignored_count == 3

    def test_ignored_namespace_includes_children(self) -> None:
        """A namespace rule covers nested namespaces but not siblings."""
        rules = IgnoreRules.from_lists(namespaces=["org.gnome.software"])
        diff = compute_baseline_diff(
            baseline={},
            live={
                "org.gnome.software.check-timestamp": "1",
                "org.gnome.software.sub.key": "2",
                "org.gnome.softwareish.key": "3",
            },
            rules=rules,
        )

        assert [a.path for a in diff.added] == ["org.gnome.softwareish.key"]
        assert diff.ignored_count == 2

    def test_unchanged_values_not_reported(self) -> None:
        """Equal values are neither changes nor ignored."""
        diff = compute_baseline_diff({"a.b": "1"}, {"a.b": "1"}, IgnoreRules.defaults())

        assert diff.is_empty
        assert diff.ignored_count == 0

    def test_output_sorted_by_path(self) -> None:
        """Each category is sorted by path."""
        diff = compute_baseline_diff({}, {"z.k": "1", "a.k": "2", "m.k": "3"})

        assert [a.path for a in diff.added] == ["a.k", "m.k", "z.k"]
        assert diff.change_count == 3

    def test_modified_str(self) -> None:
        """Modified values render with an arrow."""
        assert str(ModifiedValue("a.b", "1", "2")) == "a.b: 1 → 2"


class TestIgnoreRules:
    """Tests for IgnoreRules."""

    def test_defaults_ignore_window_geometry(self) -> None:
        """Built-in rules ignore window sizes."""
        assert IgnoreRules.defaults().is_ignored("org.gnome.Nautilus.window-state.window-size")

    def test_empty_rules_ignore_nothing(self) -> None:
        """No rules means nothing is ignored."""
        assert not IgnoreRules().is_ignored("org.gnome.software.anything")


class TestSplitPath:
    """Tests for split_path."""

    def test_splits_at_last_dot(self) -> None:
        """The key is the segment after the last dot."""
        assert split_path("org.gnome.desktop.interface.gtk-theme") == (
            "org.gnome.desktop.interface",
            "gtk-theme",
        )

    def test_no_dot(self) -> None:
        """A bare key has an empty namespace."""
        assert split_path("key") == ("", "key")


class TestSnapshotPersistence:
    """Tests for saving and loading snapshots."""

    def test_save_and_load(self, tmp_path: Path) -> None:
        """A saved snapshot loads back with the same values."""
        path = tmp_path / "state" / "baseline.json"
        save_snapshot(BaselineSnapshot.take({"a.b": "'x'"}), path)

        assert load_snapshot(path).values == {"a.b": "'x'"}

    def test_missing_snapshot(self, tmp_path: Path) -> None:
        """Loading a missing snapshot raises BaselineError."""
        with pytest.raises(BaselineError, match="No baseline"):
            load_snapshot(tmp_path / "missing.json")

    def test_invalid_snapshot(self, tmp_path: Path) -> None:
        """Invalid content raises BaselineError."""
        path = tmp_path / "baseline.json"
        path.write_text('{"values": 3}', encoding="utf-8")

        with pytest.raises(BaselineError, match="Invalid baseline"):
            load_snapshot(path)
