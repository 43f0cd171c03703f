"""Unit tests for composite planning across subsystems."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from hostsync.components import (
    Component,
    FlatpakComponent,
    GSettingComponent,
    HomebrewComponent,
    ShimComponent,
    Subsystem,
)
from hostsync.core.orchestrator import host_status, plan_apply, plan_capture
from hostsync.core.plan import ExecuteContext, PlanContext, Verb
from hostsync.models.flatpak import FlatpakApp
from hostsync.models.gsetting import GSetting, GSettingFilter
from hostsync.models.homebrew import BrewFormula
from hostsync.utils.shell import CommandResult


@pytest.fixture
def components(plan_context: PlanContext, static_scanner, tmp_path: Path) -> dict[Subsystem, Any]:
    """Components backed by static scanners and mock operators."""
    ok = CommandResult(stdout="", stderr="", returncode=0)
    flatpak_operator = MagicMock()
    flatpak_operator.install.return_value = ok
    gsetting_scanner = MagicMock()
    gsetting_scanner.list_schemas.return_value = ["org.gnome.desktop.interface"]
    gsetting_scanner.scan_schemas.return_value = [
        GSetting(schema="org.gnome.desktop.interface", key="gtk-theme", value="'Adwaita'")
    ]
    return {
        Subsystem.FLATPAK: FlatpakComponent(
            plan_context,
            scanner=static_scanner([FlatpakApp(id="org.gnome.Boxes")]),
            operator=flatpak_operator,
        ),
        Subsystem.HOMEBREW: HomebrewComponent(
            plan_context, scanner=static_scanner([BrewFormula(name="jq")]), operator=MagicMock()
        ),
        Subsystem.GSETTING: GSettingComponent(
            plan_context, scanner=gsetting_scanner, operator=MagicMock()
        ),
        Subsystem.SHIM: ShimComponent(
            plan_context, scanner=static_scanner([]), operator=MagicMock()
        ),
    }


def factory_for(components: dict[Subsystem, Any]):
    """Build a component factory serving prepared components."""

    def factory(subsystem: Subsystem, ctx: PlanContext) -> Component[Any, Any]:
        return components[subsystem]

    return factory


ONLY = [Subsystem.SHIM, Subsystem.GSETTING, Subsystem.FLATPAK, Subsystem.HOMEBREW]


class TestPlanApply:
    """Tests for plan_apply."""

    def test_empty_when_in_sync(self, plan_context: PlanContext, components) -> None:
        """Empty manifests give an empty apply plan."""
        composite = plan_apply(plan_context, only=ONLY, factory=factory_for(components))

        assert composite.is_empty()
        assert len(composite) == 0

    def test_plans_missing_items(self, plan_context: PlanContext, components, write_json) -> None:
        """Declared but missing items become operations, executed in order."""
        write_json(
            plan_context.user_manifest_path("flatpak-apps.json"),
            {"apps": [{"id": "org.gnome.Boxes"}, {"id": "org.gnome.Maps"}]},
        )

        composite = plan_apply(plan_context, only=ONLY, factory=factory_for(components))
        summary = composite.describe()

        assert [op.target for op in summary.operations] == ["flatpak:org.gnome.Maps"]
        assert summary.operations[0].verb == Verb.INSTALL

        report = composite.execute(ExecuteContext())
        assert report.all_succeeded
        components[Subsystem.FLATPAK].operator.install.assert_called_once_with(
            FlatpakApp(id="org.gnome.Maps")
        )

    def test_scan_failure_becomes_warning(
        self, plan_context: PlanContext, components, failing_scanner
    ) -> None:
        """A failing subsystem is skipped with a warning."""
        components[Subsystem.HOMEBREW] = HomebrewComponent(
            plan_context, scanner=failing_scanner, operator=MagicMock()
        )

        composite = plan_apply(plan_context, only=ONLY, factory=factory_for(components))

        warnings = composite.describe().warnings
        assert [w.target for w in warnings] == ["homebrew"]
        assert "skipped: query failed" in warnings[0].message

    def test_invalid_manifest_becomes_warning(
        self, plan_context: PlanContext, components, write_json
    ) -> None:
        """An invalid manifest is skipped with a warning."""
        write_json(plan_context.user_manifest_path("homebrew.json"), {"formulas": []})

        composite = plan_apply(plan_context, only=ONLY, factory=factory_for(components))

        assert [w.target for w in composite.describe().warnings] == ["homebrew"]

    def test_exclude(self, plan_context: PlanContext, components, write_json) -> None:
        """Excluded subsystems are not planned."""
        write_json(
            plan_context.user_manifest_path("flatpak-apps.json"),
            {"apps": [{"id": "org.gnome.Maps"}]},
        )

        composite = plan_apply(
            plan_context,
            only=ONLY,
            exclude=[Subsystem.FLATPAK],
            factory=factory_for(components),
        )

        assert composite.is_empty()


class TestPlanCapture:
    """Tests for plan_capture."""

    def test_captures_untracked(self, plan_context: PlanContext, components) -> None:
        """Untracked items of capturable subsystems are planned."""
        composite = plan_capture(plan_context, only=ONLY, factory=factory_for(components))

        targets = [op.target for op in composite.describe().operations]
        assert targets == ["flatpak:org.gnome.Boxes", "homebrew:jq"]

    def test_settings_need_filter(self, plan_context: PlanContext, components) -> None:
        """Without a schema filter settings are skipped with a warning."""
        composite = plan_capture(
            plan_context, only=[Subsystem.GSETTING], factory=factory_for(components)
        )

        assert composite.is_empty()
        assert [w.target for w in composite.describe().warnings] == ["gsetting"]

    def test_settings_silently_skipped_without_only(
        self, plan_context: PlanContext, components
    ) -> None:
        """Capturing everything leaves settings out without a warning."""
        composite = plan_capture(
            plan_context,
            exclude=[Subsystem.EXTENSION, Subsystem.SYSTEM],
            factory=factory_for(components),
        )

        assert composite.describe().warnings == []

    def test_settings_with_filter(self, plan_context: PlanContext, components) -> None:
        """A schema filter enables settings capture."""
        composite = plan_capture(
            plan_context,
            only=[Subsystem.GSETTING],
            gsetting_filter=GSettingFilter(schemas=("org.gnome.desktop",)),
            factory=factory_for(components),
        )

        targets = [op.target for op in composite.describe().operations]
        assert targets == ["gsetting:org.gnome.desktop.interface.gtk-theme"]

    def test_capture_writes_user_layer(self, plan_context: PlanContext, components) -> None:
        """Executing the capture writes the user manifests."""
        composite = plan_capture(
            plan_context, only=[Subsystem.HOMEBREW], factory=factory_for(components)
        )

        report = composite.execute(ExecuteContext())

        assert report.all_succeeded
        assert "jq" in plan_context.user_manifest_path("homebrew.json").read_text()


def test_host_status(plan_context: PlanContext, components) -> None:
    """host_status reports every selected subsystem."""
    report = host_status(
        plan_context, only=[Subsystem.FLATPAK, Subsystem.HOMEBREW], factory=factory_for(components)
    )

    assert [s.subsystem for s in report.statuses] == ["flatpak", "homebrew"]
    assert report.is_synced
