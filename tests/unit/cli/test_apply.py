"""Unit tests for the apply command."""

import json
from collections.abc import Sequence
from unittest.mock import MagicMock, patch

from hostsync.cli.main import app
from hostsync.core.composite import CompositePlan
from hostsync.core.plan import (
    ExecutionFailure,
    Operation,
    OperationPlan,
    PlanWarning,
    Verb,
)
from typer.testing import CliRunner

runner = CliRunner()


class RecordingPlan(OperationPlan[str]):
    """Plan that records applied items and fails on request."""

    title = "Flatpak sync"

    def __init__(
        self,
        items: Sequence[str],
        failing: Sequence[str] = (),
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        steps = [(Operation(Verb.INSTALL, f"flatpak:{item}"), item) for item in items]
        super().__init__(steps, warnings)
        self.failing = set(failing)
        self.applied: list[str] = []

    def apply(self, operation: Operation, item: str) -> str | None:
        if item in self.failing:
            raise ExecutionFailure(f"install {item} failed: boom")
        self.applied.append(item)
        return f"install {item} completed"


def composite_of(*plans: RecordingPlan) -> CompositePlan:
    return CompositePlan("Apply", plans)


class TestApplyCommand:
    """Tests for the apply command."""

    def test_nothing_to_apply(self, isolated_dirs) -> None:
        """An empty plan reports the host as matching."""
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite_of()):
            result = runner.invoke(app, ["apply"])

        assert result.exit_code == 0
        assert "Nothing to apply" in result.output

    def test_dry_run_does_not_execute(self, isolated_dirs) -> None:
        """Dry run shows the plan and leaves the host alone."""
        plan = RecordingPlan(["org.gnome.Boxes"])
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite_of(plan)):
            result = runner.invoke(app, ["apply", "--dry-run"])

        assert result.exit_code == 0
        assert "org.gnome.Boxes" in result.output
        assert "Dry run" in result.output
        assert plan.applied == []

    def test_dry_run_json(self, isolated_dirs) -> None:
        """JSON dry run prints the plan summary."""
        plan = RecordingPlan(["org.gnome.Boxes"])
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite_of(plan)):
            result = runner.invoke(app, ["apply", "--dry-run", "--json"])

        data = json.loads(result.output)
        assert data["operations"][0]["target"] == "flatpak:org.gnome.Boxes"
        assert plan.applied == []

    def test_declined_confirmation(self, isolated_dirs) -> None:
        """Answering no aborts without executing."""
        plan = RecordingPlan(["org.gnome.Boxes"])
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite_of(plan)):
            result = runner.invoke(app, ["apply"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert plan.applied == []

    def test_yes_executes(self, isolated_dirs) -> None:
        """--yes executes without asking."""
        plan = RecordingPlan(["org.gnome.Boxes", "org.gnome.Maps"])
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite_of(plan)):
            result = runner.invoke(app, ["apply", "--yes"])

        assert result.exit_code == 0
        assert plan.applied == ["org.gnome.Boxes", "org.gnome.Maps"]
        assert "All 2 operation(s) completed successfully." in result.output

    def test_failure_exit_code(self, isolated_dirs) -> None:
        """A failed operation makes the command exit 1 after running the rest."""
        plan = RecordingPlan(["a.A", "b.B"], failing=["a.A"])
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite_of(plan)):
            result = runner.invoke(app, ["apply", "--yes"])

        assert result.exit_code == 1
        assert plan.applied == ["b.B"]

    def test_filters_passed_through(self, isolated_dirs) -> None:
        """--only and --exclude reach the planner."""
        mock_plan = MagicMock(return_value=composite_of())
        with patch("hostsync.cli.commands.apply.plan_apply", mock_plan):
            result = runner.invoke(app, ["apply", "--only", "flatpak", "-o", "shim", "-x", "shim"])

        assert result.exit_code == 0
        kwargs = mock_plan.call_args.kwargs
        assert [s.value for s in kwargs["only"]] == ["flatpak", "shim"]
        assert [s.value for s in kwargs["exclude"]] == ["shim"]

    def test_warnings_shown(self, isolated_dirs) -> None:
        """Planning warnings are printed."""
        composite = composite_of()
        composite.add_warning(PlanWarning("homebrew", "skipped: brew is not available"))
        with patch("hostsync.cli.commands.apply.plan_apply", return_value=composite):
            result = runner.invoke(app, ["apply"])

        assert "brew is not available" in result.output

    def test_invalid_subsystem(self, isolated_dirs) -> None:
        """Unknown subsystems are rejected by the option parser."""
        result = runner.invoke(app, ["apply", "--only", "snap"])

        assert result.exit_code == 2
