"""Baseline commands.

Snapshot every configuration key once, then list what changed since.
"""

import json
from typing import Annotated

import typer

from hostsync.cli.display import create_baseline_table
from hostsync.cli.types import JsonOption, build_plan_context
from hostsync.components import GSettingComponent
from hostsync.core.baseline import BaselineError, IgnoreRules
from hostsync.core.paths import get_baseline_path
from hostsync.scanners.base import ScanError
from hostsync.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Track configuration changes relative to a snapshot.",
    no_args_is_help=True,
)


@app.command("capture")
def capture_baseline(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Replace an existing baseline."),
    ] = False,
) -> None:
    """Snapshot every configuration key as the new baseline."""
    path = get_baseline_path()
    if path.exists() and not force:
        print_error(f"Baseline already exists: {path}")
        print_info("Use --force to replace it.")
        raise typer.Exit(code=1)

    component = GSettingComponent(build_plan_context())
    try:
        saved, count = component.capture_baseline(path)
    except (ScanError, BaselineError) as e:
        print_error(f"Failed to capture baseline: {e}")
        raise typer.Exit(code=1) from e

    print_success(f"Captured {count} keys to {saved}")


@app.command("diff")
def diff_baseline(
    json_output: JsonOption = False,
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Ignore no keys, not even noisy ones."),
    ] = False,
) -> None:
    """Show keys that changed since the baseline was captured.

    Keys matching the ignore rules in config.toml are left out and only
    counted.
    """
    ctx = build_plan_context()
    rules = IgnoreRules() if show_all else ctx.settings.baseline.to_rules()

    component = GSettingComponent(ctx)
    try:
        diff = component.diff_baseline(rules, get_baseline_path())
    except (ScanError, BaselineError) as e:
        print_error(f"Failed to diff against baseline: {e}")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(diff.to_dict()))
        return

    if diff.is_empty:
        print_success("No changes since the baseline.")
    else:
        console.print(create_baseline_table(diff))
        console.print(f"\n{diff.change_count} change(s)")
    if diff.ignored_count:
        console.print(f"[muted]{diff.ignored_count} ignored change(s) not shown[/muted]")
