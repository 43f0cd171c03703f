"""Capture command implementation.

Records items found on the host but missing from the manifests into the
user manifest layer.
"""

import json
from typing import Annotated

import typer

from hostsync.cli.display import (
    create_plan_table,
    print_execution_summary,
    print_plan_warnings,
    print_progress,
)
from hostsync.cli.types import ExcludeOption, JsonOption, OnlyOption, build_plan_context
from hostsync.core.orchestrator import plan_capture
from hostsync.core.plan import ExecuteContext
from hostsync.models.gsetting import GSettingFilter
from hostsync.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Record untracked host state into the user manifests.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def capture_untracked(
    only: OnlyOption = None,
    exclude: ExcludeOption = None,
    schemas: Annotated[
        list[str] | None,
        typer.Option(
            "--schema",
            "-s",
            help="Capture settings of this schema or schema prefix (repeatable).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show what would be captured."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Add untracked items to the user manifests.

    Settings are captured only for the schemas given with --schema.
    Shims are generated from the manifest and never captured.

    Examples:
        hostsync capture --dry-run
        hostsync capture --only gsetting --schema org.gnome.desktop.interface
    """
    gsetting_filter = None
    if schemas:
        try:
            gsetting_filter = GSettingFilter(schemas=tuple(schemas)).require()
        except ValueError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    plan = plan_capture(
        build_plan_context(), only=only, exclude=exclude, gsetting_filter=gsetting_filter
    )
    summary = plan.describe()

    if json_output and (dry_run or plan.is_empty()):
        console.print_json(json.dumps(summary.to_dict()))
        return

    if not json_output:
        print_plan_warnings(summary.warnings)

    if plan.is_empty():
        print_success("Nothing to capture. Every item on the host is tracked.")
        return

    if not json_output:
        title = "Items To Capture (Dry Run)" if dry_run else "Items To Capture"
        console.print(create_plan_table(summary, title=title))
        console.print(f"\n[muted]{summary.summary}[/muted]")

    if dry_run:
        print_info("Dry run: manifests not modified.")
        return

    if not yes and not typer.confirm(f"\nRecord {summary.action_count} item(s)?"):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    callback = None if json_output else print_progress
    report = plan.execute(ExecuteContext(progress_callback=callback))

    if json_output:
        console.print_json(json.dumps(report.to_dict()))
    else:
        print_execution_summary(report)

    if not report.all_succeeded:
        raise typer.Exit(code=1)
