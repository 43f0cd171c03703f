"""Apply command implementation.

Plans every selected subsystem, shows the combined plan, and executes it
after confirmation.
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
from hostsync.core.orchestrator import plan_apply
from hostsync.core.plan import ExecuteContext
from hostsync.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Bring the host in line with the manifests.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def apply_manifests(
    only: OnlyOption = None,
    exclude: ExcludeOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Show the plan without executing it."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Install, configure and regenerate whatever the manifests declare.

    Items present on the host but missing from the manifests are never
    removed; use 'hostsync capture' to record them instead.

    Examples:
        hostsync apply --dry-run          # Preview the plan
        hostsync apply --only shim -y     # Regenerate shims without asking
    """
    plan = plan_apply(build_plan_context(), only=only, exclude=exclude)
    summary = plan.describe()

    if json_output and dry_run:
        console.print_json(json.dumps(summary.to_dict()))
        return

    if not json_output:
        print_plan_warnings(summary.warnings)

    if plan.is_empty():
        if json_output:
            console.print_json(json.dumps(summary.to_dict()))
        else:
            print_success("Nothing to apply. Host matches the manifests.")
        return

    if not json_output:
        title = "Planned Operations (Dry Run)" if dry_run else "Planned Operations"
        console.print(create_plan_table(summary, title=title))
        console.print(f"\n[muted]{summary.summary}[/muted]")

    if dry_run:
        print_info("Dry run: no changes made.")
        return

    if not yes and not typer.confirm(f"\nProceed with {summary.action_count} operation(s)?"):
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
