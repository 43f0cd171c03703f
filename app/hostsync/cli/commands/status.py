"""Status command implementation.

Shows, per subsystem, how far the host has drifted from the manifests.
"""

import json
from typing import Annotated

import typer

from hostsync.cli.display import create_status_table
from hostsync.cli.types import ExcludeOption, JsonOption, OnlyOption, build_plan_context
from hostsync.core.orchestrator import host_status
from hostsync.utils.formatting import console, print_success, print_warning

app = typer.Typer(
    help="Show drift between manifests and the host.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_status(
    only: OnlyOption = None,
    exclude: ExcludeOption = None,
    json_output: JsonOption = False,
    check: Annotated[
        bool,
        typer.Option("--check", help="Exit with code 2 if anything is pending."),
    ] = False,
) -> None:
    """Compare every subsystem with its manifest.

    Subsystems whose state cannot be read are reported as errors; the
    others are still shown.

    Examples:
        hostsync status                   # All subsystems
        hostsync status --only flatpak    # One subsystem
        hostsync status --json            # JSON output for scripting
    """
    report = host_status(build_plan_context(), only=only, exclude=exclude)

    if json_output:
        console.print_json(json.dumps(report.to_dict()))
    else:
        console.print(create_status_table(report))
        for failure in report.failures:
            print_warning(f"{failure.name}: {failure.reason}")
        if report.is_synced:
            print_success("Host is in sync with its manifests.")

    if report.failures:
        raise typer.Exit(code=1)
    if check and not report.is_synced:
        raise typer.Exit(code=2)
