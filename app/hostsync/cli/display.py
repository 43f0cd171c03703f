"""Shared Rich display functions for plans, results and status.

Provides reusable table builders and summary printers used by the
status, apply, capture and baseline commands.
"""

from rich.table import Table

from hostsync.core.baseline import BaselineDiff
from hostsync.core.plan import (
    ExecutionReport,
    OperationProgress,
    PlanSummary,
    PlanWarning,
    Verb,
)
from hostsync.core.status import StatusReport
from hostsync.utils.formatting import console, create_table, print_success, print_warning

# Style for each verb in plan tables
_VERB_STYLES: dict[Verb, str] = {
    Verb.INSTALL: "added",
    Verb.CREATE: "added",
    Verb.ENABLE: "added",
    Verb.CONFIGURE: "added",
    Verb.CAPTURE: "info",
    Verb.SET: "changed",
    Verb.UPDATE: "changed",
    Verb.REMOVE: "removed",
    Verb.DELETE: "removed",
    Verb.DISABLE: "warning",
    Verb.SKIP: "muted",
}


def create_status_table(report: StatusReport) -> Table:
    """Create a table with one row per subsystem.

    Args:
        report: Status report to display.

    Returns:
        Rich Table with drift counts.
    """
    table = create_table("Host Status", "Subsystem", "Synced", "Pending", "Untracked", "State")
    for status in report.statuses:
        if status.is_synced:
            state = "[success]in sync[/success]"
        else:
            state = f"[warning]{status.pending} pending[/warning]"
        table.add_row(
            status.name,
            f"{status.synced}/{status.total}",
            f"[changed]{status.pending}[/changed]" if status.pending else "0",
            f"[untracked]{status.untracked}[/untracked]" if status.untracked else "0",
            state,
        )
    for failure in report.failures:
        table.add_row(failure.name, "-", "-", "-", f"[error]error[/error] {failure.reason}")
    return table


def create_plan_table(summary: PlanSummary, title: str = "Planned Operations") -> Table:
    """Create a table listing the operations of a plan.

    Skipped operations are shown dimmed so the reader can see what was
    considered but left alone.
    """
    table = create_table(title, "Action", "Target", "Details")
    for operation in summary.operations:
        style = _VERB_STYLES.get(operation.verb, "text")
        table.add_row(
            f"[{style}]{operation.verb.label}[/{style}]",
            f"[{style}]{operation.target}[/{style}]",
            f"[muted]{operation.details or ''}[/muted]",
        )
    return table


def print_plan_warnings(warnings: list[PlanWarning]) -> None:
    """Print planning warnings."""
    for warning in warnings:
        print_warning(str(warning))


def print_progress(progress: OperationProgress) -> None:
    """Print a one-line progress entry for a completed operation."""
    result = progress.result
    marker = "[success]OK[/success]" if result.success else "[error]FAIL[/error]"
    line = f"[muted][{progress.current}/{progress.total}][/muted] {marker} {result.operation}"
    if result.error:
        line += f" [muted]- {result.error}[/muted]"
    console.print(line)


def create_results_table(report: ExecutionReport) -> Table:
    """Create a table of failed and aborted operations."""
    table = create_table("Failures", "Status", "Operation", "Error")
    for result in report.results:
        if result.success:
            continue
        status = "[error]FATAL[/error]" if result.fatal else "[error]FAIL[/error]"
        table.add_row(status, str(result.operation), result.error or "")
    for operation in report.aborted:
        table.add_row("[warning]ABORTED[/warning]", str(operation), "not attempted")
    return table


def print_execution_summary(report: ExecutionReport) -> None:
    """Print the result counts of an execution."""
    if report.all_succeeded:
        print_success(f"All {report.success_count} operation(s) completed successfully.")
        return

    console.print(create_results_table(report))
    parts = [f"[success]{report.success_count} succeeded[/success]"]
    if report.failure_count:
        parts.append(f"[error]{report.failure_count} failed[/error]")
    if report.aborted:
        parts.append(f"[warning]{len(report.aborted)} aborted[/warning]")
    console.print("\nSummary: " + ", ".join(parts))


def create_baseline_table(diff: BaselineDiff) -> Table:
    """Create a table listing changes relative to the baseline."""
    table = create_table("Changes Since Baseline", "Change", "Key", "Value")
    for modified in diff.modified:
        table.add_row(
            "[changed]~[/changed]",
            modified.path,
            f"[removed]{modified.baseline}[/removed] → [added]{modified.current}[/added]",
        )
    for added in diff.added:
        table.add_row("[added]+[/added]", added.path, added.value)
    for removed in diff.removed:
        table.add_row("[removed]-[/removed]", removed.path, removed.value)
    return table
