"""Plan/execute core.

Commands are split into two phases:

1. Planning: analyze current state and produce an immutable plan. Planning
   may scan the system and load manifests but never mutates anything.
2. Execution: apply the plan's operations one at a time. All side effects
   happen here.

Dry-run is simply "plan and describe, but do not execute". The same
``describe()`` output is used for previews and for audit logging.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from hostsync.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExecutionFailure(Exception):
    """A single operation failed during execution.

    Recorded in the ExecutionReport; remaining operations continue.
    """


class FatalExecutionError(Exception):
    """A state-corrupting failure, e.g. the manifest cannot be written back.

    Aborts the remaining operations of the current plan. Operations that
    already completed are not rolled back.
    """


class PlanConsumedError(RuntimeError):
    """Raised when a plan is executed a second time."""


class Verb(str, Enum):
    """Verb describing an operation type."""

    INSTALL = "install"
    REMOVE = "remove"
    ENABLE = "enable"
    DISABLE = "disable"
    SET = "set"
    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"
    CAPTURE = "capture"
    CONFIGURE = "configure"
    SKIP = "skip"

    @property
    def label(self) -> str:
        """Display label for this verb (e.g., 'Install')."""
        return self.value.capitalize()

    @property
    def is_destructive(self) -> bool:
        """Check if this verb removes something from the system."""
        return self in (Verb.REMOVE, Verb.DELETE, Verb.DISABLE)


@dataclass(frozen=True, slots=True)
class Operation:
    """A single operation in a plan.

    Attributes:
        verb: The action type.
        target: Subsystem-qualified identity (e.g., 'flatpak:org.gnome.Boxes').
        details: Optional additional information shown next to the target.
    """

    verb: Verb
    target: str
    details: str | None = None

    def __post_init__(self) -> None:
        """Validate operation data after initialization."""
        if not self.target:
            msg = "Operation target cannot be empty"
            raise ValueError(msg)

    def __str__(self) -> str:
        text = f"{self.verb.label} {self.target}"
        if self.details:
            text += f" ({self.details})"
        return text

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        result = {"verb": self.verb.value, "target": self.target}
        if self.details is not None:
            result["details"] = self.details
        return result


@dataclass(frozen=True, slots=True)
class PlanWarning:
    """A non-blocking warning produced during planning.

    Attributes:
        target: What the warning relates to (a subsystem or operation target).
        message: Human-readable warning text.
    """

    target: str
    message: str

    def __str__(self) -> str:
        return f"{self.target}: {self.message}"


@dataclass(slots=True)
class PlanSummary:
    """Structured description of a plan for display and audit logging.

    Attributes:
        summary: Brief one-line summary of the plan.
        operations: Operations in execution order.
        warnings: Non-blocking warnings discovered during planning.
    """

    summary: str
    operations: list[Operation] = field(default_factory=list)
    warnings: list[PlanWarning] = field(default_factory=list)

    def add_operations(self, operations: Sequence[Operation]) -> None:
        """Append operations to the summary."""
        self.operations.extend(operations)

    def add_warnings(self, warnings: Sequence[PlanWarning]) -> None:
        """Append warnings to the summary."""
        self.warnings.extend(warnings)

    @property
    def action_count(self) -> int:
        """Number of operations that are not skips."""
        return sum(1 for op in self.operations if op.verb != Verb.SKIP)

    @property
    def has_actions(self) -> bool:
        """Check if there is at least one real (non-skip) operation."""
        return self.action_count > 0

    @property
    def has_warnings(self) -> bool:
        """Check if any warnings were produced."""
        return bool(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": self.summary,
            "action_count": self.action_count,
            "operations": [op.to_dict() for op in self.operations],
            "warnings": [{"target": w.target, "message": w.message} for w in self.warnings],
        }


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of executing a single operation.

    Attributes:
        operation: The operation that was attempted.
        success: Whether it completed successfully.
        message: Optional success message.
        error: Failure reason when the operation failed.
        fatal: Whether the failure aborted the rest of its plan.
    """

    operation: Operation
    success: bool
    message: str | None = None
    error: str | None = None
    fatal: bool = False

    @property
    def failed(self) -> bool:
        """Check if the operation failed."""
        return not self.success

    @classmethod
    def succeeded(cls, operation: Operation, message: str | None = None) -> OperationResult:
        """Create a successful result."""
        return cls(operation=operation, success=True, message=message)

    @classmethod
    def failure(
        cls, operation: Operation, error: str, *, fatal: bool = False
    ) -> OperationResult:
        """Create a failed result."""
        return cls(operation=operation, success=False, error=error, fatal=fatal)


@dataclass(frozen=True, slots=True)
class OperationProgress:
    """Progress information passed to the progress callback.

    Attributes:
        current: 1-based index of the operation that just completed.
        total: Total number of operations expected.
        result: Result of the operation.
    """

    current: int
    total: int
    result: OperationResult


ProgressCallback = Callable[[OperationProgress], None]


@dataclass(slots=True)
class ExecutionReport:
    """Accumulated outcomes of a plan execution.

    Attributes:
        results: Result of each attempted operation, in order.
        aborted: Operations never attempted because a fatal error
            stopped their plan.
    """

    results: list[OperationResult] = field(default_factory=list)
    aborted: list[Operation] = field(default_factory=list)

    def record(self, result: OperationResult) -> None:
        """Record the result of an attempted operation."""
        self.results.append(result)

    def merge(self, other: ExecutionReport) -> None:
        """Merge another report into this one, preserving order."""
        self.results.extend(other.results)
        self.aborted.extend(other.aborted)

    @property
    def success_count(self) -> int:
        """Number of operations that succeeded."""
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        """Number of operations that failed, fatal or not."""
        return sum(1 for r in self.results if r.failed)

    @property
    def failures(self) -> list[OperationResult]:
        """Non-fatal per-item failures."""
        return [r for r in self.results if r.failed and not r.fatal]

    @property
    def fatal_errors(self) -> list[OperationResult]:
        """Failures that aborted their plan."""
        return [r for r in self.results if r.fatal]

    @property
    def all_succeeded(self) -> bool:
        """Check if every operation succeeded and none were aborted."""
        return not self.aborted and all(r.success for r in self.results)

    @property
    def has_failures(self) -> bool:
        """Check if any operation failed."""
        return any(r.failed for r in self.results)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "succeeded": self.success_count,
            "failed": self.failure_count,
            "aborted": [op.to_dict() for op in self.aborted],
            "results": [
                {
                    **r.operation.to_dict(),
                    "success": r.success,
                    **({"error": r.error} if r.error else {}),
                    **({"fatal": True} if r.fatal else {}),
                }
                for r in self.results
            ],
        }


@dataclass(frozen=True, slots=True)
class PlanContext:
    """Read-only context for the planning phase.

    Attributes:
        system_manifest_dir: Directory holding the system manifest layer.
        user_manifest_dir: Directory holding the user manifest layer.
        settings: Loaded hostsync settings.
    """

    system_manifest_dir: Path
    user_manifest_dir: Path
    settings: Settings

    def system_manifest_path(self, filename: str) -> Path:
        """Get the path of a system-layer manifest file."""
        return self.system_manifest_dir / filename

    def user_manifest_path(self, filename: str) -> Path:
        """Get the path of a user-layer manifest file."""
        return self.user_manifest_dir / filename


class ExecuteContext:
    """Context for the execution phase.

    Tracks progress across all operations of one execution, including the
    sub-plans of a composite plan, and forwards each result to an optional
    callback so the UI layer can render progress without plans knowing
    about display concerns.
    """

    def __init__(
        self,
        progress_callback: ProgressCallback | None = None,
        total_ops: int = 0,
    ) -> None:
        """Initialize the execution context.

        Args:
            progress_callback: Called once after each operation completes.
            total_ops: Total number of operations expected.
        """
        self._callback = progress_callback
        self._current = 0
        self.total_ops = total_ops

    @property
    def completed(self) -> int:
        """Number of operations completed so far."""
        return self._current

    def notify_progress(self, result: OperationResult) -> None:
        """Advance the operation counter and invoke the callback."""
        self._current += 1
        if self._callback is not None:
            self._callback(
                OperationProgress(current=self._current, total=self.total_ops, result=result)
            )


class Plan(ABC):
    """An immutable description of operations to perform.

    Plans can be described, composed, and serialized before execution.
    Execution consumes the plan: it is not safely re-runnable without
    planning again.
    """

    @abstractmethod
    def describe(self) -> PlanSummary:
        """Return a structured description of this plan."""

    @abstractmethod
    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        """Execute the plan, performing all side effects."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Return True if this plan has no operations to perform."""


class OperationPlan(Plan, Generic[T]):
    """Plan made of a fixed sequence of operations, each bound to an item.

    Subclasses implement :meth:`apply` to perform a single operation.
    Execution runs operations sequentially: later operations may assume
    earlier ones succeeded (a repository add before an install from it).

    Per-item failures (``ExecutionFailure``) are recorded and execution
    continues. A ``FatalExecutionError`` stops the remaining operations of
    this plan, which are reported as aborted.
    """

    #: Short title used in the summary line (e.g., 'Flatpak sync').
    title: str = "Plan"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, T]],
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        """Initialize the plan.

        Args:
            steps: Operations in execution order, each paired with the
                item it acts on.
            warnings: Non-blocking warnings found while planning.
        """
        self._steps: tuple[tuple[Operation, T], ...] = tuple(steps)
        self._warnings: tuple[PlanWarning, ...] = tuple(warnings)
        self._consumed = False

    @property
    def operations(self) -> tuple[Operation, ...]:
        """Operations in execution order."""
        return tuple(op for op, _item in self._steps)

    @property
    def warnings(self) -> tuple[PlanWarning, ...]:
        """Warnings found while planning."""
        return self._warnings

    def describe(self) -> PlanSummary:
        """Describe the plan as a summary with its operations."""
        count = sum(1 for op in self.operations if op.verb != Verb.SKIP)
        summary = PlanSummary(summary=f"{self.title}: {count} operation(s)")
        summary.add_operations(self.operations)
        summary.add_warnings(self._warnings)
        return summary

    def is_empty(self) -> bool:
        """Check if there is nothing to do."""
        return all(op.verb == Verb.SKIP for op in self.operations)

    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        """Execute all operations sequentially.

        Args:
            ctx: Execution context receiving progress notifications.

        Returns:
            ExecutionReport with one result per attempted operation.

        Raises:
            PlanConsumedError: If the plan was already executed.
        """
        self._consume()
        report = ExecutionReport()
        if ctx.total_ops == 0:
            ctx.total_ops = sum(1 for op in self.operations if op.verb != Verb.SKIP)

        for index, (operation, item) in enumerate(self._steps):
            if operation.verb == Verb.SKIP:
                continue
            try:
                message = self.apply(operation, item)
            except ExecutionFailure as e:
                logger.warning("%s failed: %s", operation, e)
                result = OperationResult.failure(operation, str(e))
            except FatalExecutionError as e:
                logger.error("%s failed fatally: %s", operation, e)
                result = OperationResult.failure(operation, str(e), fatal=True)
                report.record(result)
                ctx.notify_progress(result)
                report.aborted.extend(
                    op for op, _item in self._steps[index + 1 :] if op.verb != Verb.SKIP
                )
                break
            else:
                result = OperationResult.succeeded(operation, message)
            report.record(result)
            ctx.notify_progress(result)

        return report

    @abstractmethod
    def apply(self, operation: Operation, item: T) -> str | None:
        """Perform a single operation.

        Args:
            operation: The operation being executed.
            item: The item the operation acts on.

        Returns:
            Optional success message.

        Raises:
            ExecutionFailure: If this operation failed.
            FatalExecutionError: If the failure must stop the plan.
        """

    def _consume(self) -> None:
        """Mark the plan as executed, refusing a second execution."""
        if self._consumed:
            msg = f"{self.title} has already been executed; plan again"
            raise PlanConsumedError(msg)
        self._consumed = True
