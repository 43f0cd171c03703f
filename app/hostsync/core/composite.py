"""Composite plan combining heterogeneous subsystem plans."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from hostsync.core.plan import (
    ExecuteContext,
    ExecutionReport,
    Plan,
    PlanConsumedError,
    PlanSummary,
    PlanWarning,
)

logger = logging.getLogger(__name__)


class CompositePlan(Plan):
    """A plan made of sub-plans of different types.

    Empty sub-plans are dropped when added, so an empty composite is one
    that has nothing at all to do. Sub-plans run in insertion order, which
    callers keep as the canonical subsystem order.
    """

    def __init__(self, name: str, plans: Iterable[Plan] = ()) -> None:
        """Initialize the composite.

        Args:
            name: Display name (e.g., 'Apply').
            plans: Initial sub-plans.
        """
        self.name = name
        self._plans: list[Plan] = []
        self._warnings: list[PlanWarning] = []
        self._consumed = False
        for plan in plans:
            self.add(plan)

    def add(self, plan: Plan) -> None:
        """Add a sub-plan, ignoring it if it is empty."""
        if plan.is_empty():
            logger.debug("Dropping empty sub-plan %s", type(plan).__name__)
            return
        self._plans.append(plan)

    def add_warning(self, warning: PlanWarning) -> None:
        """Attach a planning warning not owned by any sub-plan."""
        self._warnings.append(warning)

    @property
    def plans(self) -> tuple[Plan, ...]:
        """Sub-plans in execution order."""
        return tuple(self._plans)

    @property
    def warnings(self) -> tuple[PlanWarning, ...]:
        """Warnings attached directly to the composite."""
        return tuple(self._warnings)

    def __len__(self) -> int:
        return len(self._plans)

    def describe(self) -> PlanSummary:
        """Concatenate sub-plan descriptions in insertion order."""
        summary = PlanSummary(summary="")
        summary.add_warnings(self._warnings)
        for plan in self._plans:
            sub = plan.describe()
            summary.add_operations(sub.operations)
            summary.add_warnings(sub.warnings)
        summary.summary = f"{self.name} Plan: {summary.action_count} operation(s)"
        return summary

    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        """Run every sub-plan in order and merge their reports.

        A fatal error inside one sub-plan stops only that sub-plan; the
        remaining sub-plans still run.
        """
        if self._consumed:
            msg = f"{self.name} plan has already been executed; plan again"
            raise PlanConsumedError(msg)
        self._consumed = True

        if ctx.total_ops == 0:
            ctx.total_ops = self.describe().action_count

        report = ExecutionReport()
        for plan in self._plans:
            report.merge(plan.execute(ctx))
        return report

    def is_empty(self) -> bool:
        """Check if no non-empty sub-plan was added."""
        return not self._plans
