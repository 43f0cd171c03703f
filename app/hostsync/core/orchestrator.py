"""Composite planning across subsystems.

Builds the apply and capture plans for a selection of subsystems in
canonical order. Planning a subsystem may fail (its tool is missing, its
manifest is invalid); such a failure becomes a warning on the composite
and the other subsystems are still planned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from functools import partial
from typing import Any

from hostsync.components import Component, Subsystem, get_component, select_subsystems
from hostsync.core.composite import CompositePlan
from hostsync.core.manifest import ManifestError
from hostsync.core.plan import Plan, PlanContext, PlanWarning
from hostsync.core.status import StatusReport, collect_status
from hostsync.models.gsetting import GSettingFilter
from hostsync.scanners.base import ScanError

logger = logging.getLogger(__name__)

ComponentFactory = Callable[[Subsystem, PlanContext], Component[Any, Any]]


def _components(
    ctx: PlanContext,
    subsystems: Iterable[Subsystem],
    factory: ComponentFactory,
) -> list[Component[Any, Any]]:
    return [factory(subsystem, ctx) for subsystem in subsystems]


def _add_planned(
    composite: CompositePlan,
    component: Component[Any, Any],
    build: Callable[[], Plan | None],
) -> None:
    """Plan one subsystem, turning a planning failure into a warning."""
    try:
        plan = build()
    except (ScanError, ManifestError) as e:
        logger.warning("Planning %s failed: %s", component.id, e)
        composite.add_warning(PlanWarning(component.id, f"skipped: {e}"))
        return

    if plan is None:
        return
    if plan.is_empty():
        # Warnings of an empty sub-plan would be lost with the plan itself
        for warning in plan.describe().warnings:
            composite.add_warning(warning)
        return
    composite.add(plan)


def plan_apply(
    ctx: PlanContext,
    only: Iterable[Subsystem] | None = None,
    exclude: Iterable[Subsystem] | None = None,
    factory: ComponentFactory = get_component,
) -> CompositePlan:
    """Plan bringing the host in line with the merged manifests.

    Args:
        ctx: Planning context.
        only: Restrict planning to these subsystems.
        exclude: Subsystems to leave out.
        factory: Creates the component for a subsystem.

    Returns:
        CompositePlan with one sub-plan per subsystem that has work.
    """
    composite = CompositePlan("Apply")
    for component in _components(ctx, select_subsystems(only, exclude), factory):
        _add_planned(composite, component, component.plan_sync)
    logger.debug("Apply plan has %d sub-plan(s)", len(composite))
    return composite


def plan_capture(
    ctx: PlanContext,
    only: Iterable[Subsystem] | None = None,
    exclude: Iterable[Subsystem] | None = None,
    gsetting_filter: GSettingFilter | None = None,
    factory: ComponentFactory = get_component,
) -> CompositePlan:
    """Plan recording untracked live items into the user manifests.

    Subsystems without capture support are skipped silently. Settings are
    only captured when a schema filter is given.

    Args:
        ctx: Planning context.
        only: Restrict capture to these subsystems.
        exclude: Subsystems to leave out.
        gsetting_filter: Schemas to capture settings from.
        factory: Creates the component for a subsystem.

    Returns:
        CompositePlan with one capture plan per subsystem that has
        untracked items.
    """
    composite = CompositePlan("Capture")
    selected = select_subsystems(only, exclude)

    if Subsystem.GSETTING in selected and gsetting_filter is None:
        selected.remove(Subsystem.GSETTING)
        if only is not None:
            composite.add_warning(
                PlanWarning(Subsystem.GSETTING.value, "skipped: capture needs a schema filter")
            )

    for component in _components(ctx, selected, factory):
        if not component.supports_capture():
            logger.debug("%s does not support capture", component.id)
            continue
        capture_filter = gsetting_filter if component.id == Subsystem.GSETTING.value else None
        _add_planned(composite, component, partial(component.plan_capture, capture_filter))
    logger.debug("Capture plan has %d sub-plan(s)", len(composite))
    return composite


def host_status(
    ctx: PlanContext,
    only: Iterable[Subsystem] | None = None,
    exclude: Iterable[Subsystem] | None = None,
    factory: ComponentFactory = get_component,
) -> StatusReport:
    """Report drift counts for the selected subsystems."""
    return collect_status(_components(ctx, select_subsystems(only, exclude), factory))
