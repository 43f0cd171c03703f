"""Subsystem components.

The set of subsystems is closed. ``Subsystem`` lists them in canonical
order, which is also the order composite plans execute in.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import assert_never

from hostsync.components.base import CapturePlan, Component
from hostsync.components.extension import ExtensionComponent
from hostsync.components.flatpak import FlatpakComponent
from hostsync.components.gsetting import GSettingComponent
from hostsync.components.homebrew import HomebrewComponent
from hostsync.components.shim import ShimComponent
from hostsync.components.system import SystemComponent
from hostsync.core.plan import PlanContext


class Subsystem(str, Enum):
    """Managed subsystems, in canonical order."""

    SHIM = "shim"
    GSETTING = "gsetting"
    EXTENSION = "extension"
    FLATPAK = "flatpak"
    SYSTEM = "system"
    HOMEBREW = "homebrew"

    @classmethod
    def ordered(cls, subsystems: Iterable[Subsystem] | None = None) -> list[Subsystem]:
        """Return subsystems in canonical order (all of them by default)."""
        if subsystems is None:
            return list(cls)
        selected = set(subsystems)
        return [subsystem for subsystem in cls if subsystem in selected]


def get_component(subsystem: Subsystem, ctx: PlanContext) -> Component:
    """Create the component for a subsystem.

    Args:
        subsystem: Subsystem to create.
        ctx: Planning context.

    Returns:
        Component using its default scanner and operator.
    """
    match subsystem:
        case Subsystem.SHIM:
            return ShimComponent(ctx)
        case Subsystem.GSETTING:
            return GSettingComponent(ctx)
        case Subsystem.EXTENSION:
            return ExtensionComponent(ctx)
        case Subsystem.FLATPAK:
            return FlatpakComponent(ctx)
        case Subsystem.SYSTEM:
            return SystemComponent(ctx)
        case Subsystem.HOMEBREW:
            return HomebrewComponent(ctx)
        case _:
            assert_never(subsystem)


def select_subsystems(
    only: Iterable[Subsystem] | None = None,
    exclude: Iterable[Subsystem] | None = None,
) -> list[Subsystem]:
    """Apply include/exclude filters, keeping canonical order.

    Args:
        only: If given, restrict to these subsystems.
        exclude: Subsystems to drop.

    Returns:
        Selected subsystems in canonical order.
    """
    selected = Subsystem.ordered(only)
    excluded = set(exclude or ())
    return [subsystem for subsystem in selected if subsystem not in excluded]


__all__ = [
    "CapturePlan",
    "Component",
    "ExtensionComponent",
    "FlatpakComponent",
    "GSettingComponent",
    "HomebrewComponent",
    "ShimComponent",
    "Subsystem",
    "SystemComponent",
    "get_component",
    "select_subsystems",
]
