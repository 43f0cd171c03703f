"""Shared option types and helpers for CLI commands."""

from typing import Annotated

import typer

from hostsync.components import Subsystem
from hostsync.core.config import ConfigError, load_settings
from hostsync.core.paths import get_system_manifest_dir, get_user_manifest_dir
from hostsync.core.plan import PlanContext
from hostsync.utils.formatting import print_error

OnlyOption = Annotated[
    list[Subsystem] | None,
    typer.Option(
        "--only",
        "-o",
        help="Limit to this subsystem (repeatable).",
        case_sensitive=False,
    ),
]

ExcludeOption = Annotated[
    list[Subsystem] | None,
    typer.Option(
        "--exclude",
        "-x",
        help="Leave out this subsystem (repeatable).",
        case_sensitive=False,
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for scripting."),
]


def build_plan_context() -> PlanContext:
    """Load settings and resolve manifest locations.

    Raises:
        typer.Exit: If the settings file is invalid.
    """
    try:
        settings = load_settings()
    except ConfigError as e:
        print_error(f"Failed to load settings: {e}")
        raise typer.Exit(code=1) from e

    return PlanContext(
        system_manifest_dir=get_system_manifest_dir(),
        user_manifest_dir=get_user_manifest_dir(),
        settings=settings,
    )
