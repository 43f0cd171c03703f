"""Settings commands."""

import json
from typing import Annotated

import typer

from hostsync.cli.types import JsonOption
from hostsync.core.config import ConfigError, Settings, load_settings, save_settings
from hostsync.core.paths import get_settings_path, get_system_manifest_dir, get_user_manifest_dir
from hostsync.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage hostsync settings.",
    no_args_is_help=True,
)


@app.command("init")
def init_config(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with the default values."""
    path = get_settings_path()
    if path.exists() and not force:
        print_error(f"Settings file already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_settings(Settings(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Settings written to {saved}")


@app.command("show")
def show_config(json_output: JsonOption = False) -> None:
    """Show the effective settings and manifest locations."""
    try:
        settings = load_settings()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    data = {
        "settings_file": str(get_settings_path()),
        "system_manifests": str(get_system_manifest_dir()),
        "user_manifests": str(get_user_manifest_dir()),
        "settings": settings.model_dump(mode="json"),
    }
    if json_output:
        console.print_json(json.dumps(data))
        return

    console.print(f"[header]Settings file:[/header]    {data['settings_file']}")
    console.print(f"[header]System manifests:[/header] {data['system_manifests']}")
    console.print(f"[header]User manifests:[/header]   {data['user_manifests']}")
    console.print(f"[header]Package backend:[/header]  {settings.system.backend}")
    rules = settings.baseline.to_rules()
    console.print(
        f"[header]Baseline rules:[/header]   {len(rules.patterns)} pattern(s), "
        f"{len(rules.namespaces)} namespace(s)"
    )
