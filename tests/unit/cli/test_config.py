"""Unit tests for the config commands."""

import json

from hostsync.cli.main import app
from hostsync.core.config import Settings, load_settings
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigCommands:
    """Tests for config init and show."""

    def test_init_writes_defaults(self, isolated_dirs) -> None:
        """init writes a default settings file once."""
        result = runner.invoke(app, ["config", "init"])
        again = runner.invoke(app, ["config", "init"])

        path = isolated_dirs / "config" / "hostsync" / "config.toml"
        assert result.exit_code == 0
        assert load_settings(path) == Settings()
        assert again.exit_code == 1

    def test_init_force(self, isolated_dirs) -> None:
        """--force overwrites an existing file."""
        path = isolated_dirs / "config" / "hostsync" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text('[system]\nbackend = "dnf"\n')

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert load_settings(path).system.backend == "rpm-ostree"

    def test_show_json(self, isolated_dirs) -> None:
        """show --json reports locations and settings."""
        result = runner.invoke(app, ["config", "show", "--json"])

        data = json.loads(result.output)
        assert data["system_manifests"] == str(isolated_dirs / "system")
        assert data["settings"]["system"]["backend"] == "rpm-ostree"

    def test_show_invalid_settings(self, isolated_dirs) -> None:
        """Invalid settings are reported with exit code 1."""
        path = isolated_dirs / "config" / "hostsync" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("[system\n")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
