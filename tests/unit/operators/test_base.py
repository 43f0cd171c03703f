"""Unit tests for the Operator base class."""

import subprocess
from unittest.mock import patch

from hostsync.operators.base import EXIT_NOT_FOUND, EXIT_TIMEOUT, Operator
from hostsync.utils.shell import CommandResult


class ToolOperator(Operator):
    """Operator driving a fictional tool."""

    command = "tool"
    timeout = 5.0


class TestOperatorRun:
    """Tests for Operator.run."""

    def test_missing_executable(self) -> None:
        """A missing executable is a failed result, not an exception."""
        with (
            patch("hostsync.operators.base.command_exists", return_value=False),
            patch("hostsync.operators.base.run_command") as mock_run,
        ):
            result = ToolOperator().run(["other", "do"])

        assert result.returncode == EXIT_NOT_FOUND
        assert result.error_message == "other is not available on this system"
        mock_run.assert_not_called()

    def test_timeout(self) -> None:
        """A timeout is reported with its own exit code."""
        with (
            patch("hostsync.operators.base.command_exists", return_value=True),
            patch(
                "hostsync.operators.base.run_command",
                side_effect=subprocess.TimeoutExpired(["tool"], 5),
            ),
        ):
            result = ToolOperator().run(["tool", "do"])

        assert result.returncode == EXIT_TIMEOUT
        assert "timed out after 5s" in result.stderr

    def test_os_error(self) -> None:
        """An OS error while spawning is a failed result."""
        with (
            patch("hostsync.operators.base.command_exists", return_value=True),
            patch("hostsync.operators.base.run_command", side_effect=PermissionError("denied")),
        ):
            result = ToolOperator().run(["tool"])

        assert not result.success
        assert result.stderr == "denied"

    def test_timeout_override(self) -> None:
        """An explicit timeout replaces the default."""
        with (
            patch("hostsync.operators.base.command_exists", return_value=True),
            patch("hostsync.operators.base.run_command") as mock_run,
        ):
            mock_run.return_value = CommandResult(stdout="ok", stderr="", returncode=0)

            result = ToolOperator().run(["tool", "do"], timeout=1.0)

        assert result.success
        mock_run.assert_called_once_with(["tool", "do"], timeout=1.0)
