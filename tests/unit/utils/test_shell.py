"""Unit tests for shell execution utilities."""

from unittest.mock import MagicMock, patch

from hostsync.utils.shell import CommandResult, command_exists, run_command


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success(self) -> None:
        """Exit code 0 is success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success

    def test_error_message_prefers_stderr(self) -> None:
        """stderr is the preferred error description."""
        result = CommandResult(stdout="out", stderr=" err \n", returncode=1)

        assert result.error_message == "err"

    def test_error_message_falls_back(self) -> None:
        """Without output the exit code is reported."""
        assert CommandResult(stdout="", stderr="", returncode=3).error_message == "exit code 3"


class TestRunCommand:
    """Tests for run_command."""

    @patch("hostsync.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """Output and exit code are returned as a CommandResult."""
        mock_run.return_value = MagicMock(stdout="hi\n", stderr="", returncode=0)

        result = run_command(["echo", "hi"], timeout=5.0)

        assert result == CommandResult(stdout="hi\n", stderr="", returncode=0)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == 5.0
        assert kwargs["check"] is False


class TestCommandExists:
    """Tests for command_exists."""

    @patch("hostsync.utils.shell.shutil.which", return_value="/usr/bin/flatpak")
    def test_found(self, mock_which: MagicMock) -> None:
        """A command on PATH exists."""
        assert command_exists("flatpak")
        mock_which.assert_called_once_with("flatpak")

    @patch("hostsync.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """A command not on PATH does not exist."""
        assert not command_exists("brew")
