"""Abstract base class for mutation adapters.

Operators perform single changes on the host. A failed command is
reported through the returned CommandResult, never raised.
"""

import logging
import subprocess
from abc import ABC

from hostsync.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

# Exit codes used for failures that happen before the command runs
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


class Operator(ABC):
    """Base class for all operators.

    Subclasses set ``command`` to the executable they drive and call
    :meth:`run` for each mutation.

    Example:
        >>> operator = FlatpakOperator()
        >>> if operator.is_available():
        ...     result = operator.install(FlatpakApp(id="org.gnome.Boxes"))
        ...     print(result.success)
    """

    #: Executable the operator drives
    command: str = ""

    #: Timeout for a single mutation, in seconds
    timeout: float = 300.0

    def is_available(self) -> bool:
        """Check if the underlying tool is available on the system."""
        return command_exists(self.command)

    def run(self, args: list[str], *, timeout: float | None = None) -> CommandResult:
        """Run a mutating command.

        Args:
            args: Command and arguments.
            timeout: Override of the default timeout.

        Returns:
            CommandResult. Missing executables and timeouts are reported as
            failed results instead of exceptions.
        """
        if not command_exists(args[0]):
            return CommandResult(
                stdout="",
                stderr=f"{args[0]} is not available on this system",
                returncode=EXIT_NOT_FOUND,
            )

        logger.info("Running %s", " ".join(args))
        limit = timeout if timeout is not None else self.timeout
        try:
            return run_command(args, timeout=limit)
        except subprocess.TimeoutExpired:
            return CommandResult(
                stdout="",
                stderr=f"{args[0]} timed out after {limit:.0f}s",
                returncode=EXIT_TIMEOUT,
            )
        except OSError as e:
            return CommandResult(stdout="", stderr=str(e), returncode=EXIT_NOT_FOUND)
