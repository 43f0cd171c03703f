"""Abstract base class for live-state scanners.

Scanners query one subsystem of the running host and yield typed items.
They never modify anything.
"""

import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Generic, TypeVar

from hostsync.utils.shell import CommandResult, command_exists, run_command

T = TypeVar("T")


class ScanError(Exception):
    """Raised when live state of a subsystem cannot be determined.

    A scan error is isolated to its subsystem: other subsystems are still
    reported.
    """


class Scanner(ABC, Generic[T]):
    """Abstract base class for all scanners.

    Example:
        >>> scanner = FlatpakScanner()
        >>> if scanner.is_available():
        ...     for app in scanner.scan():
        ...         print(app.id)
    """

    #: Executable the scanner depends on
    command: str = ""

    #: Timeout for a single query, in seconds
    timeout: float = 60.0

    @abstractmethod
    def scan(self) -> Iterator[T]:
        """Scan and yield every item of this subsystem.

        Yields:
            One item per managed object found on the host.

        Raises:
            ScanError: If the underlying tool fails.
        """

    def is_available(self) -> bool:
        """Check if the underlying tool is available on the system."""
        return command_exists(self.command)

    def scan_all(self) -> list[T]:
        """Scan into a list, failing if the tool is missing.

        Returns:
            All scanned items in tool output order.

        Raises:
            ScanError: If the tool is unavailable or the scan fails.
        """
        if not self.is_available():
            msg = f"{self.command or type(self).__name__} is not available on this system"
            raise ScanError(msg)
        return list(self.scan())

    def _run(self, args: list[str]) -> CommandResult:
        """Run a read-only command, leaving the exit status to the caller.

        Raises:
            ScanError: If the command cannot run or times out.
        """
        try:
            return run_command(args, timeout=self.timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            msg = f"{' '.join(args[:2])} failed: {e}"
            raise ScanError(msg) from e

    def _query(self, args: list[str]) -> str:
        """Run a read-only command and return its stdout.

        Raises:
            ScanError: If the command cannot run or exits non-zero.
        """
        result = self._run(args)
        if not result.success:
            msg = f"{' '.join(args[:2])} failed: {result.error_message}"
            raise ScanError(msg)
        return result.stdout
