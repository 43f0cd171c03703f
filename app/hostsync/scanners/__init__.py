"""Read-only adapters reporting live host state."""

from hostsync.scanners.base import Scanner, ScanError

__all__ = ["ScanError", "Scanner"]
