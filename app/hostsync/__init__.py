"""hostsync - Declarative reconciliation for a single managed host.

Compares system and user manifests against live system state and
produces reviewable, executable change plans.
"""

__version__ = "0.1.0"
