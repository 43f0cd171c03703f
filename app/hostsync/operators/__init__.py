"""Adapters that apply changes to the host."""

from hostsync.operators.base import Operator

__all__ = ["Operator"]
