"""Utility modules for hostsync."""
