"""Diff and sync a Kong gateway's configuration against a target state."""

__version__ = "0.1.0"