"""Core grove functionality."""

from .grove import Grove, init_project, install_signal_handler

__all__ = ["Grove", "init_project", "install_signal_handler"]
