"""Run a shell command repeatedly at a fixed interval."""

__version__ = "0.2.1"
