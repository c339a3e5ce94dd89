"""Typed HTTP call executor."""

__version__ = "0.1.0"
