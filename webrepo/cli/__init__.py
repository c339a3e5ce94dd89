"""Command line interface."""

from webrepo.cli.main import cli


__all__ = ["cli"]
