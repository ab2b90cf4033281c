"""Command line interface."""

from l5infer.cli.app import app

__all__ = ["app"]
