"""Command line interface."""

from chaincompare.cli.app import app

__all__ = ["app"]
