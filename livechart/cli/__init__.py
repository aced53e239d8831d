"""CLI commands for livechart.

This package provides the command-line interface for rendering and
replaying OHLCV record files.
"""

from livechart.cli.main import cli, main

__all__ = ["cli", "main"]
