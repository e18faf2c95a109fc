"""
Command line interface for logs2goaccess.
"""

from logs2goaccess.cli.main import cli, main

__all__ = ["cli", "main"]
