"""
Geoindex CLI - Command-line interface for geo tables.
"""

from geoindex.cli.main import cli, main

__all__ = ["cli", "main"]
