"""
Command-line interface module for recsan.

Typer application with Rich formatted diagnostics.
"""

from .main import app

__all__ = ["app"]
