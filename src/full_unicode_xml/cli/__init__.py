"""Command-line interface module for the full-unicode XML reader."""

from .main import main

__all__ = ["main"]
