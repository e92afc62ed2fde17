"""Command-line interface for parsing, formatting and validating markup files."""

from .main import main

__all__ = ["main"]
