"""Command-line interface for unmarshalling saved XML responses."""

from .main import main

__all__ = ["main"]
