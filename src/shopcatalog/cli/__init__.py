"""Command-line interface for shopcatalog."""

from .app import cli

__all__ = ["cli"]
