"""Command-line interface for Melody Echo."""

from .main import cli

__all__ = ["cli"]
