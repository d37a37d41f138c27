"""Command-line interface for hybridimg."""

from .main import cli

__all__ = ["cli"]
