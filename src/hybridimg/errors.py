# src/hybridimg/errors.py
"""Exception types raised by hybridimg."""
from __future__ import annotations

__all__ = [
    "HybridImageError",
    "InvalidArgument",
    "DimensionMismatch",
]


class HybridImageError(Exception):
    """Base class for all hybridimg errors."""


class InvalidArgument(HybridImageError, ValueError):
    """Bad scalar parameter (e.g. sigma <= 0) or malformed kernel."""


class DimensionMismatch(HybridImageError, ValueError):
    """Images or planes of unequal size combined in one operation."""
