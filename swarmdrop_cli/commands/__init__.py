"""CLI command modules."""

from . import check, share

__all__ = [
    "check",
    "share",
]
