"""CLI command modules."""

from . import deadlines, snapshots, track

__all__ = [
    "deadlines",
    "snapshots",
    "track",
]
