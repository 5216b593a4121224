"""Wipe-and-re-extract."""

from codegraft.reset.ops import ResetController, ResetResult

__all__ = ["ResetController", "ResetResult"]
