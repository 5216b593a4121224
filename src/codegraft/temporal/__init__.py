"""Temporal state machine over code graph entities."""

from codegraft.temporal.ops import TemporalStateManager

__all__ = ["TemporalStateManager"]
