"""Change-set generation."""

from codegraft.diff.models import ChangeRecord, ChangeSet, Conflict, Operation
from codegraft.diff.ops import DiffGenerator, find_conflicts

__all__ = ["ChangeRecord", "ChangeSet", "Conflict", "DiffGenerator", "Operation", "find_conflicts"]
