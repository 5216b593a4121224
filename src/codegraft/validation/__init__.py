"""Syntax preflight for pending proposals."""

from codegraft.validation.ops import SyntaxValidator, ValidationIssue, ValidationReport

__all__ = ["SyntaxValidator", "ValidationIssue", "ValidationReport"]
