"""Token-budgeted context projection."""

from codegraft.context.budget import TokenBudget, estimate_tokens
from codegraft.context.ops import ContextProjector, Projection, entity_record

__all__ = ["ContextProjector", "Projection", "TokenBudget", "entity_record", "estimate_tokens"]
