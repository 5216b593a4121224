"""Token-budget accumulator for context projections.

Token cost is estimated, not tokenized: a record costs
``ceil(len(compact_json(record)) / chars_per_token)`` tokens. The estimate
is deterministic, so the same store always projects to the same payload.
"""

from __future__ import annotations

import json
import math
from typing import Any

DEFAULT_CHARS_PER_TOKEN = 4


def compact_json(item: dict[str, Any]) -> str:
    """Serialise *item* the way the estimator measures it."""
    return json.dumps(item, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def estimate_tokens(item: dict[str, Any], *, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN) -> int:
    """Approximate token cost of one record."""
    return math.ceil(len(compact_json(item)) / chars_per_token)


class TokenBudget:
    """Token-aware record accumulator.

    Usage::

        budget = TokenBudget(8000)
        for record in records:
            if not budget.try_add(record):
                break  # budget exhausted
        payload = budget.items

    Unlike a paging budget there is no oversized-first-item allowance: the
    accumulated total never exceeds the limit, so an oversized first record
    produces an empty, truncated projection.
    """

    __slots__ = ("_limit", "_chars_per_token", "_items", "_used", "_exhausted")

    def __init__(self, limit: int, *, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN) -> None:
        self._limit = limit
        self._chars_per_token = chars_per_token
        self._items: list[dict[str, Any]] = []
        self._used = 0
        self._exhausted = False

    def try_add(self, item: dict[str, Any]) -> bool:
        """Add *item* if it fits; otherwise mark the budget exhausted.

        Once exhausted, later items are refused even if they would fit, so
        the accepted records are always a prefix of the input order.
        """
        if self._exhausted:
            return False
        cost = estimate_tokens(item, chars_per_token=self._chars_per_token)
        if self._used + cost > self._limit:
            self._exhausted = True
            return False
        self._items.append(item)
        self._used += cost
        return True

    @property
    def items(self) -> list[dict[str, Any]]:
        return self._items

    @property
    def used_tokens(self) -> int:
        return self._used

    @property
    def remaining_tokens(self) -> int:
        return max(0, self._limit - self._used)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def count(self) -> int:
        return len(self._items)
