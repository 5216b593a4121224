"""Context projector: token-budgeted views of the store for a reasoning client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from codegraft.context.budget import DEFAULT_CHARS_PER_TOKEN, TokenBudget
from codegraft.graph.index import DependencyIndex
from codegraft.graph.models import Entity, EntityClass
from codegraft.store.repository import EntityFilter

if TYPE_CHECKING:
    from codegraft.config.models import ContextConfig
    from codegraft.store.repository import CodeGraphStore

log = structlog.get_logger(__name__)

DEFAULT_TOKEN_BUDGET = 8000


@dataclass
class Projection:
    """Result of one projection, in projection order."""

    records: list[dict[str, Any]]
    filter: EntityFilter
    include_code: bool
    total_entities: int
    estimated_tokens: int
    token_budget: int
    truncated: bool
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def included_entities(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities": self.records,
            "metadata": {
                "filter": self.filter.value,
                "include_code": self.include_code,
                "total_entities": self.total_entities,
                "included_entities": self.included_entities,
                "estimated_tokens": self.estimated_tokens,
                "token_budget": self.token_budget,
                "truncated": self.truncated,
                "generated_at": self.generated_at.isoformat(),
            },
        }


def entity_record(
    entity: Entity,
    *,
    include_code: bool,
    index: DependencyIndex | None = None,
) -> dict[str, Any]:
    """Exchange-format record for one entity.

    Code text is only present when requested; it costs roughly two orders
    of magnitude more tokens than the metadata. One-hop dependencies come
    from ``index``; without one both lists are empty.
    """
    index = index or DependencyIndex()
    record: dict[str, Any] = {
        "identity": entity.identity,
        "interface_signature": entity.signature.to_dict(),
        "classification": entity.classification.value,
        "current_present": entity.current_present,
        "future_present": entity.future_present,
        "pending_action": entity.pending_action.value if entity.pending_action else None,
        "file_path": entity.file_path,
        "forward_deps": sorted(set(index.successors(entity.identity))),
        "reverse_deps": sorted(set(index.predecessors(entity.identity))),
    }
    if include_code:
        record["current_code"] = entity.current_code
        record["future_code"] = entity.future_code
    return record


def _projection_order(entity: Entity) -> tuple[int, str]:
    # Production code before tests, so truncation drops tests first
    is_test = entity.classification is EntityClass.TEST_IMPLEMENTATION
    return (1 if is_test else 0, entity.identity)


class ContextProjector:
    """Selects and budgets entities from the store. Pure reader."""

    def __init__(
        self,
        store: CodeGraphStore,
        *,
        token_budget: int = DEFAULT_TOKEN_BUDGET,
        chars_per_token: int = DEFAULT_CHARS_PER_TOKEN,
    ) -> None:
        self._store = store
        self._token_budget = token_budget
        self._chars_per_token = chars_per_token

    @classmethod
    def from_config(cls, store: CodeGraphStore, config: ContextConfig) -> ContextProjector:
        return cls(
            store,
            token_budget=config.token_budget,
            chars_per_token=config.chars_per_token,
        )

    def project(
        self,
        entity_filter: EntityFilter = EntityFilter.ALL,
        *,
        include_code: bool = False,
        token_budget: int | None = None,
    ) -> Projection:
        """Project the store through ``entity_filter`` within the token budget.

        When the budget is exceeded the result is a prefix of the ordered
        records and carries ``truncated=True``; a warning is logged.
        """
        limit = token_budget if token_budget is not None else self._token_budget
        entities = sorted(self._store.scan(entity_filter), key=_projection_order)
        index = DependencyIndex.from_store(self._store)

        budget = TokenBudget(limit, chars_per_token=self._chars_per_token)
        for entity in entities:
            record = entity_record(entity, include_code=include_code, index=index)
            if not budget.try_add(record):
                break

        truncated = budget.count < len(entities)
        if truncated:
            log.warning(
                "context_truncated",
                filter=entity_filter.value,
                total_entities=len(entities),
                included_entities=budget.count,
                token_budget=limit,
            )

        return Projection(
            records=budget.items,
            filter=entity_filter,
            include_code=include_code,
            total_entities=len(entities),
            estimated_tokens=budget.used_tokens,
            token_budget=limit,
            truncated=truncated,
        )
