"""Temporal state manager: the only writer of client intents.

Legal transitions::

    UNCHANGED --edit--> EDIT      UNCHANGED --delete--> DELETE
    EDIT      --edit--> EDIT      EDIT      --delete--> DELETE
    DELETE    --edit--> EDIT      EDIT/DELETE --clear--> UNCHANGED
    (absent)  --create--> CREATE  CREATE    --create--> CREATE (same target)

Rows leave the store only through reset, so a CREATE cannot be cleared.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import structlog

from codegraft.core.errors import IllegalTransitionError, UnknownIdentityError
from codegraft.graph.identity import abbreviate_kind
from codegraft.graph.models import (
    Entity,
    EntityClass,
    InterfaceSignature,
    TemporalState,
)

if TYPE_CHECKING:
    from codegraft.store.repository import CodeGraphStore

log = structlog.get_logger(__name__)


class TemporalStateManager:
    """Applies create/edit/delete/clear intents to the store."""

    def __init__(self, store: CodeGraphStore) -> None:
        self._store = store

    def _require(self, identity: str) -> Entity:
        entity = self._store.get(identity)
        if entity is None:
            raise UnknownIdentityError.not_found(identity)
        return entity

    def create(
        self,
        identity: str,
        future_code: str,
        signature: InterfaceSignature,
        *,
        file_path: str | None = None,
        language: str | None = None,
        entity_kind: str | None = None,
        classification: EntityClass = EntityClass.CODE_IMPLEMENTATION,
    ) -> Entity:
        """Propose a new entity.

        Re-proposing an identity already held by a CREATE row replaces its
        future code, provided both proposals name the same file, name and
        kind; otherwise the 8-character hash collided.

        Raises:
            IllegalTransitionError: If the identity exists on disk, or a
                different proposal already holds it.
            InvalidTemporalStateError: If ``future_code`` is empty.
        """
        existing = self._store.get(identity)
        if existing is not None:
            if existing.current_present:
                raise IllegalTransitionError.rejected(
                    identity, "create", existing.state.name, "entity already exists on disk"
                )
            if not _same_target(existing, signature, file_path):
                raise IllegalTransitionError.rejected(
                    identity,
                    "create",
                    existing.state.name,
                    "identity collides with a different proposed entity",
                )

        if entity_kind is None:
            entity_kind = signature.kind

        entity = Entity(
            identity=identity,
            signature=signature,
            state=TemporalState.CREATE,
            current_code=None,
            future_code=future_code,
            classification=classification,
            file_path=file_path,
            language=language,
            entity_kind=entity_kind,
            line_range=None,
        )
        self._store.upsert(entity)
        log.info("entity_created", identity=identity, replaced=existing is not None)
        return entity

    def edit(self, identity: str, future_code: str) -> Entity:
        """Propose new text for an on-disk entity.

        Raises:
            UnknownIdentityError: If the identity is not in the store.
            IllegalTransitionError: If the entity does not exist on disk.
            InvalidTemporalStateError: If ``future_code`` is empty.
        """
        entity = self._require(identity)
        if not entity.current_present:
            raise IllegalTransitionError.rejected(
                identity, "edit", entity.state.name, "entity does not exist on disk yet"
            )
        updated = replace(entity, state=TemporalState.EDIT, future_code=future_code)
        self._store.upsert(updated)
        log.info("entity_edited", identity=identity, previous_state=entity.state.value)
        return updated

    def delete(self, identity: str) -> Entity:
        """Mark an on-disk entity for deletion, dropping any proposed text.

        Raises:
            UnknownIdentityError: If the identity is not in the store.
            IllegalTransitionError: If the entity does not exist on disk.
        """
        entity = self._require(identity)
        if not entity.current_present:
            raise IllegalTransitionError.rejected(
                identity, "delete", entity.state.name, "entity does not exist on disk yet"
            )
        updated = replace(entity, state=TemporalState.DELETE, future_code=None)
        self._store.upsert(updated)
        log.info("entity_deleted", identity=identity, previous_state=entity.state.value)
        return updated

    def clear(self, identity: str) -> Entity:
        """Abandon a proposed edit or delete.

        Raises:
            UnknownIdentityError: If the identity is not in the store.
            IllegalTransitionError: If the entity is a pending CREATE.
        """
        entity = self._require(identity)
        if entity.state is TemporalState.UNCHANGED:
            return entity
        if entity.state is TemporalState.CREATE:
            raise IllegalTransitionError.rejected(
                identity,
                "clear",
                entity.state.name,
                "a proposed entity has no unchanged form; run reset to discard it",
            )
        updated = replace(entity, state=TemporalState.UNCHANGED, future_code=None)
        self._store.upsert(updated)
        log.info("entity_cleared", identity=identity, previous_state=entity.state.value)
        return updated


def _same_target(existing: Entity, signature: InterfaceSignature, file_path: str | None) -> bool:
    if existing.signature.name != signature.name:
        return False
    if abbreviate_kind(existing.signature.kind) != abbreviate_kind(signature.kind):
        return False
    return file_path is None or existing.file_path is None or existing.file_path == file_path
