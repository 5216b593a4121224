"""Tests for the temporal state manager."""

import random
from datetime import UTC, datetime

import pytest

from codegraft.core.errors import (
    IllegalTransitionError,
    InvalidTemporalStateError,
    UnknownIdentityError,
)
from codegraft.graph.identity import new_entity_key
from codegraft.graph.models import InterfaceSignature, PendingAction, TemporalState
from codegraft.store import CodeGraphStore, EntityFilter
from codegraft.temporal import TemporalStateManager

NEW_FN = InterfaceSignature(name="new_fn", kind="function", visibility="pub")


@pytest.fixture
def manager(store: CodeGraphStore) -> TemporalStateManager:
    return TemporalStateManager(store)


@pytest.fixture
def on_disk(store: CodeGraphStore, entity_factory) -> str:
    entity = entity_factory("add", start=2, end=4)
    store.upsert(entity)
    return entity.identity


def _new_key(stamp: int = 0) -> str:
    return new_entity_key("src/lib.rs", "new_fn", "function", datetime(2024, 1, 1, 0, 0, stamp))


class TestEdit:
    def test_given_unchanged_when_edited_then_edit_state_with_future_code(
        self, manager: TemporalStateManager, store: CodeGraphStore, on_disk: str
    ) -> None:
        # When
        manager.edit(on_disk, "pub fn add(a: i32) -> i32 { a + 2 }")

        # Then
        entity = store.get(on_disk)
        assert entity is not None
        assert entity.state is TemporalState.EDIT
        assert entity.pending_action is PendingAction.EDIT
        assert entity.future_code == "pub fn add(a: i32) -> i32 { a + 2 }"
        assert entity.current_code == "fn add() {}"

    def test_given_edit_when_edited_again_then_latest_text_wins(
        self, manager: TemporalStateManager, store: CodeGraphStore, on_disk: str
    ) -> None:
        manager.edit(on_disk, "first")
        manager.edit(on_disk, "second")

        entity = store.get(on_disk)
        assert entity is not None and entity.future_code == "second"

    def test_given_delete_when_edited_then_back_to_edit(
        self, manager: TemporalStateManager, store: CodeGraphStore, on_disk: str
    ) -> None:
        manager.delete(on_disk)
        manager.edit(on_disk, "revived")

        entity = store.get(on_disk)
        assert entity is not None
        assert entity.state is TemporalState.EDIT
        assert entity.future_code == "revived"

    def test_given_empty_code_when_edited_then_rejected_and_row_unchanged(
        self, manager: TemporalStateManager, store: CodeGraphStore, on_disk: str
    ) -> None:
        before = store.get(on_disk)

        with pytest.raises(InvalidTemporalStateError):
            manager.edit(on_disk, "")

        assert store.get(on_disk) == before

    def test_given_unknown_identity_when_edited_then_unknown_identity(
        self, manager: TemporalStateManager
    ) -> None:
        with pytest.raises(UnknownIdentityError) as exc_info:
            manager.edit("rust:fn:ghost:src_lib_rs:1-2", "x")

        assert exc_info.value.details["identity"] == "rust:fn:ghost:src_lib_rs:1-2"

    def test_given_create_when_edited_then_illegal(self, manager: TemporalStateManager) -> None:
        key = _new_key()
        manager.create(key, "fn new_fn() {}", NEW_FN, file_path="src/lib.rs")

        with pytest.raises(IllegalTransitionError) as exc_info:
            manager.edit(key, "fn new_fn() { 1 }")

        assert exc_info.value.details["operation"] == "edit"
        assert exc_info.value.details["current_state"] == "CREATE"


class TestDelete:
    def test_given_edit_when_deleted_then_future_code_dropped(
        self, manager: TemporalStateManager, store: CodeGraphStore, on_disk: str
    ) -> None:
        manager.edit(on_disk, "proposed")
        manager.delete(on_disk)

        entity = store.get(on_disk)
        assert entity is not None
        assert entity.state is TemporalState.DELETE
        assert entity.future_present is False
        assert entity.future_code is None

    def test_given_create_when_deleted_then_illegal(self, manager: TemporalStateManager) -> None:
        key = _new_key()
        manager.create(key, "fn new_fn() {}", NEW_FN, file_path="src/lib.rs")

        with pytest.raises(IllegalTransitionError):
            manager.delete(key)

    def test_given_unknown_identity_when_deleted_then_unknown_identity(
        self, manager: TemporalStateManager
    ) -> None:
        with pytest.raises(UnknownIdentityError):
            manager.delete("rust:fn:ghost:src_lib_rs:1-2")


class TestClear:
    @pytest.mark.parametrize("intent", ["edit", "delete"])
    def test_given_pending_change_when_cleared_then_unchanged(
        self,
        manager: TemporalStateManager,
        store: CodeGraphStore,
        on_disk: str,
        intent: str,
    ) -> None:
        original = store.get(on_disk)
        if intent == "edit":
            manager.edit(on_disk, "proposed")
        else:
            manager.delete(on_disk)

        manager.clear(on_disk)

        assert store.get(on_disk) == original

    def test_given_unchanged_when_cleared_then_no_op(
        self, manager: TemporalStateManager, store: CodeGraphStore, on_disk: str
    ) -> None:
        revision = store.revision()

        entity = manager.clear(on_disk)

        assert entity.state is TemporalState.UNCHANGED
        assert store.revision() == revision

    def test_given_create_when_cleared_then_illegal(self, manager: TemporalStateManager) -> None:
        key = _new_key()
        manager.create(key, "fn new_fn() {}", NEW_FN, file_path="src/lib.rs")

        with pytest.raises(IllegalTransitionError) as exc_info:
            manager.clear(key)

        assert exc_info.value.details["operation"] == "clear"


class TestCreate:
    def test_given_new_identity_when_created_then_create_state(
        self, manager: TemporalStateManager, store: CodeGraphStore
    ) -> None:
        key = _new_key()

        manager.create(key, "fn new_fn() {}", NEW_FN, file_path="src/lib.rs", language="rust")

        entity = store.get(key)
        assert entity is not None
        assert entity.state is TemporalState.CREATE
        assert entity.current_present is False
        assert entity.current_code is None
        assert entity.line_range is None
        assert entity.entity_kind == "function"
        assert store.count(EntityFilter.CURRENT_ONLY) == 0

    def test_given_same_proposal_when_recreated_then_future_code_replaced(
        self, manager: TemporalStateManager, store: CodeGraphStore
    ) -> None:
        key = _new_key()
        manager.create(key, "fn new_fn() {}", NEW_FN, file_path="src/lib.rs")

        manager.create(key, "fn new_fn() { 42 }", NEW_FN, file_path="src/lib.rs")

        entity = store.get(key)
        assert entity is not None and entity.future_code == "fn new_fn() { 42 }"

    def test_given_different_proposal_on_same_identity_when_created_then_collision(
        self, manager: TemporalStateManager
    ) -> None:
        key = _new_key()
        manager.create(key, "fn new_fn() {}", NEW_FN, file_path="src/lib.rs")
        other = InterfaceSignature(name="other_fn", kind="function")

        with pytest.raises(IllegalTransitionError) as exc_info:
            manager.create(key, "fn other_fn() {}", other, file_path="src/lib.rs")

        assert "collides" in exc_info.value.details["reason"]

    def test_given_on_disk_identity_when_created_then_illegal(
        self, manager: TemporalStateManager, on_disk: str
    ) -> None:
        with pytest.raises(IllegalTransitionError) as exc_info:
            manager.create(on_disk, "fn add() {}", InterfaceSignature("add", "function"))

        assert exc_info.value.details["current_state"] == "UNCHANGED"

    def test_given_empty_code_when_created_then_rejected_and_absent(
        self, manager: TemporalStateManager, store: CodeGraphStore
    ) -> None:
        key = _new_key()

        with pytest.raises(InvalidTemporalStateError):
            manager.create(key, "", NEW_FN)

        assert store.get(key) is None


class TestRandomIntentSequences:
    """Any sequence of intents keeps every row in one of the four legal states."""

    @pytest.mark.parametrize("seed", range(5))
    def test_given_random_intents_when_applied_then_invariants_hold(
        self, manager: TemporalStateManager, store: CodeGraphStore, entity_factory, seed: int
    ) -> None:
        # Given
        rng = random.Random(seed)
        identities = []
        for i in range(4):
            entity = entity_factory(f"f{i}", start=i * 10 + 1, end=i * 10 + 5)
            store.upsert(entity)
            identities.append(entity.identity)
        created = [
            new_entity_key("src/lib.rs", f"n{i}", "function", datetime(2024, 1, 1, tzinfo=UTC))
            for i in range(2)
        ]
        pool = identities + created

        # When / Then: every step leaves only legal rows behind
        for step in range(60):
            identity = rng.choice(pool)
            op = rng.choice(["create", "edit", "delete", "clear"])
            try:
                if op == "create":
                    name = identity.split("-")[-3] if identity in created else "f"
                    manager.create(
                        identity,
                        f"fn {name}() {{ {step} }}",
                        InterfaceSignature(name=name, kind="function"),
                        file_path="src/lib.rs",
                    )
                elif op == "edit":
                    manager.edit(identity, f"fn x() {{ {step} }}")
                elif op == "delete":
                    manager.delete(identity)
                else:
                    manager.clear(identity)
            except (IllegalTransitionError, UnknownIdentityError):
                pass
            _assert_store_legal(store, created, expected_on_disk=len(identities))


def _assert_store_legal(
    store: CodeGraphStore, created: list[str], *, expected_on_disk: int
) -> None:
    for entity in store.scan():
        entity.validate()
        current, future, action = entity.state.flags
        assert TemporalState.from_flags(current, future, action) is entity.state
        if entity.identity in created:
            assert entity.state is TemporalState.CREATE
        else:
            assert entity.current_code is not None
            assert entity.line_range is not None
    assert store.count(EntityFilter.CURRENT_ONLY) == expected_on_disk
