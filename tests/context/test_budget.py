"""Tests for the token budget accumulator."""

from codegraft.context.budget import TokenBudget, compact_json, estimate_tokens


class TestEstimateTokens:
    def test_given_record_when_estimated_then_ceiling_of_quarter_length(self) -> None:
        record = {"a": "xyz"}  # {"a":"xyz"} is 11 chars

        assert len(compact_json(record)) == 11
        assert estimate_tokens(record) == 3

    def test_given_same_record_in_any_key_order_when_estimated_then_equal(self) -> None:
        assert estimate_tokens({"a": 1, "b": 2}) == estimate_tokens({"b": 2, "a": 1})


class TestTokenBudget:
    def test_given_items_when_added_then_total_never_exceeds_limit(self) -> None:
        budget = TokenBudget(10)

        accepted = [budget.try_add({"k": "v" * 10}) for _ in range(5)]

        assert budget.used_tokens <= 10
        assert accepted[: budget.count] == [True] * budget.count
        assert budget.exhausted

    def test_given_exhausted_budget_when_small_item_added_then_refused(self) -> None:
        budget = TokenBudget(5)
        assert budget.try_add({"k": "v"})  # 3 tokens
        assert not budget.try_add({"k": "v" * 40})

        assert not budget.try_add({})

        assert budget.count == 1
        assert budget.remaining_tokens == 2

    def test_given_oversized_first_item_when_added_then_empty(self) -> None:
        budget = TokenBudget(1)

        assert not budget.try_add({"big": "x" * 100})
        assert budget.items == []
