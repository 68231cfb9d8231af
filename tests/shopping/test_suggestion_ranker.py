"""Tests for autocomplete ranking."""

from __future__ import annotations

import asyncio
import random

from shopbot.db.shopping_list import insert_item
from shopbot.models.events import AutocompleteEvent, SuggestionField
from shopbot.models.shopping import NewShoppingListItem
from shopbot.shopping.store import DatabaseItemStore
from shopbot.shopping.suggestions import (
    SEED_ITEMS,
    SEED_STORE_NAMES,
    SuggestionRanker,
    build_candidates,
    rank_candidates,
)


def test_prefix_matches_rank_before_other_candidates():
    ranked = rank_candidates(["milk 2L", "chocolate", "cheese 1kg"], "ch")
    assert ranked == ["cheese 1kg", "chocolate", "milk 2L"]


def test_substring_matches_rank_between_prefix_and_rest():
    ranked = rank_candidates(["apple", "peach", "cherry", "banana"], "ch")
    assert ranked == ["cherry", "peach", "apple", "banana"]


def test_ranking_is_deterministic_for_any_input_order():
    values = [f"item {n}" for n in range(40)] + ["cheese", "chives", "rich tea"]
    expected = rank_candidates(values, "ch")
    shuffled = values[:]
    random.Random(7).shuffle(shuffled)
    assert rank_candidates(shuffled, "ch") == expected


def test_result_is_capped_at_platform_maximum():
    values = [f"chip {n:03d}" for n in range(100)]
    assert len(rank_candidates(values, "")) == 25
    assert len(rank_candidates(values, "", limit=100)) == 25
    assert rank_candidates(values, "", limit=3) == ["chip 000", "chip 001", "chip 002"]


def test_build_candidates_merges_history_and_seed():
    store = DatabaseItemStore()
    insert_item(
        NewShoppingListItem(item="oat milk", personal=False, store="Moore Wilson's"),
        user_id=1,
        message_id=1,
        channel_id=1,
        guild_id=None,
    )
    insert_item(
        NewShoppingListItem(item="oat milk", personal=False),
        user_id=2,
        message_id=2,
        channel_id=1,
        guild_id=None,
    )

    items = build_candidates(
        SuggestionField.ITEM, store.recent_items_for_user(1, 10), store.recent_items_global(10)
    )
    stores = build_candidates(
        SuggestionField.STORE, store.recent_items_for_user(1, 10), store.recent_items_global(10)
    )

    assert "oat milk" in items
    assert set(SEED_ITEMS) <= items
    assert "Moore Wilson's" in stores
    assert set(SEED_STORE_NAMES) <= stores
    assert None not in stores


def test_new_user_gets_seed_suggestions():
    ranker = SuggestionRanker(DatabaseItemStore())
    values = ranker.suggest_values(SuggestionField.STORE, 42, "Co")
    assert values[0] == "Countdown"


def test_suggest_returns_choices_for_event():
    ranker = SuggestionRanker(DatabaseItemStore(), history_limit=5)
    event = AutocompleteEvent(acting_user_id=1, channel_id=2, field=SuggestionField.ITEM, prefix="ch")

    choices = asyncio.run(ranker.suggest(event))

    assert [choice.name for choice in choices[:3]] == ["cheese 1kg", "cherry tomatoes", "chicken breast 500g"]
    assert all(choice.name == choice.value for choice in choices)
    assert len(choices) <= 25
