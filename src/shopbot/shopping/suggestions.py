"""Autocomplete suggestions for the item and store options of `/shop`."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Iterable, List, Sequence, Set

from shopbot import metrics
from shopbot.models.events import AutocompleteEvent, SuggestionField
from shopbot.models.render import MAX_AUTOCOMPLETE_CHOICES, AutocompleteChoice
from shopbot.models.shopping import ShoppingListItem
from shopbot.shopping.store import ItemStore

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50

SEED_STORE_NAMES: tuple[str, ...] = (
    "Pack'n'Save",
    "Countdown",
    "Bunnings",
    "Mitre 10",
    "The Warehouse",
    "Kmart",
    "Farmers",
)

SEED_ITEMS: tuple[str, ...] = (
    "milk 2L",
    "loaf of bread",
    "12 eggs",
    "cheese 1kg",
    "butter",
    "chocolate",
    "coffee",
    "tea",
    "sugar",
    "flour",
    "oil",
    "x2 can of tomatoes",
    "fresh tomatoes",
    "cherry tomatoes",
    "brown onions",
    "red onions",
    "potatoes",
    "carrots",
    "general fruit and vege",
    "chicken breast 500g",
    "beef mince 500g",
    "pork mince 500g",
    "white fish",
    "hoki crumbed fish",
    "orange juice (pulp)",
    "orange juice (no pulp)",
    "toilet paper",
    "paper towels",
    "dishwashing liquid",
    "dishwasher powder",
    "washing powder",
    "napisan powder",
    "bleach",
    "toothpaste",
    "toothbrush",
    "shampoo",
    "conditioner",
    "soap",
    "deodorant",
    "razors",
    "shaving cream",
    "hair gel",
    "band-aids",
    "painkillers",
    "antibiotics",
    "vitamins",
    "protein powder",
    "banana",
    "apple",
    "orange",
    "kiwi fruit",
    "lemon",
    "lime",
    "avocado",
    "cucumber",
    "lettuce",
    "capsicum",
    "zucchini",
    "broccoli",
    "cauliflower",
    "asparagus",
    "corn",
    "mushrooms",
    "spinach",
    "tomato",
)


def seed_values(field: SuggestionField) -> Sequence[str]:
    if field is SuggestionField.ITEM:
        return SEED_ITEMS
    return SEED_STORE_NAMES


def build_candidates(
    field: SuggestionField,
    user_items: Iterable[ShoppingListItem],
    global_items: Iterable[ShoppingListItem],
) -> Set[str]:
    """Union of the field values from history and the static seed list (exact-string dedup)."""

    candidates: Set[str] = set()
    for record in [*user_items, *global_items]:
        value = record.item if field is SuggestionField.ITEM else record.store
        if value:
            candidates.add(value)
    candidates.update(seed_values(field))
    return candidates


def ranking_key(candidate: str, prefix: str) -> tuple[bool, bool, str]:
    """Prefix matches first, then substring matches, then lexicographic order."""

    return (not candidate.startswith(prefix), prefix not in candidate, candidate)


def rank_candidates(
    candidates: Iterable[str],
    prefix: str,
    limit: int = MAX_AUTOCOMPLETE_CHOICES,
) -> List[str]:
    limit = min(limit, MAX_AUTOCOMPLETE_CHOICES)
    ranked = sorted(set(candidates), key=lambda candidate: ranking_key(candidate, prefix))
    return ranked[:limit]


class SuggestionRanker:
    """Build ranked autocomplete choices from store history plus seed data."""

    def __init__(self, store: ItemStore, *, history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._store = store
        self._history_limit = history_limit

    def suggest_values(self, field: SuggestionField, user_id: int, prefix: str) -> List[str]:
        user_items = self._store.recent_items_for_user(user_id, self._history_limit)
        global_items = self._store.recent_items_global(self._history_limit)
        candidates = build_candidates(field, user_items, global_items)
        return rank_candidates(candidates, prefix)

    async def suggest(self, event: AutocompleteEvent) -> List[AutocompleteChoice]:
        start = perf_counter()
        values = await asyncio.to_thread(
            self.suggest_values, event.field, event.acting_user_id, event.prefix
        )
        metrics.SUGGESTION_LATENCY.labels(field=event.field.value).observe(perf_counter() - start)
        logger.debug(
            "Ranked %s %s suggestion(s) for prefix %r",
            len(values),
            event.field.value,
            event.prefix,
        )
        return [AutocompleteChoice(name=value, value=value) for value in values]


__all__ = [
    "SEED_ITEMS",
    "SEED_STORE_NAMES",
    "seed_values",
    "build_candidates",
    "ranking_key",
    "rank_candidates",
    "SuggestionRanker",
]
