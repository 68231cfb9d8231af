"""Tests for the reconciliation sweep."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Tuple

from shopbot.db.shopping_list import get_item_by_message_id, insert_item, set_bought
from shopbot.errors import RenderFailureError
from shopbot.models.render import MessageRender
from shopbot.models.shopping import ItemStatus, NewShoppingListItem
from shopbot.shopping.reconcile import CLOSED_DELETED_MESSAGE, RERENDERED_CLOSED_ITEM, Reconciler
from shopbot.shopping.rendering import active_message, closed_message
from shopbot.shopping.store import DatabaseItemStore


class FakeMessages:
    def __init__(self, messages: Dict[int, MessageRender], *, failing: Tuple[int, ...] = ()):
        self.messages = messages
        self.failing = failing
        self.edits: List[Tuple[int, MessageRender]] = []

    async def fetch_message(self, channel_id: int, message_id: int) -> MessageRender:
        if message_id in self.failing:
            raise RenderFailureError("fetch rejected with HTTP 500", status_code=500)
        if message_id not in self.messages:
            raise RenderFailureError("fetch rejected with HTTP 404", status_code=404)
        return self.messages[message_id]

    async def edit_message(self, channel_id: int, message_id: int, message: MessageRender) -> MessageRender:
        self.edits.append((message_id, message))
        self.messages[message_id] = message
        return message


def _add(message_id: int, item: str) -> NewShoppingListItem:
    fields = NewShoppingListItem(item=item, personal=False)
    insert_item(fields, user_id=1, message_id=message_id, channel_id=9, guild_id=None)
    return fields


def test_sweep_closes_items_whose_message_was_deleted():
    _add(1, "bread")
    messages = FakeMessages({})

    repairs = asyncio.run(Reconciler(DatabaseItemStore(), messages).sweep())

    assert repairs == {CLOSED_DELETED_MESSAGE: 1}
    assert get_item_by_message_id(1).status is ItemStatus.REMOVED
    assert messages.edits == []


def test_sweep_rerenders_closed_item_still_showing_buttons():
    fields = _add(2, "eggs")
    set_bought(1, 2, True)
    messages = FakeMessages({2: active_message(fields)})

    repairs = asyncio.run(Reconciler(DatabaseItemStore(), messages).sweep())

    assert repairs == {RERENDERED_CLOSED_ITEM: 1}
    (message_id, render), = messages.edits
    assert message_id == 2
    assert render.description == "(BOUGHT) ~~Added x1 eggs to the shopping list~~"


def test_sweep_leaves_consistent_items_alone():
    fields = _add(3, "tea")
    _add(4, "coffee")
    set_bought(1, 3, True, reason=ItemStatus.REMOVED)
    messages = FakeMessages(
        {
            3: closed_message("Added x1 tea to the shopping list", ItemStatus.REMOVED),
            4: active_message(fields),
        }
    )

    repairs = asyncio.run(Reconciler(DatabaseItemStore(), messages).sweep())

    assert repairs == {}
    assert get_item_by_message_id(4).status is ItemStatus.ACTIVE


def test_sweep_counts_failures_and_continues():
    _add(5, "flour")
    _add(6, "sugar")
    messages = FakeMessages({}, failing=(5,))

    repairs = asyncio.run(Reconciler(DatabaseItemStore(), messages).sweep())

    assert repairs == {"failed": 1, CLOSED_DELETED_MESSAGE: 1}
    assert get_item_by_message_id(5).status is ItemStatus.ACTIVE
    assert get_item_by_message_id(6).status is ItemStatus.REMOVED
