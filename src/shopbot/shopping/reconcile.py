"""Periodic sweep that reconciles stored items with the messages that render them."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Dict, List, Optional, Protocol

from shopbot import metrics
from shopbot.errors import RenderFailureError, StoreError
from shopbot.models.render import MessageRender
from shopbot.models.shopping import ItemStatus, ShoppingListItem
from shopbot.shopping.rendering import closed_message, describe_item, shows_active_buttons
from shopbot.shopping.store import ItemStore

logger = logging.getLogger(__name__)

CLOSED_DELETED_MESSAGE = "closed_deleted_message"
RERENDERED_CLOSED_ITEM = "rerendered_closed_item"


class ChannelMessages(Protocol):
    async def fetch_message(self, channel_id: int, message_id: int) -> MessageRender: ...

    async def edit_message(
        self, channel_id: int, message_id: int, message: MessageRender
    ) -> MessageRender: ...


class Reconciler:
    """Repair divergence left behind by partial failures.

    * an active record whose message was deleted is closed as removed;
    * a closed record whose message still offers Bought/Remove gets its closed
      render re-applied (the edit after the store update failed).
    """

    def __init__(self, store: ItemStore, messages: ChannelMessages, *, batch_size: int = 50) -> None:
        self._store = store
        self._messages = messages
        self._batch_size = batch_size

    async def reconcile_item(self, item: ShoppingListItem) -> Optional[str]:
        """Check one record against its message and return the repair applied, if any."""

        try:
            render = await self._messages.fetch_message(item.channel_id, item.message_id)
        except RenderFailureError as exc:
            if not exc.not_found:
                raise
            if item.bought:
                return None
            changed = await asyncio.to_thread(
                self._store.set_bought,
                item.user_id,
                item.message_id,
                True,
                reason=ItemStatus.REMOVED,
            )
            return CLOSED_DELETED_MESSAGE if changed else None

        if item.bought and shows_active_buttons(render):
            description = render.description or describe_item(item.fields())
            await self._messages.edit_message(
                item.channel_id,
                item.message_id,
                closed_message(description, item.status),
            )
            return RERENDERED_CLOSED_ITEM
        return None

    async def _candidates(self) -> List[ShoppingListItem]:
        open_items = await asyncio.to_thread(self._store.list_open_items, self._batch_size)
        recent = await asyncio.to_thread(self._store.recent_items_global, self._batch_size)
        seen: Dict[int, ShoppingListItem] = {}
        for item in [*open_items, *recent]:
            seen.setdefault(item.message_id, item)
        return list(seen.values())

    async def sweep(self) -> Dict[str, int]:
        """Run one pass and return repair counts keyed by repair name."""

        repairs: Counter[str] = Counter()
        try:
            items = await self._candidates()
        except StoreError as exc:
            logger.error("Reconciliation skipped: %s", exc)
            return {}

        for item in items:
            try:
                repair = await self.reconcile_item(item)
            except (RenderFailureError, StoreError) as exc:
                logger.warning("Unable to reconcile message %s: %s", item.message_id, exc)
                repairs["failed"] += 1
                continue
            if repair is None:
                continue
            logger.info("Reconciled message %s: %s", item.message_id, repair)
            metrics.RECONCILE_REPAIRS.labels(repair=repair).inc()
            repairs[repair] += 1

        logger.info("Reconciliation inspected %s item(s): %s", len(items), dict(repairs))
        return dict(repairs)


__all__ = [
    "CLOSED_DELETED_MESSAGE",
    "RERENDERED_CLOSED_ITEM",
    "ChannelMessages",
    "Reconciler",
]
