"""Item lifecycle: creation and the button-driven state machine.

States are ``active`` and closed (``bought`` or ``removed``). Every click is decided
from a fresh read of the store; nothing is remembered between interactions.

+---------+---------------+--------------------------------------+-------------------+
| current | action        | effect                               | next              |
+=========+===============+======================================+===================+
| active  | bought        | close as bought, strike-through      | bought            |
| active  | remove        | close as removed                     | removed           |
| active  | readd         | rejected                             | active            |
| closed  | readd         | new message and new active record    | new active record |
| closed  | bought/remove | nothing (late or duplicate click)    | unchanged         |
+---------+---------------+--------------------------------------+-------------------+
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from shopbot import metrics
from shopbot.errors import (
    InvalidTransitionError,
    ItemNotFoundError,
    ItemValidationError,
    StoreError,
)
from shopbot.models.events import ButtonAction, ButtonClickEvent, NewItemEvent
from shopbot.models.render import AckKind, RenderedMessage
from shopbot.models.shopping import ItemStatus, NewShoppingListItem, ShoppingListItem
from shopbot.shopping.interactable import Interactable
from shopbot.shopping.rendering import (
    DATABASE_FAILURE_TEXT,
    active_message,
    closed_message,
    describe_item,
)
from shopbot.shopping.responses import CommandResponse, LogSeverity
from shopbot.shopping.store import ItemStore

logger = logging.getLogger(__name__)

_CLOSING_ACTIONS = {
    ButtonAction.BOUGHT: ItemStatus.BOUGHT,
    ButtonAction.REMOVE: ItemStatus.REMOVED,
}


@dataclass(frozen=True)
class Transition:
    """Next state of a stored item for one button action."""

    action: ButtonAction
    current: ItemStatus
    next_status: ItemStatus
    creates_item: bool = False

    @property
    def closes_item(self) -> bool:
        return not self.current.closed and self.next_status.closed

    @property
    def is_noop(self) -> bool:
        return not self.closes_item and not self.creates_item


def parse_action(action: str) -> ButtonAction:
    try:
        return ButtonAction(action)
    except ValueError as exc:
        raise ItemValidationError(f"Unknown shopping list action: {action!r}") from exc


def plan_transition(current: ItemStatus, action: ButtonAction) -> Transition:
    if action is ButtonAction.READD:
        if not current.closed:
            raise InvalidTransitionError("This item is still on the shopping list.")
        return Transition(action, current, ItemStatus.ACTIVE, creates_item=True)

    if current.closed:
        return Transition(action, current, current)
    return Transition(action, current, _CLOSING_ACTIONS[action])


def ack_kind_for(action: ButtonAction) -> AckKind:
    """Re-add posts a new message; the other actions edit the clicked one."""

    if action is ButtonAction.READD:
        return AckKind.DEFER_MESSAGE
    return AckKind.DEFER_UPDATE


class ShoppingListLifecycle:
    """Drive list entries through creation, closing and re-adding."""

    def __init__(self, store: ItemStore) -> None:
        self._store = store

    async def add_item(self, event: NewItemEvent, interaction: Interactable) -> CommandResponse:
        """Acknowledge, render the entry, then persist it under the rendered message id."""

        await interaction.acknowledge(AckKind.DEFER_MESSAGE)
        rendered = await interaction.edit_original(active_message(event.request))
        return await self._persist(event.request, rendered, interaction)

    async def handle_click(
        self, event: ButtonClickEvent, interaction: Interactable
    ) -> CommandResponse:
        action = parse_action(event.action)
        if action is ButtonAction.READD:
            # The deferred message of a re-add is public; rejections must stay ephemeral.
            item = await self._load(event.message_id)
            transition = plan_transition(item.status, action)
            await interaction.acknowledge(ack_kind_for(action))
        else:
            await interaction.acknowledge(ack_kind_for(action))
            item = await self._load(event.message_id)
            transition = plan_transition(item.status, action)

        if transition.creates_item:
            return await self._readd(item, interaction)
        if transition.is_noop:
            logger.info(
                "Ignoring %s on message %s: item already %s",
                action.value,
                event.message_id,
                item.status.value,
            )
            return CommandResponse.no_response()
        return await self._close(item, transition, event, interaction)

    async def _load(self, message_id: int) -> ShoppingListItem:
        item = await asyncio.to_thread(self._store.get_by_message_id, message_id)
        if item is None:
            raise ItemNotFoundError(message_id)
        return item

    async def _close(
        self,
        item: ShoppingListItem,
        transition: Transition,
        event: ButtonClickEvent,
        interaction: Interactable,
    ) -> CommandResponse:
        changed = await asyncio.to_thread(
            self._store.set_bought,
            event.acting_user_id,
            item.message_id,
            True,
            reason=transition.next_status,
        )
        if not changed:
            # A concurrent click closed it between our read and our write.
            logger.info("Message %s was closed by a concurrent interaction", item.message_id)
            return CommandResponse.no_response()

        current = await interaction.get_current_render()
        description = _description_of(current) or describe_item(item.fields())
        await interaction.edit_original(closed_message(description, transition.next_status))
        return CommandResponse.no_response()

    async def _readd(self, item: ShoppingListItem, interaction: Interactable) -> CommandResponse:
        fields = item.fields()
        rendered = await interaction.edit_original(active_message(fields))
        logger.info("Re-adding message %s as message %s", item.message_id, rendered.id)
        return await self._persist(fields, rendered, interaction)

    async def _persist(
        self,
        fields: NewShoppingListItem,
        rendered: RenderedMessage,
        interaction: Interactable,
    ) -> CommandResponse:
        try:
            await asyncio.to_thread(
                self._store.insert,
                fields,
                user_id=interaction.user_id,
                message_id=rendered.id,
                channel_id=interaction.channel_id,
                guild_id=interaction.guild_id,
            )
        except StoreError as exc:
            # The message stays visible without a record; retrying could duplicate it.
            metrics.STORE_ERRORS.labels(error=type(exc).__name__).inc()
            metrics.ORPHANED_MESSAGES.inc()
            return CommandResponse.complex_failure(
                DATABASE_FAILURE_TEXT,
                LogSeverity.ERROR,
                f"orphaned_message message_id={rendered.id} channel_id={interaction.channel_id}: "
                f"error adding shopping list item: {exc}",
            )
        return CommandResponse.no_response()


def _description_of(render) -> Optional[str]:
    if render is None:
        return None
    return render.description


__all__ = [
    "Transition",
    "parse_action",
    "plan_transition",
    "ack_kind_for",
    "ShoppingListLifecycle",
]
