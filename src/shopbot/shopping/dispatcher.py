"""Classify inbound events, run them, and deliver the resulting response."""

from __future__ import annotations

import logging
from typing import List

from shopbot import metrics
from shopbot.errors import RenderFailureError
from shopbot.models.events import (
    AutocompleteEvent,
    ButtonClickEvent,
    InteractionEvent,
    NewItemEvent,
)
from shopbot.models.render import AutocompleteChoice
from shopbot.shopping.interactable import Interactable
from shopbot.shopping.lifecycle import ShoppingListLifecycle
from shopbot.shopping.responses import CommandResponse, response_for_error
from shopbot.shopping.suggestions import SuggestionRanker

logger = logging.getLogger(__name__)


class InteractionDispatcher:
    """Single entry point from the platform adapter into the shopping list."""

    def __init__(self, lifecycle: ShoppingListLifecycle, ranker: SuggestionRanker) -> None:
        self._lifecycle = lifecycle
        self._ranker = ranker

    async def dispatch(self, event: InteractionEvent, interaction: Interactable) -> CommandResponse:
        """Run a new-item or button-click event to completion.

        Never raises: failures become responses, logged once and shown to the user
        through ``deliver``.
        """

        context = f"{event.kind} interaction {event.interaction_id or '-'}"
        try:
            if isinstance(event, NewItemEvent):
                response = await self._lifecycle.add_item(event, interaction)
            elif isinstance(event, ButtonClickEvent):
                response = await self._lifecycle.handle_click(event, interaction)
            else:
                response = CommandResponse.internal_failure(
                    f"{context}: event kind cannot be dispatched to the lifecycle"
                )
        except Exception as exc:  # noqa: BLE001 - every failure becomes a response
            response = response_for_error(exc, context=context)

        metrics.INTERACTIONS.labels(kind=event.kind, outcome=response.kind.value).inc()
        await self.deliver(response, interaction, interaction_id=event.interaction_id)
        return response

    async def autocomplete(self, event: AutocompleteEvent) -> List[AutocompleteChoice]:
        """Return ranked choices; on failure log once and return no choices."""

        try:
            choices = await self._ranker.suggest(event)
        except Exception as exc:
            response = response_for_error(exc, context=f"autocomplete of {event.field.value}")
            response.write_to_log(logger, interaction_id=event.interaction_id)
            metrics.INTERACTIONS.labels(kind=event.kind, outcome=response.kind.value).inc()
            return []
        metrics.INTERACTIONS.labels(kind=event.kind, outcome="suggestions").inc()
        return choices

    async def deliver(
        self,
        response: CommandResponse,
        interaction: Interactable,
        *,
        interaction_id: str | None = None,
    ) -> None:
        response.write_to_log(logger, interaction_id=interaction_id)
        message = response.user_message()
        if message is None:
            return
        try:
            if interaction.acknowledged:
                await interaction.create_followup(message)
            else:
                await interaction.respond(message)
        except RenderFailureError as exc:
            logger.error("Unable to deliver %s response: %s", response.kind.value, exc)


__all__ = ["InteractionDispatcher"]
