"""``Interactable`` backed by an HTTP interaction and its webhook token."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from shopbot.discord.client import DiscordClient
from shopbot.discord.payloads import ack_json, message_response_json
from shopbot.errors import RenderFailureError
from shopbot.models.events import ButtonClickEvent, NewItemEvent
from shopbot.models.render import AckKind, MessageRender, RenderedMessage

logger = logging.getLogger(__name__)

# Seconds the deferred phase waits for the endpoint to send the initial response.
DELIVERY_TIMEOUT = 15.0


class WebhookInteraction:
    """One inbound interaction.

    The initial response (ack or message) is not sent by this object: it is handed
    to the HTTP endpoint through ``wait_for_initial_response`` and returned as the
    body of the platform's request. ``acknowledge`` and ``respond`` then suspend
    until ``mark_delivered`` reports that body as sent, because the platform rejects
    edits and follow-ups on an interaction it has not seen answered. Later renders go
    through the webhook client.
    """

    def __init__(
        self,
        *,
        token: str,
        user_id: int,
        channel_id: int,
        guild_id: Optional[int],
        client: DiscordClient,
        current_render: Optional[MessageRender] = None,
    ) -> None:
        self.user_id = user_id
        self.channel_id = channel_id
        self.guild_id = guild_id
        self._token = token
        self._client = client
        self._current_render = current_render
        self._initial: Optional[asyncio.Future[Dict[str, Any]]] = None
        self._responded = False
        self._delivered = asyncio.Event()

    @classmethod
    def for_event(
        cls,
        event: NewItemEvent | ButtonClickEvent,
        *,
        token: str,
        client: DiscordClient,
    ) -> "WebhookInteraction":
        return cls(
            token=token,
            user_id=event.acting_user_id,
            channel_id=event.channel_id,
            guild_id=event.guild_id,
            client=client,
            current_render=event.message if isinstance(event, ButtonClickEvent) else None,
        )

    def _future(self) -> asyncio.Future[Dict[str, Any]]:
        if self._initial is None:
            self._initial = asyncio.get_running_loop().create_future()
        return self._initial

    def _set_initial(self, body: Dict[str, Any]) -> None:
        if self._responded:
            raise RenderFailureError("interaction already has an initial response")
        self._responded = True
        self._future().set_result(body)

    @property
    def acknowledged(self) -> bool:
        return self._responded

    async def _wait_delivered(self) -> None:
        try:
            await asyncio.wait_for(self._delivered.wait(), DELIVERY_TIMEOUT)
        except asyncio.TimeoutError as exc:
            raise RenderFailureError("initial response was never delivered") from exc

    def mark_delivered(self) -> None:
        """Release the deferred phase once the initial response has been sent."""

        self._delivered.set()

    async def acknowledge(self, kind: AckKind) -> None:
        self._set_initial(ack_json(kind))
        await self._wait_delivered()

    async def respond(self, message: MessageRender) -> None:
        self._set_initial(message_response_json(message))
        await self._wait_delivered()

    async def edit_original(self, message: MessageRender) -> RenderedMessage:
        if not self._responded:
            raise RenderFailureError("cannot edit an interaction before acknowledging it")
        return await self._client.edit_original_response(self._token, message)

    async def create_followup(self, message: MessageRender) -> RenderedMessage:
        return await self._client.create_followup(self._token, message)

    async def get_current_render(self) -> Optional[MessageRender]:
        if self._current_render is not None:
            return self._current_render
        if not self._responded:
            return None
        try:
            return (await self._client.get_original_response(self._token)).render
        except RenderFailureError as exc:
            logger.warning("Unable to fetch current render: %s", exc)
            return None

    async def wait_for_initial_response(
        self, task: asyncio.Future[Any]
    ) -> Optional[Dict[str, Any]]:
        """Wait until the handler gives an initial response or finishes without one."""

        initial = self._future()
        await asyncio.wait({initial, task}, return_when=asyncio.FIRST_COMPLETED)
        if initial.done():
            return initial.result()
        return None


__all__ = ["WebhookInteraction"]
