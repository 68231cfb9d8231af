"""Minimal client for the chat platform's REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from shopbot.config import get_settings
from shopbot.discord.payloads import parse_render, render_to_json
from shopbot.errors import RenderFailureError
from shopbot.models.render import MessageRender, RenderedMessage

logger = logging.getLogger(__name__)


def _rendered(payload: Dict[str, Any]) -> RenderedMessage:
    try:
        message_id = int(payload["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise RenderFailureError("platform returned a message without an id") from exc
    return RenderedMessage(id=message_id, render=parse_render(payload))


class DiscordClient:
    """Interaction webhook and channel message calls.

    Webhook calls are authorised by the interaction token in the URL; channel calls
    need the bot token. Any transport or HTTP error becomes ``RenderFailureError``.
    """

    def __init__(
        self,
        *,
        application_id: Optional[str] = None,
        bot_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._application_id = application_id or settings.discord_application_id
        self._bot_token = bot_token or settings.discord_bot_token
        self._base_url = (base_url or settings.discord_api_base_url).rstrip("/")
        self._timeout = timeout or settings.discord_timeout
        self._transport = transport

    def _headers(self, *, bot: bool) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if bot:
            if not self._bot_token:
                raise RenderFailureError("Bot token is not configured.")
            headers["Authorization"] = f"Bot {self._bot_token}"
        return headers

    def _webhook_path(self, token: str, suffix: str = "") -> str:
        if not self._application_id:
            raise RenderFailureError("Application id is not configured.")
        return f"/webhooks/{self._application_id}/{token}{suffix}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        label: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        bot: bool = False,
    ) -> Dict[str, Any]:
        headers = self._headers(bot=bot)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method, path, headers=headers, json=json, params=params
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise RenderFailureError(
                f"{label} rejected with HTTP {status_code}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise RenderFailureError(f"{label} failed: {exc.__class__.__name__}") from exc

        logger.debug("%s succeeded with HTTP %s", label, response.status_code)
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def get_original_response(self, token: str) -> RenderedMessage:
        payload = await self._request(
            "GET",
            self._webhook_path(token, "/messages/@original"),
            label="fetch original response",
        )
        return _rendered(payload)

    async def edit_original_response(self, token: str, message: MessageRender) -> RenderedMessage:
        payload = await self._request(
            "PATCH",
            self._webhook_path(token, "/messages/@original"),
            label="edit original response",
            json=render_to_json(message),
        )
        return _rendered(payload)

    async def create_followup(self, token: str, message: MessageRender) -> RenderedMessage:
        payload = await self._request(
            "POST",
            self._webhook_path(token),
            label="create followup",
            json=render_to_json(message),
            params={"wait": "true"},
        )
        return _rendered(payload)

    async def fetch_message(self, channel_id: int, message_id: int) -> MessageRender:
        payload = await self._request(
            "GET",
            f"/channels/{channel_id}/messages/{message_id}",
            label=f"fetch message {message_id}",
            bot=True,
        )
        return parse_render(payload)

    async def edit_message(
        self, channel_id: int, message_id: int, message: MessageRender
    ) -> MessageRender:
        payload = await self._request(
            "PATCH",
            f"/channels/{channel_id}/messages/{message_id}",
            label=f"edit message {message_id}",
            json=render_to_json(message),
            bot=True,
        )
        return parse_render(payload)


__all__ = ["DiscordClient"]
