"""Capability set shared by every interaction origin (slash command or button click)."""

from __future__ import annotations

from typing import Optional, Protocol

from shopbot.models.render import AckKind, MessageRender, RenderedMessage


class Interactable(Protocol):
    """What the lifecycle and the response adapter may do with an inbound interaction.

    An interaction gets exactly one initial response: either ``acknowledge`` (the
    provisional loading state) or ``respond`` (a final message). A second initial
    response raises ``RenderFailureError``. Everything after that goes through
    ``edit_original`` or ``create_followup``.
    """

    user_id: int
    channel_id: int
    guild_id: Optional[int]

    @property
    def acknowledged(self) -> bool: ...

    async def acknowledge(self, kind: AckKind) -> None: ...

    async def respond(self, message: MessageRender) -> None: ...

    async def edit_original(self, message: MessageRender) -> RenderedMessage: ...

    async def create_followup(self, message: MessageRender) -> RenderedMessage: ...

    async def get_current_render(self) -> Optional[MessageRender]: ...


__all__ = ["Interactable"]
