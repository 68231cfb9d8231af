"""Outbound render payloads understood by the chat platform adapter."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_AUTOCOMPLETE_CHOICES = 25


class EmbedColor(IntEnum):
    RED = 0xE74C3C
    GREEN = 0x2ECC71
    ORANGE = 0xE67E22


class ButtonStyle(IntEnum):
    PRIMARY = 1
    SECONDARY = 2
    SUCCESS = 3
    DANGER = 4


class AckKind(str, Enum):
    """Provisional acknowledgement shapes.

    ``DEFER_MESSAGE`` shows a loading message that the first render replaces;
    ``DEFER_UPDATE`` keeps the clicked message as-is until it is edited.
    """

    DEFER_MESSAGE = "defer_message"
    DEFER_UPDATE = "defer_update"


class Embed(BaseModel):
    description: str
    color: Optional[int] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class Button(BaseModel):
    custom_id: str
    label: str
    style: ButtonStyle = Field(default=ButtonStyle.SECONDARY)
    disabled: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class MessageRender(BaseModel):
    """Content of a message: text, embeds and rows of buttons."""

    content: Optional[str] = Field(default=None)
    embeds: List[Embed] = Field(default_factory=list)
    components: List[List[Button]] = Field(default_factory=list)
    ephemeral: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @property
    def description(self) -> Optional[str]:
        """Description of the first embed, when the message has one."""

        if not self.embeds:
            return None
        return self.embeds[0].description

    def buttons(self) -> List[Button]:
        return [button for row in self.components for button in row]


class RenderedMessage(BaseModel):
    """A message as stored by the platform, including its assigned id."""

    id: int
    render: MessageRender

    model_config = ConfigDict(frozen=True)


class AutocompleteChoice(BaseModel):
    name: str
    value: str

    model_config = ConfigDict(frozen=True)


__all__ = [
    "MAX_AUTOCOMPLETE_CHOICES",
    "EmbedColor",
    "ButtonStyle",
    "AckKind",
    "Embed",
    "Button",
    "MessageRender",
    "RenderedMessage",
    "AutocompleteChoice",
]
