"""Inbound interaction events."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from shopbot.models.render import MessageRender
from shopbot.models.shopping import NewShoppingListItem


class SuggestionField(str, Enum):
    """Slash-command option that supports autocomplete."""

    ITEM = "item"
    STORE = "store"


class ButtonAction(str, Enum):
    """Custom ids of the buttons attached to a list entry."""

    BOUGHT = "bought"
    REMOVE = "remove"
    READD = "readd"


class _EventBase(BaseModel):
    interaction_id: Optional[str] = Field(default=None)
    acting_user_id: int
    channel_id: int
    guild_id: Optional[int] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class NewItemEvent(_EventBase):
    """The `/shop` slash command."""

    kind: Literal["new_item"] = "new_item"
    request: NewShoppingListItem


class AutocompleteEvent(_EventBase):
    """A partially typed `/shop` option asking for suggestions."""

    kind: Literal["autocomplete"] = "autocomplete"
    field: SuggestionField
    prefix: str = Field(default="")


class ButtonClickEvent(_EventBase):
    """A click on one of the buttons of a rendered list entry.

    ``action`` is kept as the raw custom id; the lifecycle rejects anything that is
    not a known ``ButtonAction``.
    """

    kind: Literal["button_click"] = "button_click"
    action: str
    message_id: int
    message: Optional[MessageRender] = Field(default=None)


InteractionEvent = Annotated[
    Union[NewItemEvent, AutocompleteEvent, ButtonClickEvent],
    Field(discriminator="kind"),
]


__all__ = [
    "SuggestionField",
    "ButtonAction",
    "NewItemEvent",
    "AutocompleteEvent",
    "ButtonClickEvent",
    "InteractionEvent",
]
