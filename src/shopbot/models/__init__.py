"""Pydantic models defining shared data contracts."""

from shopbot.models.events import (
    AutocompleteEvent,
    ButtonAction,
    ButtonClickEvent,
    InteractionEvent,
    NewItemEvent,
    SuggestionField,
)
from shopbot.models.render import (
    AckKind,
    AutocompleteChoice,
    Button,
    ButtonStyle,
    Embed,
    EmbedColor,
    MessageRender,
    RenderedMessage,
)
from shopbot.models.shopping import ItemStatus, NewShoppingListItem, ShoppingListItem

__all__ = [
    "AutocompleteEvent",
    "ButtonAction",
    "ButtonClickEvent",
    "InteractionEvent",
    "NewItemEvent",
    "SuggestionField",
    "AckKind",
    "AutocompleteChoice",
    "Button",
    "ButtonStyle",
    "Embed",
    "EmbedColor",
    "MessageRender",
    "RenderedMessage",
    "ItemStatus",
    "NewShoppingListItem",
    "ShoppingListItem",
]
