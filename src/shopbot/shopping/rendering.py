"""Message renders for list entries."""

from __future__ import annotations

from typing import Optional

from shopbot.models.events import ButtonAction
from shopbot.models.render import Button, ButtonStyle, Embed, EmbedColor, MessageRender
from shopbot.models.shopping import ItemStatus, NewShoppingListItem

DATABASE_FAILURE_TEXT = "error communicating with database"
INTERNAL_FAILURE_TEXT = "An internal error occurred."


def describe_item(fields: NewShoppingListItem) -> str:
    description = f"Added x{fields.quantity} {fields.item} to the shopping list"
    if fields.store:
        description += f" from {fields.store}"
    if fields.personal:
        description += " (personal)"
    if fields.notes:
        description += f"\n**note:** {fields.notes}"
    return description


def _readd_button(*, disabled: bool) -> Button:
    return Button(
        custom_id=ButtonAction.READD.value,
        label="Re-add",
        style=ButtonStyle.SECONDARY,
        disabled=disabled,
    )


def active_message(fields: NewShoppingListItem) -> MessageRender:
    """Render of a freshly added entry: red embed, Bought/Remove and a disabled Re-add."""

    return MessageRender(
        embeds=[Embed(description=describe_item(fields), color=EmbedColor.RED)],
        components=[
            [
                Button(
                    custom_id=ButtonAction.BOUGHT.value,
                    label="Bought",
                    style=ButtonStyle.SUCCESS,
                ),
                Button(
                    custom_id=ButtonAction.REMOVE.value,
                    label="Remove",
                    style=ButtonStyle.DANGER,
                ),
                _readd_button(disabled=True),
            ]
        ],
    )


def closed_message(description: str, status: ItemStatus) -> MessageRender:
    """Render of a closed entry, built from the description the message already shows."""

    if status is ItemStatus.BOUGHT:
        embed = Embed(description=f"(BOUGHT) ~~{description}~~", color=EmbedColor.GREEN)
    elif status is ItemStatus.REMOVED:
        embed = Embed(description=f"(REMOVED) {description}", color=EmbedColor.ORANGE)
    else:
        raise ValueError(f"{status.value} is not a closed status")
    return MessageRender(embeds=[embed], components=[[_readd_button(disabled=False)]])


def shows_active_buttons(render: Optional[MessageRender]) -> bool:
    """True when the render still offers the Bought or Remove action."""

    if render is None:
        return False
    active_ids = {ButtonAction.BOUGHT.value, ButtonAction.REMOVE.value}
    return any(button.custom_id in active_ids and not button.disabled for button in render.buttons())


def notice(text: str) -> MessageRender:
    """Plain ephemeral message shown only to the acting user."""

    return MessageRender(content=text, ephemeral=True)


__all__ = [
    "DATABASE_FAILURE_TEXT",
    "INTERNAL_FAILURE_TEXT",
    "describe_item",
    "active_message",
    "closed_message",
    "shows_active_buttons",
    "notice",
]
