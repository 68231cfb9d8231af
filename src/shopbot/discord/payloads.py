"""Translation between platform interaction JSON and shopbot events/renders."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from shopbot.errors import ItemValidationError
from shopbot.models.events import (
    AutocompleteEvent,
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
    MessageRender,
)
from shopbot.models.shopping import NewShoppingListItem

SHOP_COMMAND = "shop"

# Interaction types
PING = 1
APPLICATION_COMMAND = 2
MESSAGE_COMPONENT = 3
APPLICATION_COMMAND_AUTOCOMPLETE = 4

# Interaction callback types
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
DEFERRED_UPDATE_MESSAGE = 6
APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8

# Component types
ACTION_ROW = 1
BUTTON = 2

EPHEMERAL_FLAG = 1 << 6

_SHOP_OPTIONS = {"item": str, "personal": bool, "quantity": int, "store": str, "notes": str}


def is_ping(payload: Dict[str, Any]) -> bool:
    return payload.get("type") == PING


def _snowflake(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ItemValidationError(f"Interaction is missing a valid {name}") from exc


def _optional_snowflake(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    return _snowflake(value, "guild id")


def _acting_user_id(payload: Dict[str, Any]) -> int:
    user = (payload.get("member") or {}).get("user") or payload.get("user") or {}
    return _snowflake(user.get("id"), "user id")


def _channel_id(payload: Dict[str, Any]) -> int:
    channel_id = payload.get("channel_id") or (payload.get("channel") or {}).get("id")
    return _snowflake(channel_id, "channel id")


def _common(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "interaction_id": payload.get("id"),
        "acting_user_id": _acting_user_id(payload),
        "channel_id": _channel_id(payload),
        "guild_id": _optional_snowflake(payload.get("guild_id")),
    }


def _command_options(data: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for option in data.get("options") or []:
        name = option.get("name")
        value = option.get("value")
        expected = _SHOP_OPTIONS.get(name)
        if expected is None or not isinstance(value, expected) or (
            expected is int and isinstance(value, bool)
        ):
            raise ItemValidationError(f"Unexpected option `{name}` with value `{value!r}`")
        values[name] = value
    return values


def _new_item_request(data: Dict[str, Any]) -> NewShoppingListItem:
    options = _command_options(data)
    if "item" not in options or "personal" not in options:
        raise ItemValidationError("item and personal are required")
    try:
        return NewShoppingListItem(**options)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ItemValidationError(f"Invalid shopping list item ({problems})") from exc


def _focused_option(data: Dict[str, Any]) -> Dict[str, Any]:
    for option in data.get("options") or []:
        if option.get("focused"):
            return option
    raise ItemValidationError("Autocomplete request has no focused option")


def _button_style(value: Any) -> ButtonStyle:
    try:
        return ButtonStyle(value)
    except ValueError:
        return ButtonStyle.SECONDARY


def _embed_json(embed: Embed) -> Dict[str, Any]:
    body: Dict[str, Any] = {"description": embed.description}
    if embed.color is not None:
        body["color"] = int(embed.color)
    return body


def parse_render(message: Dict[str, Any]) -> MessageRender:
    """Read the content, embeds and buttons of a platform message."""

    embeds = [
        Embed(description=embed.get("description") or "", color=embed.get("color"))
        for embed in message.get("embeds") or []
    ]
    rows: List[List[Button]] = []
    for row in message.get("components") or []:
        buttons = [
            Button(
                custom_id=component["custom_id"],
                label=component.get("label") or "",
                style=_button_style(component.get("style")),
                disabled=bool(component.get("disabled", False)),
            )
            for component in row.get("components") or []
            if component.get("type") == BUTTON and component.get("custom_id")
        ]
        if buttons:
            rows.append(buttons)
    return MessageRender(
        content=message.get("content") or None,
        embeds=embeds,
        components=rows,
        ephemeral=bool((message.get("flags") or 0) & EPHEMERAL_FLAG),
    )


def parse_interaction(payload: Dict[str, Any]) -> InteractionEvent:
    """Classify an interaction payload; malformed payloads fail fast."""

    kind = payload.get("type")
    data = payload.get("data") or {}

    if kind in (APPLICATION_COMMAND, APPLICATION_COMMAND_AUTOCOMPLETE):
        if data.get("name") != SHOP_COMMAND:
            raise ItemValidationError(f"Unknown command `{data.get('name')}`")

    if kind == APPLICATION_COMMAND:
        return NewItemEvent(request=_new_item_request(data), **_common(payload))

    if kind == APPLICATION_COMMAND_AUTOCOMPLETE:
        focused = _focused_option(data)
        try:
            field = SuggestionField(focused.get("name"))
        except ValueError as exc:
            raise ItemValidationError("Invalid autocomplete option") from exc
        return AutocompleteEvent(
            field=field,
            prefix=str(focused.get("value") or ""),
            **_common(payload),
        )

    if kind == MESSAGE_COMPONENT:
        message = payload.get("message") or {}
        custom_id = data.get("custom_id")
        if not custom_id:
            raise ItemValidationError("Component interaction has no custom id")
        return ButtonClickEvent(
            action=custom_id,
            message_id=_snowflake(message.get("id"), "message id"),
            message=parse_render(message) if message else None,
            **_common(payload),
        )

    raise ItemValidationError(f"Unsupported interaction type {kind!r}")


def render_to_json(message: MessageRender) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "content": message.content or "",
        "embeds": [_embed_json(embed) for embed in message.embeds],
        "components": [
            {
                "type": ACTION_ROW,
                "components": [
                    {
                        "type": BUTTON,
                        "custom_id": button.custom_id,
                        "label": button.label,
                        "style": int(button.style),
                        "disabled": button.disabled,
                    }
                    for button in row
                ],
            }
            for row in message.components
        ],
    }
    if message.ephemeral:
        body["flags"] = EPHEMERAL_FLAG
    return body


def ack_json(kind: AckKind) -> Dict[str, Any]:
    if kind is AckKind.DEFER_UPDATE:
        return {"type": DEFERRED_UPDATE_MESSAGE}
    return {"type": DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE}


def message_response_json(message: MessageRender) -> Dict[str, Any]:
    return {"type": CHANNEL_MESSAGE_WITH_SOURCE, "data": render_to_json(message)}


def autocomplete_json(choices: List[AutocompleteChoice]) -> Dict[str, Any]:
    return {
        "type": APPLICATION_COMMAND_AUTOCOMPLETE_RESULT,
        "data": {"choices": [choice.model_dump() for choice in choices]},
    }


__all__ = [
    "SHOP_COMMAND",
    "PONG",
    "is_ping",
    "parse_interaction",
    "parse_render",
    "render_to_json",
    "ack_json",
    "message_response_json",
    "autocomplete_json",
]
