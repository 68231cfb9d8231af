"""Dependency definitions for the shopbot API server."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from shopbot.config import Settings, get_settings
from shopbot.db.repository import ping
from shopbot.discord.client import DiscordClient
from shopbot.shopping.dispatcher import InteractionDispatcher
from shopbot.shopping.lifecycle import ShoppingListLifecycle
from shopbot.shopping.store import DatabaseItemStore, ItemStore
from shopbot.shopping.suggestions import SuggestionRanker

HealthProbe = Callable[[], bool]


def get_item_store() -> ItemStore:
    """Return the item store implementation."""

    return DatabaseItemStore()


def get_discord_client() -> DiscordClient:
    return DiscordClient()


def get_dispatcher(
    store: ItemStore = Depends(get_item_store),
    settings: Settings = Depends(get_settings),
) -> InteractionDispatcher:
    return InteractionDispatcher(
        ShoppingListLifecycle(store),
        SuggestionRanker(store, history_limit=settings.suggestion_history_limit),
    )


def get_health_probe() -> HealthProbe:
    return ping


def require_api_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Ensure the gateway relay carries the configured API token when one is set."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
