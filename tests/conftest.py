"""Shared pytest fixtures for the shopbot test suite."""

from __future__ import annotations

import itertools
from typing import Generator, List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shopbot.config import get_settings
from shopbot.db.repository import reset_repository_state
from shopbot.errors import RenderFailureError
from shopbot.models.render import AckKind, MessageRender, RenderedMessage
from shopbot.models.shopping import NewShoppingListItem
from shopbot.server.app import create_app

_ENV_KEYS = (
    "SHOPBOT_API_TOKEN",
    "SHOPBOT_DISCORD_BOT_TOKEN",
    "SHOPBOT_DISCORD_APPLICATION_ID",
    "SHOPBOT_RECONCILE_ENABLED",
    "DISCORD_TOKEN",
)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_shopbot.db"
    monkeypatch.setenv("SHOPBOT_DATABASE_PATH", str(db_path))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("SHOPBOT_DATABASE_PATH", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


class FakeInteraction:
    """In-memory ``Interactable`` that records every render call."""

    _ids = itertools.count(9000)

    def __init__(
        self,
        *,
        user_id: int = 111,
        channel_id: int = 222,
        guild_id: Optional[int] = 333,
        current_render: Optional[MessageRender] = None,
        fail_edit: bool = False,
    ) -> None:
        self.user_id = user_id
        self.channel_id = channel_id
        self.guild_id = guild_id
        self.current_render = current_render
        self.fail_edit = fail_edit
        self.acks: List[AckKind] = []
        self.responses: List[MessageRender] = []
        self.edits: List[RenderedMessage] = []
        self.followups: List[MessageRender] = []

    @property
    def acknowledged(self) -> bool:
        return bool(self.acks or self.responses)

    def _initial(self) -> None:
        if self.acknowledged:
            raise RenderFailureError("interaction already has an initial response")

    async def acknowledge(self, kind: AckKind) -> None:
        self._initial()
        self.acks.append(kind)

    async def respond(self, message: MessageRender) -> None:
        self._initial()
        self.responses.append(message)

    async def edit_original(self, message: MessageRender) -> RenderedMessage:
        if self.fail_edit:
            raise RenderFailureError("edit original response rejected with HTTP 500", status_code=500)
        rendered = RenderedMessage(id=next(self._ids), render=message)
        self.edits.append(rendered)
        return rendered

    async def create_followup(self, message: MessageRender) -> RenderedMessage:
        self.followups.append(message)
        return RenderedMessage(id=next(self._ids), render=message)

    async def get_current_render(self) -> Optional[MessageRender]:
        return self.current_render


@pytest.fixture()
def make_interaction():
    return FakeInteraction


@pytest.fixture()
def milk() -> NewShoppingListItem:
    return NewShoppingListItem(item="milk 2L", personal=True, quantity=3)
