"""Tests for the response adapter and the interaction dispatcher."""

from __future__ import annotations

import asyncio
import logging

from shopbot.db.shopping_list import get_item_by_message_id, insert_item
from shopbot.errors import (
    InvalidTransitionError,
    ItemNotFoundError,
    ItemValidationError,
    RenderFailureError,
    StoreUnavailableError,
)
from shopbot.models.events import AutocompleteEvent, ButtonClickEvent, NewItemEvent, SuggestionField
from shopbot.models.shopping import ItemStatus, NewShoppingListItem
from shopbot.shopping.dispatcher import InteractionDispatcher
from shopbot.shopping.lifecycle import ShoppingListLifecycle
from shopbot.shopping.rendering import DATABASE_FAILURE_TEXT, INTERNAL_FAILURE_TEXT, active_message
from shopbot.shopping.responses import (
    CommandResponse,
    LogSeverity,
    ResponseKind,
    response_for_error,
)
from shopbot.shopping.store import DatabaseItemStore
from shopbot.shopping.suggestions import SuggestionRanker


class BrokenHistoryStore(DatabaseItemStore):
    def recent_items_for_user(self, user_id, limit):
        raise StoreUnavailableError("disk I/O error")


class FailingInsertStore(DatabaseItemStore):
    def insert(self, fields, **kwargs):
        raise StoreUnavailableError("database is locked")


def _dispatcher_records(caplog):
    return [r for r in caplog.records if r.name == "shopbot.shopping.dispatcher"]


def _dispatcher(store=None) -> InteractionDispatcher:
    store = store or DatabaseItemStore()
    return InteractionDispatcher(ShoppingListLifecycle(store), SuggestionRanker(store))


def test_error_mapping_table():
    validation = response_for_error(ItemValidationError("item and personal are required"), context="c")
    assert validation.kind is ResponseKind.COMPLEX_FAILURE
    assert validation.user_message().content == "item and personal are required"
    assert validation.log_severity() is LogSeverity.INFO

    transition = response_for_error(InvalidTransitionError("still listed"), context="c")
    assert transition.log_severity() is LogSeverity.WARNING

    store = response_for_error(ItemNotFoundError(5), context="c")
    assert store.user_message().content == DATABASE_FAILURE_TEXT
    assert store.log_severity() is LogSeverity.ERROR
    assert "message 5" in store.log_message()

    render = response_for_error(RenderFailureError("edit rejected"), context="c")
    assert render.kind is ResponseKind.INTERNAL_FAILURE


def test_internal_failure_never_shows_raw_error():
    response = response_for_error(KeyError("secret column"), context="button_click interaction 1")

    assert response.user_message().content == INTERNAL_FAILURE_TEXT
    assert response.user_message().ephemeral is True
    assert response.log_severity() is LogSeverity.ERROR
    assert "secret column" in response.log_message()


def test_no_response_logs_and_shows_nothing():
    response = CommandResponse.no_response()
    assert response.user_message() is None
    assert response.write_to_log() is False
    assert response.failed is False


def test_basic_success_is_not_logged():
    response = CommandResponse.basic_success("done")
    assert response.user_message().content == "done"
    assert response.log_severity() is None


def test_dispatch_logs_failure_once_and_sends_followup(make_interaction, caplog):
    interaction = make_interaction()
    event = ButtonClickEvent(
        interaction_id="abc",
        acting_user_id=1,
        channel_id=2,
        action="bought",
        message_id=404,
    )

    with caplog.at_level(logging.INFO, logger="shopbot.shopping.dispatcher"):
        response = asyncio.run(_dispatcher().dispatch(event, interaction))

    assert response.kind is ResponseKind.COMPLEX_FAILURE
    records = _dispatcher_records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].interaction_id == "abc"
    assert [m.content for m in interaction.followups] == [DATABASE_FAILURE_TEXT]
    assert interaction.responses == []


def test_dispatch_responds_directly_when_not_acknowledged(make_interaction):
    interaction = make_interaction()
    event = ButtonClickEvent(acting_user_id=1, channel_id=2, action="nonsense", message_id=1)

    response = asyncio.run(_dispatcher().dispatch(event, interaction))

    assert response.kind is ResponseKind.COMPLEX_FAILURE
    assert interaction.acks == []
    assert len(interaction.responses) == 1
    assert "nonsense" in interaction.responses[0].content


def test_render_failure_after_bought_keeps_the_purchase(make_interaction, caplog):
    fields = NewShoppingListItem(item="eggs", personal=False)
    insert_item(fields, user_id=1, message_id=800, channel_id=2, guild_id=None)
    interaction = make_interaction(current_render=active_message(fields), fail_edit=True)
    event = ButtonClickEvent(
        interaction_id="def",
        acting_user_id=1,
        channel_id=2,
        action="bought",
        message_id=800,
    )

    with caplog.at_level(logging.INFO, logger="shopbot.shopping.dispatcher"):
        response = asyncio.run(_dispatcher().dispatch(event, interaction))

    assert response.kind is ResponseKind.INTERNAL_FAILURE
    assert get_item_by_message_id(800).status is ItemStatus.BOUGHT
    records = _dispatcher_records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert "HTTP 500" in records[0].getMessage()
    assert [m.content for m in interaction.followups] == [INTERNAL_FAILURE_TEXT]
    assert interaction.responses == []


def test_failed_insert_after_render_is_reported_once(make_interaction, caplog):
    interaction = make_interaction()
    event = NewItemEvent(
        interaction_id="ghi",
        acting_user_id=1,
        channel_id=2,
        request=NewShoppingListItem(item="flour", personal=False),
    )

    with caplog.at_level(logging.INFO, logger="shopbot"):
        response = asyncio.run(_dispatcher(FailingInsertStore()).dispatch(event, interaction))

    assert response.kind is ResponseKind.COMPLEX_FAILURE
    (rendered,) = interaction.edits
    assert get_item_by_message_id(rendered.id) is None
    orphan_logs = [r for r in caplog.records if "orphaned_message" in r.getMessage()]
    assert len(orphan_logs) == 1
    assert orphan_logs[0].name == "shopbot.shopping.dispatcher"
    assert orphan_logs[0].levelno == logging.ERROR
    assert f"message_id={rendered.id}" in orphan_logs[0].getMessage()
    assert [m.content for m in interaction.followups] == [DATABASE_FAILURE_TEXT]
    assert interaction.followups[0].ephemeral is True


def test_rejected_readd_is_answered_privately(make_interaction):
    insert_item(
        NewShoppingListItem(item="rice", personal=False),
        user_id=1,
        message_id=801,
        channel_id=2,
        guild_id=None,
    )
    interaction = make_interaction()
    event = ButtonClickEvent(acting_user_id=1, channel_id=2, action="readd", message_id=801)

    response = asyncio.run(_dispatcher().dispatch(event, interaction))

    assert response.kind is ResponseKind.COMPLEX_FAILURE
    assert interaction.acks == []
    assert interaction.followups == []
    (reply,) = interaction.responses
    assert reply.content == "This item is still on the shopping list."
    assert reply.ephemeral is True


def test_autocomplete_failure_returns_no_choices(caplog):
    event = AutocompleteEvent(acting_user_id=1, channel_id=2, field=SuggestionField.ITEM, prefix="m")

    with caplog.at_level(logging.ERROR, logger="shopbot.shopping.dispatcher"):
        choices = asyncio.run(_dispatcher(BrokenHistoryStore()).autocomplete(event))

    assert choices == []
    assert len(_dispatcher_records(caplog)) == 1
