"""Tests for the typer command-line interface."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from shopbot.cli import app
from shopbot.db.shopping_list import insert_item
from shopbot.models.shopping import NewShoppingListItem

runner = CliRunner()


def test_init_db_reports_location(tmp_path):
    result = runner.invoke(app, ["init-db"])

    assert result.exit_code == 0
    assert str(tmp_path / "test_shopbot.db") in result.output
    assert (tmp_path / "test_shopbot.db").exists()


def test_suggest_prefers_history_matches():
    insert_item(
        NewShoppingListItem(item="chai latte", personal=False),
        user_id=5,
        message_id=1,
        channel_id=1,
    )

    result = runner.invoke(app, ["suggest", "chai", "--user-id", "5"])

    assert result.exit_code == 0
    assert json.loads(result.output)[0] == "chai latte"


def test_suggest_store_field():
    result = runner.invoke(app, ["suggest", "Mitre", "--field", "store"])

    assert result.exit_code == 0
    assert json.loads(result.output)[0] == "Mitre 10"
