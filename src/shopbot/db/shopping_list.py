"""Shopping list persistence helpers."""
# mypy: ignore-errors

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError

from shopbot.errors import ItemConflictError, ItemNotFoundError, StoreUnavailableError
from shopbot.models.shopping import ItemStatus, NewShoppingListItem, ShoppingListItem

from .models import ShoppingListItemORM
from .repository import session_scope

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_model(row: ShoppingListItemORM) -> ShoppingListItem:
    return ShoppingListItem.model_validate(
        {
            "message_id": row.message_id,
            "user_id": row.user_id,
            "channel_id": row.channel_id,
            "guild_id": row.guild_id,
            "item": row.item,
            "personal": row.personal,
            "quantity": row.quantity,
            "store": row.store,
            "notes": row.notes,
            "status": row.status,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
    )


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy driver errors into store errors."""

    try:
        yield
    except IntegrityError as exc:
        raise ItemConflictError(f"{operation} violated a constraint: {exc.orig}") from exc
    except DBAPIError as exc:
        raise StoreUnavailableError(f"{operation} failed: {exc.orig}") from exc


def _newest_first(query):
    return query.order_by(
        ShoppingListItemORM.created_at.desc(),
        ShoppingListItemORM.message_id.desc(),
    )


def insert_item(
    fields: NewShoppingListItem,
    *,
    user_id: int,
    message_id: int,
    channel_id: int,
    guild_id: Optional[int] = None,
) -> ShoppingListItem:
    """Persist a new active entry keyed by ``message_id``."""

    now = _utcnow()
    with _store_errors(f"insert of message {message_id}"), session_scope() as session:
        if session.get(ShoppingListItemORM, message_id) is not None:
            raise ItemConflictError(f"Shopping list item for message {message_id} already exists")
        row = ShoppingListItemORM(
            message_id=message_id,
            user_id=user_id,
            channel_id=channel_id,
            guild_id=guild_id,
            item=fields.item.strip(),
            personal=fields.personal,
            quantity=fields.quantity,
            store=fields.store.strip() if fields.store else None,
            notes=fields.notes,
            status=ItemStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        session.add(row)
        session.flush()
        return _to_model(row)


def get_item_by_message_id(message_id: int) -> Optional[ShoppingListItem]:
    with _store_errors(f"lookup of message {message_id}"), session_scope() as session:
        row = session.get(ShoppingListItemORM, message_id)
        if row is None:
            return None
        return _to_model(row)


def set_bought(
    user_id: int,
    message_id: int,
    bought: bool,
    *,
    reason: ItemStatus = ItemStatus.BOUGHT,
) -> bool:
    """Close an active entry; return True only for the call that changed it.

    Any user may close any entry. Closing twice is a no-op, and a closed entry
    never reopens.
    """

    if bought and not reason.closed:
        raise ValueError("A closed entry needs a bought or removed reason")

    with _store_errors(f"status update of message {message_id}"), session_scope() as session:
        if bought:
            result = session.execute(
                update(ShoppingListItemORM)
                .where(
                    ShoppingListItemORM.message_id == message_id,
                    ShoppingListItemORM.status == ItemStatus.ACTIVE.value,
                )
                .values(status=reason.value, updated_at=_utcnow())
            )
            if result.rowcount:
                logger.info(
                    "Shopping list item %s closed as %s by user %s",
                    message_id,
                    reason.value,
                    user_id,
                )
                return True
            if session.get(ShoppingListItemORM, message_id) is None:
                raise ItemNotFoundError(message_id)
            logger.debug("Shopping list item %s already closed", message_id)
            return False

        row = session.get(ShoppingListItemORM, message_id)
        if row is None:
            raise ItemNotFoundError(message_id)
        if row.status != ItemStatus.ACTIVE.value:
            raise ItemConflictError(f"Shopping list item {message_id} is closed and cannot reopen")
        return False


def recent_items_for_user(user_id: int, limit: int) -> List[ShoppingListItem]:
    """Return the user's most recent entries, newest first."""

    with _store_errors(f"recent items for user {user_id}"), session_scope() as session:
        rows = (
            session.execute(
                _newest_first(
                    select(ShoppingListItemORM).where(ShoppingListItemORM.user_id == user_id)
                ).limit(limit)
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def recent_items_global(limit: int) -> List[ShoppingListItem]:
    """Return the most recent entries of every user, newest first."""

    with _store_errors("recent items"), session_scope() as session:
        rows = (
            session.execute(_newest_first(select(ShoppingListItemORM)).limit(limit))
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def list_open_items(limit: int) -> List[ShoppingListItem]:
    """Return active entries, oldest first."""

    with _store_errors("open items"), session_scope() as session:
        rows = (
            session.execute(
                select(ShoppingListItemORM)
                .where(ShoppingListItemORM.status == ItemStatus.ACTIVE.value)
                .order_by(ShoppingListItemORM.created_at.asc())
                .limit(limit)
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


__all__ = [
    "insert_item",
    "get_item_by_message_id",
    "set_bought",
    "recent_items_for_user",
    "recent_items_global",
    "list_open_items",
]
