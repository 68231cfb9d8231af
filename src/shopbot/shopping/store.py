"""Item store contract consumed by the lifecycle, the ranker and the reconciler."""

from __future__ import annotations

from typing import List, Optional, Protocol

from shopbot.db import shopping_list
from shopbot.models.shopping import ItemStatus, NewShoppingListItem, ShoppingListItem


class ItemStore(Protocol):
    """Independent, non-transactional round trips against persisted entries."""

    def insert(
        self,
        fields: NewShoppingListItem,
        *,
        user_id: int,
        message_id: int,
        channel_id: int,
        guild_id: Optional[int],
    ) -> ShoppingListItem: ...

    def get_by_message_id(self, message_id: int) -> Optional[ShoppingListItem]: ...

    def set_bought(
        self,
        user_id: int,
        message_id: int,
        bought: bool,
        *,
        reason: ItemStatus = ItemStatus.BOUGHT,
    ) -> bool: ...

    def recent_items_for_user(self, user_id: int, limit: int) -> List[ShoppingListItem]: ...

    def recent_items_global(self, limit: int) -> List[ShoppingListItem]: ...

    def list_open_items(self, limit: int) -> List[ShoppingListItem]: ...


class DatabaseItemStore:
    """``ItemStore`` backed by the SQLAlchemy helpers in ``shopbot.db.shopping_list``."""

    def insert(
        self,
        fields: NewShoppingListItem,
        *,
        user_id: int,
        message_id: int,
        channel_id: int,
        guild_id: Optional[int],
    ) -> ShoppingListItem:
        return shopping_list.insert_item(
            fields,
            user_id=user_id,
            message_id=message_id,
            channel_id=channel_id,
            guild_id=guild_id,
        )

    def get_by_message_id(self, message_id: int) -> Optional[ShoppingListItem]:
        return shopping_list.get_item_by_message_id(message_id)

    def set_bought(
        self,
        user_id: int,
        message_id: int,
        bought: bool,
        *,
        reason: ItemStatus = ItemStatus.BOUGHT,
    ) -> bool:
        return shopping_list.set_bought(user_id, message_id, bought, reason=reason)

    def recent_items_for_user(self, user_id: int, limit: int) -> List[ShoppingListItem]:
        return shopping_list.recent_items_for_user(user_id, limit)

    def recent_items_global(self, limit: int) -> List[ShoppingListItem]:
        return shopping_list.recent_items_global(limit)

    def list_open_items(self, limit: int) -> List[ShoppingListItem]:
        return shopping_list.list_open_items(limit)


__all__ = ["ItemStore", "DatabaseItemStore"]
