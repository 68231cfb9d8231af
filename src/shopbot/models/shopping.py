"""Shopping list models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_ITEM_LENGTH = 200
MAX_STORE_LENGTH = 100
MAX_NOTES_LENGTH = 100
MAX_QUANTITY = 25


class ItemStatus(str, Enum):
    """Persisted lifecycle state of a list entry."""

    ACTIVE = "active"
    BOUGHT = "bought"
    REMOVED = "removed"

    @property
    def closed(self) -> bool:
        return self is not ItemStatus.ACTIVE


class NewShoppingListItem(BaseModel):
    """User-supplied fields of a list entry, shared by creation and re-add."""

    item: str = Field(min_length=1, max_length=MAX_ITEM_LENGTH)
    personal: bool
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)
    store: Optional[str] = Field(default=None, max_length=MAX_STORE_LENGTH)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    model_config = ConfigDict(frozen=True)

    @field_validator("item")
    @classmethod
    def _item_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("item must not be blank")
        return value

    @field_validator("store", "notes")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class ShoppingListItem(NewShoppingListItem):
    """Single requested purchase, keyed by the id of the message that renders it."""

    message_id: int
    user_id: int
    channel_id: int
    guild_id: Optional[int] = Field(default=None)
    status: ItemStatus = Field(default=ItemStatus.ACTIVE)
    created_at: datetime
    updated_at: datetime

    @property
    def bought(self) -> bool:
        return self.status.closed

    def fields(self) -> NewShoppingListItem:
        """Return the user-supplied fields without identifiers or state."""

        return NewShoppingListItem(
            item=self.item,
            personal=self.personal,
            quantity=self.quantity,
            store=self.store,
            notes=self.notes,
        )


__all__ = [
    "ItemStatus",
    "NewShoppingListItem",
    "ShoppingListItem",
    "MAX_ITEM_LENGTH",
    "MAX_STORE_LENGTH",
    "MAX_NOTES_LENGTH",
    "MAX_QUANTITY",
]
