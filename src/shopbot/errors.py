"""Exception hierarchy shared by the store, the lifecycle and the response adapter."""

from __future__ import annotations

from typing import Optional


class ShoppingListError(Exception):
    """Base class for every failure raised while handling a shopping-list interaction."""


class ItemValidationError(ShoppingListError):
    """Bad or missing input, rejected before any store access.

    The message is written for the end user and is shown verbatim.
    """


class InvalidTransitionError(ShoppingListError):
    """A button action that does not apply to the item's current state."""


class StoreError(ShoppingListError):
    """Failure reported by the item store."""


class ItemConflictError(StoreError):
    """A record with the same message id already exists, or a closed record would reopen."""


class ItemNotFoundError(StoreError):
    """The action requires a stored record and none exists for the message id."""

    def __init__(self, message_id: int):
        super().__init__(f"Shopping list item for message {message_id} not found")
        self.message_id = message_id


class StoreUnavailableError(StoreError):
    """Connectivity or backend failure while talking to the database."""


class RenderFailureError(ShoppingListError):
    """The chat platform rejected a render call."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


__all__ = [
    "ShoppingListError",
    "ItemValidationError",
    "InvalidTransitionError",
    "StoreError",
    "ItemConflictError",
    "ItemNotFoundError",
    "StoreUnavailableError",
    "RenderFailureError",
]
