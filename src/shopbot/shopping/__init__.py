"""Shopping list core: lifecycle state machine, suggestion ranking and responses."""

from shopbot.shopping.dispatcher import InteractionDispatcher
from shopbot.shopping.lifecycle import ShoppingListLifecycle
from shopbot.shopping.reconcile import Reconciler
from shopbot.shopping.store import DatabaseItemStore, ItemStore
from shopbot.shopping.suggestions import SuggestionRanker

__all__ = [
    "InteractionDispatcher",
    "ShoppingListLifecycle",
    "Reconciler",
    "DatabaseItemStore",
    "ItemStore",
    "SuggestionRanker",
]
