"""Persistence layer for shopping list entries."""
