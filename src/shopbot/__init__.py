"""
Shopbot shared shopping-list command layer.

The package turns chat interaction events (slash commands, autocomplete requests and
button clicks) into persisted shopping-list entries and rendered message updates.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
