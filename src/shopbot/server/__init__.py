"""ASGI application factory and dependencies for the shopbot server."""

from shopbot.server.app import app, create_app

__all__ = ["app", "create_app"]
