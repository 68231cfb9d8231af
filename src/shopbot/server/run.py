"""Helper for running the shopbot ASGI application."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    """Serve `shopbot.server.app:app` with host/port taken from the environment."""

    host = os.environ.get("SHOPBOT_SERVER_HOST", "127.0.0.1")
    port = int(os.environ.get("SHOPBOT_SERVER_PORT", "8000"))
    reload_enabled = os.environ.get("RELOAD") == "1"

    uvicorn.run(
        "shopbot.server.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
