"""ASGI application receiving relayed chat interactions."""
# mypy: ignore-errors

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict
from uuid import uuid4

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.background import BackgroundTask

from shopbot import __version__, metrics
from shopbot.config import Settings, get_settings
from shopbot.discord.client import DiscordClient
from shopbot.discord.interaction import WebhookInteraction
from shopbot.discord.payloads import (
    PONG,
    autocomplete_json,
    is_ping,
    message_response_json,
    parse_interaction,
)
from shopbot.errors import ItemValidationError
from shopbot.logging_utils import configure_logging as configure_app_logging
from shopbot.models.events import AutocompleteEvent
from shopbot.server import deps
from shopbot.shopping.dispatcher import InteractionDispatcher
from shopbot.shopping.reconcile import Reconciler
from shopbot.shopping.rendering import INTERNAL_FAILURE_TEXT, notice
from shopbot.shopping.responses import response_for_error
from shopbot.shopping.store import DatabaseItemStore

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    secrets = [
        settings.api_token or "",
        settings.discord_bot_token or "",
    ]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


async def _finish_deferred(interaction: WebhookInteraction, task: asyncio.Task) -> None:
    """Run after the initial response is on the wire; release and await the deferred phase."""

    interaction.mark_delivered()
    try:
        await task
    except Exception:  # pragma: no cover - dispatch converts failures into responses
        logger.exception("Deferred interaction work failed")


def _install_access_log(application: FastAPI) -> None:
    access_logger = logging.getLogger("shopbot.access")

    @application.middleware("http")
    async def access_log(request: Request, call_next):
        """Time each request, tag it with a request id and count it."""

        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        method, path = request.method, request.url.path
        status_code = 500
        started = perf_counter()
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            response.headers.setdefault("X-Request-ID", request_id)
            return response
        finally:
            elapsed = perf_counter() - started
            access_logger.log(
                logging.ERROR if status_code >= 500 else logging.INFO,
                "%s %s -> %s in %.1fms",
                method,
                path,
                status_code,
                elapsed * 1000,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(method=method, path=path, status=str(status_code)).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Shopbot Interactions", version=__version__)

    if settings.reconcile_enabled:
        reconciler = Reconciler(
            DatabaseItemStore(),
            DiscordClient(),
            batch_size=settings.reconcile_batch_size,
        )
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            reconciler.sweep,
            "interval",
            seconds=settings.reconcile_interval,
            max_instances=1,
            coalesce=True,
        )

        @application.on_event("startup")
        async def start_reconciler() -> None:
            scheduler.start()

        @application.on_event("shutdown")
        async def stop_reconciler() -> None:
            scheduler.shutdown(wait=False)

    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        _install_access_log(application)

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @application.post("/interactions", summary="Handle a relayed chat interaction")
    async def interactions_endpoint(
        payload: Dict[str, Any] = Body(...),
        auth: None = Depends(deps.require_api_token),
        dispatcher: InteractionDispatcher = Depends(deps.get_dispatcher),
        client: DiscordClient = Depends(deps.get_discord_client),
    ) -> JSONResponse:
        if is_ping(payload):
            return JSONResponse({"type": PONG})

        try:
            event = parse_interaction(payload)
            if not isinstance(event, AutocompleteEvent) and not payload.get("token"):
                raise ItemValidationError("Interaction has no response token")
        except ItemValidationError as exc:
            response = response_for_error(exc, context="interaction payload")
            response.write_to_log(logger, interaction_id=payload.get("id"))
            return JSONResponse(message_response_json(response.user_message()))

        if isinstance(event, AutocompleteEvent):
            choices = await dispatcher.autocomplete(event)
            return JSONResponse(autocomplete_json(choices))

        interaction = WebhookInteraction.for_event(event, token=payload["token"], client=client)
        task = asyncio.create_task(dispatcher.dispatch(event, interaction))
        initial = await interaction.wait_for_initial_response(task)
        if initial is None:
            logger.error(
                "%s interaction %s finished without an initial response",
                event.kind,
                event.interaction_id,
            )
            initial = message_response_json(notice(INTERNAL_FAILURE_TEXT))
        return JSONResponse(initial, background=BackgroundTask(_finish_deferred, interaction, task))

    @application.get("/healthz", summary="Liveness and database check")
    def healthz(probe: deps.HealthProbe = Depends(deps.get_health_probe)) -> JSONResponse:
        if probe():
            return JSONResponse({"status": "ok", "version": __version__})
        return JSONResponse(
            {"status": "unavailable", "version": __version__},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    return application


app = create_app()

__all__ = ["app", "create_app"]
