"""Command responses: what the user sees and what is written to the log.

Every handler outcome is a ``CommandResponse``. ``_OUTCOMES`` is the one table that
decides, per response kind, the user-visible message, the log severity and the log
text. Internal failures always log at error severity and only ever show
``INTERNAL_FAILURE_TEXT`` to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional

from shopbot import metrics
from shopbot.errors import (
    InvalidTransitionError,
    ItemValidationError,
    RenderFailureError,
    StoreError,
)
from shopbot.models.render import MessageRender
from shopbot.shopping.rendering import DATABASE_FAILURE_TEXT, INTERNAL_FAILURE_TEXT, notice

logger = logging.getLogger(__name__)


class LogSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"

    @property
    def levelno(self) -> int:
        return logging.getLevelName(self.value.upper())


class ResponseKind(str, Enum):
    BASIC_SUCCESS = "basic_success"
    COMPLEX_SUCCESS = "complex_success"
    BASIC_FAILURE = "basic_failure"
    COMPLEX_FAILURE = "complex_failure"
    INTERNAL_FAILURE = "internal_failure"
    NO_RESPONSE = "no_response"


@dataclass(frozen=True)
class CommandResponse:
    kind: ResponseKind
    text: Optional[str] = None
    message: Optional[MessageRender] = None
    severity: Optional[LogSeverity] = None
    log_text: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def basic_success(cls, text: str) -> "CommandResponse":
        return cls(ResponseKind.BASIC_SUCCESS, text=text)

    @classmethod
    def complex_success(cls, message: MessageRender) -> "CommandResponse":
        return cls(ResponseKind.COMPLEX_SUCCESS, message=message)

    @classmethod
    def basic_failure(cls, text: str) -> "CommandResponse":
        return cls(ResponseKind.BASIC_FAILURE, text=text)

    @classmethod
    def complex_failure(
        cls,
        response: str,
        severity: LogSeverity,
        log_message: str,
        *,
        error: Optional[BaseException] = None,
    ) -> "CommandResponse":
        return cls(
            ResponseKind.COMPLEX_FAILURE,
            text=response,
            severity=severity,
            log_text=log_message,
            error=error,
        )

    @classmethod
    def internal_failure(
        cls, log_message: str, *, error: Optional[BaseException] = None
    ) -> "CommandResponse":
        return cls(ResponseKind.INTERNAL_FAILURE, log_text=log_message, error=error)

    @classmethod
    def no_response(cls) -> "CommandResponse":
        return cls(ResponseKind.NO_RESPONSE)

    @property
    def failed(self) -> bool:
        return self.kind in {
            ResponseKind.BASIC_FAILURE,
            ResponseKind.COMPLEX_FAILURE,
            ResponseKind.INTERNAL_FAILURE,
        }

    def user_message(self) -> Optional[MessageRender]:
        return _OUTCOMES[self.kind].user(self)

    def log_severity(self) -> Optional[LogSeverity]:
        return _OUTCOMES[self.kind].severity(self)

    def log_message(self) -> Optional[str]:
        return _OUTCOMES[self.kind].log(self)

    def write_to_log(
        self,
        log: logging.Logger = logger,
        *,
        interaction_id: Optional[str] = None,
    ) -> bool:
        """Write the loggable part of the response, if any. Returns True when written."""

        message = self.log_message()
        severity = self.log_severity()
        if message is None or severity is None:
            return False
        extra = {"interaction_id": interaction_id} if interaction_id else None
        log.log(severity.levelno, "%s", message, exc_info=self.error, extra=extra)
        return True


class _Outcome(NamedTuple):
    user: Callable[[CommandResponse], Optional[MessageRender]]
    severity: Callable[[CommandResponse], Optional[LogSeverity]]
    log: Callable[[CommandResponse], Optional[str]]


def _nothing(_: CommandResponse) -> None:
    return None


_OUTCOMES: Dict[ResponseKind, _Outcome] = {
    ResponseKind.BASIC_SUCCESS: _Outcome(
        user=lambda r: notice(r.text or ""),
        severity=_nothing,
        log=_nothing,
    ),
    ResponseKind.COMPLEX_SUCCESS: _Outcome(
        user=lambda r: r.message,
        severity=_nothing,
        log=_nothing,
    ),
    ResponseKind.BASIC_FAILURE: _Outcome(
        user=lambda r: notice(r.text or ""),
        severity=lambda r: LogSeverity.ERROR,
        log=lambda r: r.text,
    ),
    ResponseKind.COMPLEX_FAILURE: _Outcome(
        user=lambda r: notice(r.text or ""),
        severity=lambda r: r.severity or LogSeverity.ERROR,
        log=lambda r: r.log_text,
    ),
    ResponseKind.INTERNAL_FAILURE: _Outcome(
        user=lambda r: notice(INTERNAL_FAILURE_TEXT),
        severity=lambda r: LogSeverity.ERROR,
        log=lambda r: r.log_text or "internal failure without detail",
    ),
    ResponseKind.NO_RESPONSE: _Outcome(user=_nothing, severity=_nothing, log=_nothing),
}


def response_for_error(exc: BaseException, *, context: str) -> CommandResponse:
    """Map a failure raised while handling ``context`` onto a response."""

    if isinstance(exc, ItemValidationError):
        return CommandResponse.complex_failure(
            str(exc),
            LogSeverity.INFO,
            f"{context}: rejected invalid request: {exc}",
        )
    if isinstance(exc, InvalidTransitionError):
        return CommandResponse.complex_failure(
            str(exc),
            LogSeverity.WARNING,
            f"{context}: {exc}",
        )
    if isinstance(exc, StoreError):
        metrics.STORE_ERRORS.labels(error=type(exc).__name__).inc()
        return CommandResponse.complex_failure(
            DATABASE_FAILURE_TEXT,
            LogSeverity.ERROR,
            f"{context}: {DATABASE_FAILURE_TEXT}: {exc}",
        )
    if isinstance(exc, RenderFailureError):
        return CommandResponse.internal_failure(f"{context}: error communicating with discord: {exc}")
    return CommandResponse.internal_failure(f"{context}: unexpected error: {exc!r}", error=exc)


__all__ = ["LogSeverity", "ResponseKind", "CommandResponse", "response_for_error"]
