"""Structured logging for the tax engine.

The engine only emits events through get_logger(). Rendering is the host
application's choice: it calls configure_logging() once at startup, and
until then structlog's defaults apply. Every event logged inside
bind_calculation_context() carries the wizard session id and tax year.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from taxwizard.core.config import settings

session_id_ctx: ContextVar[str | None] = ContextVar("session_id", default=None)
tax_year_ctx: ContextVar[int | None] = ContextVar("tax_year", default=None)


@contextmanager
def bind_calculation_context(
    tax_year: int, session_id: str | None = None
) -> Iterator[None]:
    """Tag log events emitted inside the block with a tax year and session.

    A session id of None keeps whatever session the caller already bound.

    Example:
        >>> with bind_calculation_context(2024, session_id="abc"):
        ...     tax_year_ctx.get(), session_id_ctx.get()
        (2024, 'abc')
    """
    year_token = tax_year_ctx.set(tax_year)
    session_token = session_id_ctx.set(session_id) if session_id else None
    try:
        yield
    finally:
        if session_token is not None:
            session_id_ctx.reset(session_token)
        tax_year_ctx.reset(year_token)


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Processor copying the bound session id and tax year onto an event.

    An explicit tax_year already on the event is left alone.
    """
    if session_id := session_id_ctx.get():
        event_dict["session_id"] = session_id
    tax_year = tax_year_ctx.get()
    if tax_year is not None and "tax_year" not in event_dict:
        event_dict["tax_year"] = tax_year
    return event_dict


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    # orjson has no Decimal support; str() keeps amounts exact
    return orjson.dumps(obj, default=str).decode("utf-8")


def _renderer_processors() -> list[Processor]:
    log_format = settings.log_format.lower() if settings.log_format else None
    if log_format == "json" or (
        log_format is None and settings.environment != "development"
    ):
        return [
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging() -> None:
    """Install the engine's structlog pipeline; call once at application startup.

    LOG_FORMAT=json or console picks the renderer explicitly. Without it,
    development renders to a colored console and every other environment
    renders JSON through orjson.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            _add_context_vars,
            *_renderer_processors(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for an engine module, usually get_logger(__name__)."""
    return structlog.get_logger(name)
