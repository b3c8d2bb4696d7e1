"""
structlog configuration for the data access layer.

Every event is a flat JSON object carrying where it came from:

    {
        "app": "dex-data",
        "layer": "storage",
        "component": "pair-adapter",
        "table": "pair",
        "event": "rows_fetched",
        "rows": 20,
        "duration_ms": 3.4
    }

Layers:
    infrastructure  database pool, config
    storage         entity adapters, statement building, relation resolution
    loader          request-scoped batched loaders
    cache           Redis client, circuit breaker
    pricing         computation callbacks
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "dex-data"

Layer = Literal["infrastructure", "storage", "loader", "cache", "pricing"]

_SEVERITY = {
    "debug": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def add_severity_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mirror the log level into ``severity`` for log collectors that expect it."""
    if "level" in event_dict:
        event_dict["severity"] = _SEVERITY.get(event_dict["level"], "INFO")
    return event_dict


def _build_processors(json_logs: bool, include_timestamp: bool) -> list[Processor]:
    processors: list[Processor] = []
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors += [
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_log_level,
        add_severity_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    include_timestamp: bool = True,
) -> None:
    """
    Route structlog through stdlib logging on stdout.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown values mean INFO)
        json_logs: JSON lines when True, coloured console output otherwise
        include_timestamp: Prefix events with an ISO timestamp

    Usage:
        >>> from dex_data.infrastructure.observability import setup_logging
        >>> setup_logging(level="DEBUG", json_logs=False)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    # basicConfig leaves the level alone when the host already attached handlers
    logging.root.setLevel(log_level)

    structlog.configure(
        processors=_build_processors(json_logs, include_timestamp),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    name: str | None = None,
    layer: Layer | None = None,
    component: str | None = None,
    **initial_context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Return a logger with layer/component/module already bound.

    Usage:
        >>> log = get_logger(__name__, layer="storage", component="pair-adapter")
        >>> log.info("rows_fetched", rows=20)
    """
    context: dict[str, Any] = {
        key: value
        for key, value in (("layer", layer), ("component", component), ("module", name))
        if value
    }
    context.update(initial_context)

    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


def _layer_logger(layer: Layer, component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return get_logger(layer, layer=layer, component=component, **context)


# ============================================================================
# Per-layer factories
# ============================================================================


def get_infrastructure_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return _layer_logger("infrastructure", component, **context)


def get_storage_logger(
    component: str,
    table: str | None = None,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Storage layer logger; ``table`` is bound when the component reads one table.

    Usage:
        >>> log = get_storage_logger("token-adapter", table="token")
        >>> log.debug("statement_built", params=3)
    """
    if table:
        context = {"table": table, **context}
    return _layer_logger("storage", component, **context)


def get_loader_logger(loader: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Loader layer logger bound to the loader's name (e.g. ``reserve_usd_loader``)."""
    return _layer_logger("loader", "batch-loader", loader=loader, **context)


def get_cache_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return _layer_logger("cache", component, **context)


def get_pricing_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return _layer_logger("pricing", component, **context)


def get_database_logger(**context: Any) -> structlog.stdlib.BoundLogger:
    """Shorthand for the asyncpg adapter's infrastructure logger."""
    return get_infrastructure_logger("database-adapter", **context)
