"""Engine-level hooks that time read queries."""

import logging
import time

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

from .observability import metrics_collector

logger = logging.getLogger(__name__)

_START_ATTR = "_tours_query_start"


def _is_read(statement: str) -> bool:
    return statement.lstrip().upper().startswith(("SELECT", "WITH"))


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    if context is not None and _is_read(statement):
        setattr(context, _START_ATTR, time.perf_counter())


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    start = getattr(context, _START_ATTR, None)
    if start is None:
        return
    elapsed = time.perf_counter() - start
    metrics_collector.observe_query_duration(elapsed)
    logger.debug(
        f"Query took {elapsed * 1000:.2f} milliseconds",
        extra={"duration_ms": round(elapsed * 1000, 2)}
    )


def register_query_timing(async_engine: AsyncEngine) -> None:
    """
    Attach the read-query timing listeners to an engine.

    The start timestamp lives on the execution context, so every in-flight
    statement carries its own.
    """
    sync_engine = async_engine.sync_engine
    if event.contains(sync_engine, "before_cursor_execute", _before_cursor_execute):
        return
    event.listen(sync_engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(sync_engine, "after_cursor_execute", _after_cursor_execute)
