"""
Request diagnostics for the EMR API.

Every HTTP response carries ``X-Response-Time-Ms`` and ``X-Query-Count``
so slow list queries and eager-load fan-out are visible from the client.
"""
import logging
import time
from contextvars import ContextVar

from sqlalchemy import event
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

# SQL statements issued while serving the current request.
query_count_var: ContextVar[int] = ContextVar("query_count", default=0)


def install_query_counter(engine) -> None:
    """Count every statement *engine* sends to the database against the current request."""

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _on_statement(conn, cursor, statement, parameters, context, executemany):
        query_count_var.set(query_count_var.get() + 1)


class TimingMiddleware:
    """Stamp response time and statement count onto each HTTP response."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Runs in the request's own task, so the counter the engine
        # listener bumps is the one read back here.
        query_count_var.set(0)
        started = time.perf_counter()

        async def stamp_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
                statements = query_count_var.get()
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-response-time-ms", str(elapsed_ms).encode()),
                    (b"x-query-count", str(statements).encode()),
                ]
                logger.debug(
                    "%s %s -> %s in %.2fms (%d statements)",
                    scope["method"],
                    scope["path"],
                    message["status"],
                    elapsed_ms,
                    statements,
                )
            await send(message)

        await self.app(scope, receive, stamp_headers)
