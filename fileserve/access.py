"""Access log: one record per completed request."""

import logging
import time
from typing import Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

log = logging.getLogger("fileserve.access")


def _client(scope: Scope) -> str:
    client = scope.get("client")
    if not client:
        return "-"
    host, port = client
    return f"{host}:{port}"


class AccessLog:
    """ASGI middleware logging remote address, method, path, status, size and duration."""

    def __init__(self, app: ASGIApp, logger: Optional[logging.Logger] = None) -> None:
        self.app = app
        self.logger = logger or log

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        # HEAD bodies are dropped by the server before they reach the wire
        head = scope["method"] == "HEAD"
        # reported as 500 if the app fails before starting a response
        status = 500
        size = 0

        async def send_and_count(message: Message) -> None:
            nonlocal status, size
            if message["type"] == "http.response.start":
                status = message["status"]
            elif message["type"] == "http.response.body" and not head:
                size += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_and_count)
        finally:
            elapsed = (time.perf_counter() - started) * 1000
            self.logger.info(
                '%s "%s %s" %d %d %.3fms',
                _client(scope),
                scope["method"],
                scope["path"],
                status,
                size,
                elapsed,
            )
