"""Response decorator adding the CORS and user supplied headers."""

from typing import Dict, List, Optional, Tuple

from starlette.types import ASGIApp, Message, Receive, Scope, Send


class ResponseHeaders:
    """ASGI middleware appending extra headers to every HTTP response.

    Headers are appended, never replaced: if the wrapped app already set a
    header with the same name both values go out on the wire. Values are
    sent as UTF-8 bytes, so text outside Latin-1 passes through unchanged.
    """

    def __init__(self, app: ASGIApp, cors: bool = False, headers: Optional[Dict[str, str]] = None) -> None:
        self.app = app
        self.extra: List[Tuple[str, str]] = []
        if cors:
            self.extra.append(("Access-Control-Allow-Origin", "*"))
        self.extra.extend((headers or {}).items())
        self.raw: List[Tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("utf-8")) for name, value in self.extra
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.raw:
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + self.raw
            await send(message)

        await self.app(scope, receive, send_with_headers)
