"""
Cross-origin header injection for API routes.

Only ever installed on the API chain. With both allow-lists empty it is a no-op; otherwise OPTIONS responses carry the configured origins and methods. Browser preflights (OPTIONS with Access-Control-Request-Method) are answered here so the API app never needs its own OPTIONS routes.


Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Sequence

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


def _apply(headers: MutableHeaders, extra: list[tuple[str, str]]) -> None:
    for key, value in extra:
        if key == "Vary":
            headers.add_vary_header(value)
        else:
            headers[key] = value


class CORSHeadersMiddleware:

    def __init__(
        self,
        app: ASGIApp,
        allow_origins: Sequence[str] = (),
        allow_methods: Sequence[str] = (),
        simple_requests: bool = False,
    ) -> None:
        self.app = app
        self.allow_origins = tuple(o.strip() for o in allow_origins if o.strip())
        self.allow_methods = tuple(m.strip().upper() for m in allow_methods if m.strip())
        self.simple_requests = simple_requests
        self.enabled = bool(self.allow_origins) and bool(self.allow_methods)

    def _allow_origin_value(self, request_origin: str | None) -> tuple[str, bool]:
        if "*" in self.allow_origins:
            return "*", False
        if request_origin and request_origin in self.allow_origins:
            return request_origin, True
        return ", ".join(self.allow_origins), False

    def _cors_headers(self, scope: Scope) -> list[tuple[str, str]]:
        request_headers = Headers(scope=scope)
        origin_value, vary = self._allow_origin_value(request_headers.get("origin"))
        out = [("Access-Control-Allow-Origin", origin_value)]
        if vary:
            out.append(("Vary", "Origin"))
        if scope.get("method", "").upper() == "OPTIONS":
            out.append(("Access-Control-Allow-Methods", ", ".join(self.allow_methods)))
        return out

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http" or not self.enabled:
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "").upper()
        if method != "OPTIONS" and not self.simple_requests:
            await self.app(scope, receive, send)
            return

        extra = self._cors_headers(scope)
        if method == "OPTIONS" and "access-control-request-method" in Headers(scope=scope):
            logger.debug("cors_preflight path=%s origin=%s", scope.get("path"), extra[0][1])
            response = PlainTextResponse("OK", status_code=200)
            _apply(response.headers, extra)
            await response(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message.get("type") == "http.response.start":
                _apply(MutableHeaders(scope=message), extra)
            await send(message)

        await self.app(scope, receive, send_with_cors)
