"""
Security headers for browser routes: Content-Security-Policy, Referer-Policy, X-Content-Type-Options and, in a secure context, Strict-Transport-Security. None of these are ever attached to API responses.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

from typing import Optional

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

DEFAULT_CSP_DIRECTIVES = (
    "default-src 'self'",
    "script-src 'self'",
    "frame-ancestors 'none'",
    "form-action 'self'",
    "base-uri 'self'",
    "block-all-mixed-content",
    "object-src 'self'",
)
INLINE_STYLES_DIRECTIVE = "style-src 'self' 'unsafe-inline'"
REFERER_POLICY = "same-origin"


def build_content_security_policy(allow_inline_styles: bool = False) -> str:
    directives = list(DEFAULT_CSP_DIRECTIVES)
    if allow_inline_styles:
        directives.append(INLINE_STYLES_DIRECTIVE)
    return "; ".join(directives)


class BrowserSecurityHeadersMiddleware:

    def __init__(
        self,
        app: ASGIApp,
        allow_inline_styles: bool = False,
        strict_transport_security: Optional[str] = None,
    ) -> None:
        self.app = app
        headers = [
            ("Content-Security-Policy", build_content_security_policy(allow_inline_styles)),
            ("Referer-Policy", REFERER_POLICY),
            ("X-Content-Type-Options", "nosniff"),
        ]
        if strict_transport_security:
            headers.append(("Strict-Transport-Security", strict_transport_security))
        self.headers = tuple(headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message.get("type") == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for key, value in self.headers:
                    response_headers.setdefault(key, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)
