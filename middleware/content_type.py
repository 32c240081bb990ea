"""
Content-Type gate for body-bearing requests.

A request chain accepts exactly one media type for POST, PUT and PATCH, so a browser form can never be replayed as an API call and vice versa.


Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from middleware.error_handlers import reject
from services.errors import UnsupportedMediaType

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def media_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


class ContentTypeGateMiddleware:

    def __init__(self, app: ASGIApp, allowed: str) -> None:
        self.app = app
        self.allowed = media_type(allowed)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http" or scope.get("method", "").upper() not in BODY_METHODS:
            await self.app(scope, receive, send)
            return

        content_type = Headers(scope=scope).get("content-type", "")
        if media_type(content_type) != self.allowed:
            await reject(UnsupportedMediaType(content_type, self.allowed), scope, receive, send)
            return

        await self.app(scope, receive, send)
