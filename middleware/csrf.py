"""
CSRF guard for browser routes.

Every browser client holds a per-session secret in a sealed cookie. Handlers mint request tokens from it with csrf_token(request); state-changing requests must echo one back in the X-CSRF-Token header (or the csrf_token form field) before they reach the browser handler.


Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlsplit

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from middleware.content_type import FORM_MEDIA_TYPE, media_type
from middleware.error_handlers import reject
from services.common.cookies import CookiePolicy, format_set_cookie
from services.csrf_tokens import CSRFProtector
from services.errors import CSRFForbidden, RequestBodyTooLarge

logger = logging.getLogger(__name__)

COOKIE_NAME = "_safeweb_csrf"
HEADER_NAME = "x-csrf-token"
FORM_FIELD = "csrf_token"
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
_STATE_KEY = "safeweb.csrf"
MAX_FORM_BYTES = 1_048_576


@dataclass(frozen=True)
class CSRFContext:
    protector: CSRFProtector
    secret: bytes

    def token(self) -> str:
        return self.protector.issue_token(self.secret)


def csrf_token(request: HTTPConnection) -> str:
    ctx = request.scope.get("state", {}).get(_STATE_KEY)
    if ctx is None:
        raise RuntimeError("CSRF protection is not installed on this route")
    return ctx.token()


async def _read_body(receive: Receive, max_bytes: int) -> bytes:
    chunks = []
    received = 0
    while True:
        message = await receive()
        if message.get("type") != "http.request":
            break
        body = message.get("body") or b""
        received += len(body)
        if received > max_bytes:
            raise RequestBodyTooLarge(max_bytes)
        chunks.append(body)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _replay(body: bytes, receive: Receive) -> Receive:
    replayed = False

    async def replay_receive() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay_receive


class CSRFMiddleware:

    def __init__(
        self,
        app: ASGIApp,
        protector: CSRFProtector,
        cookie: CookiePolicy,
        trusted_origins: Iterable[str] = (),
        max_form_bytes: int = MAX_FORM_BYTES,
    ) -> None:
        self.app = app
        self.max_form_bytes = int(max_form_bytes)
        self.protector = protector
        self.cookie = cookie
        self.trusted_origins = frozenset(o.strip().rstrip("/") for o in trusted_origins if o.strip())

    def _check_referer(self, conn: HTTPConnection) -> None:
        referer = conn.headers.get("referer")
        if not referer:
            raise CSRFForbidden("referer not supplied")
        parts = urlsplit(referer)
        origin = f"{parts.scheme}://{parts.netloc}"
        if origin == f"https://{conn.url.netloc}":
            return
        if origin in self.trusted_origins or parts.netloc in self.trusted_origins:
            return
        raise CSRFForbidden("referer invalid")

    async def _submitted_token(self, conn: HTTPConnection, receive: Receive) -> tuple[Optional[str], Receive]:
        token = conn.headers.get(HEADER_NAME)
        if token:
            return token, receive
        if media_type(conn.headers.get("content-type")) != FORM_MEDIA_TYPE:
            return None, receive
        body = await _read_body(receive, self.max_form_bytes)
        values = parse_qs(body.decode("latin-1"), keep_blank_values=True).get(FORM_FIELD)
        return (values[0] if values else None), _replay(body, receive)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        conn = HTTPConnection(scope)
        secret = self.protector.unseal(conn.cookies.get(self.cookie.name, ""))
        issue_cookie = secret is None
        if secret is None:
            secret = self.protector.new_secret()
        scope.setdefault("state", {})[_STATE_KEY] = CSRFContext(self.protector, secret)

        async def send_with_cookie(message: Message) -> None:
            if issue_cookie and message.get("type") == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append("set-cookie", format_set_cookie(self.cookie, self.protector.seal(secret)))
            await send(message)

        if scope.get("method", "").upper() in SAFE_METHODS:
            await self.app(scope, receive, send_with_cookie)
            return

        downstream_receive = receive
        try:
            if scope.get("scheme") == "https":
                self._check_referer(conn)
            if issue_cookie:
                raise CSRFForbidden("session cookie missing")
            token, downstream_receive = await self._submitted_token(conn, receive)
            if not token:
                raise CSRFForbidden("token missing")
            if not self.protector.validate(secret, token):
                raise CSRFForbidden("token invalid")
        except (CSRFForbidden, RequestBodyTooLarge) as exc:
            reason = getattr(exc, "reason", exc.detail)
            logger.warning("csrf_rejected reason=%s method=%s path=%s", reason, scope.get("method"), scope.get("path"))
            await reject(exc, scope, receive, send_with_cookie)
            return

        await self.app(scope, downstream_receive, send_with_cookie)
