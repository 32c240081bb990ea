"""
Terminal ASGI apps and client helpers shared by the SafeWeb tests.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from http.cookies import SimpleCookie

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.testclient import TestClient

from middleware.csrf import COOKIE_NAME, csrf_token
from models.server_config import ServerConfig
from server import new_server


class RecordingApp:
    """Answers "ok" to everything; /csrf answers with a freshly minted token."""

    def __init__(self) -> None:
        self.calls = []

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive)
        body = await request.body()
        self.calls.append((scope["method"], scope["path"], body))
        if scope["path"].endswith("/csrf"):
            text = csrf_token(request)
        else:
            text = "ok"
        await PlainTextResponse(text)(scope, receive, send)


def client_for(base_url="http://testserver", **cfg) -> TestClient:
    return TestClient(new_server(ServerConfig(**cfg)).handler, base_url=base_url)


def session_cookie(response) -> SimpleCookie:
    cookie = SimpleCookie()
    for raw in response.headers.get_list("set-cookie"):
        cookie.load(raw)
    assert COOKIE_NAME in cookie, "no CSRF session cookie issued"
    return cookie
