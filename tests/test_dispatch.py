"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

try:
    from ._env import ensure_test_env
except ImportError:
    from tests._env import ensure_test_env
ensure_test_env()

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from models.server_config import ServerConfig
from routers.dispatch import RouteClass, RouteDispatcher, classify
from server import new_server

try:
    from ._apps import RecordingApp, client_for
except ImportError:
    from tests._apps import RecordingApp, client_for


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/", RouteClass.API),
        ("/api", RouteClass.API),
        ("/api/v1/things", RouteClass.API),
        ("/", RouteClass.BROWSER),
        ("/apix", RouteClass.BROWSER),
        ("/static/api/x", RouteClass.BROWSER),
    ],
)
def test_classify(path, expected):
    assert classify(path, "/api/") is expected


def test_classify_custom_prefix():
    assert classify("/rpc/call", "/rpc/") is RouteClass.API
    assert classify("/api/call", "/rpc/") is RouteClass.BROWSER


def test_requests_reach_matching_mux():
    api, browser = RecordingApp(), RecordingApp()
    client = client_for(api_mux=api, browser_mux=browser)
    client.get("/api/things")
    client.get("/home")
    assert api.calls == [("GET", "/api/things", b"")]
    assert browser.calls == [("GET", "/home", b"")]


def test_without_api_mux_everything_is_browser():
    browser = RecordingApp()
    resp = client_for(browser_mux=browser).get("/api/things")
    assert resp.status_code == 200
    assert "content-security-policy" in resp.headers
    assert browser.calls == [("GET", "/api/things", b"")]


def test_without_browser_mux_non_api_routes_are_not_found():
    resp = client_for(api_mux=RecordingApp()).get("/")
    assert resp.status_code == 404
    assert resp.text == "404 page not found"


def test_without_any_mux_everything_is_not_found():
    client = client_for()
    assert client.get("/").status_code == 404
    assert client.post("/api/x", json={}).status_code == 404


def test_apps_without_lifespan_support_do_not_block_startup():
    api, browser = RecordingApp(), RecordingApp()
    with TestClient(RouteDispatcher(api, browser, "/api/")) as client:
        assert client.get("/").status_code == 200
    assert browser.calls == [("GET", "/", b"")]
    assert api.calls == []


def test_fastapi_mux_lifespan_runs_under_server():
    events = []

    @asynccontextmanager
    async def lifespan(app):
        events.append("startup")
        yield
        events.append("shutdown")

    browser = FastAPI(lifespan=lifespan)

    @browser.get("/")
    async def index():
        return {"started": events == ["startup"]}

    with TestClient(new_server(ServerConfig(browser_mux=browser))) as client:
        resp = client.get("/")
        assert resp.json() == {"started": True}
    assert events == ["startup", "shutdown"]


def test_both_mux_lifespans_run():
    events = []

    def tracking(name):
        @asynccontextmanager
        async def lifespan(app):
            events.append(f"{name}:up")
            yield
            events.append(f"{name}:down")
        return lifespan

    server = new_server(ServerConfig(
        api_mux=FastAPI(lifespan=tracking("api")),
        browser_mux=FastAPI(lifespan=tracking("browser")),
    ))
    with TestClient(server):
        assert sorted(events) == ["api:up", "browser:up"]
    assert sorted(events) == ["api:down", "api:up", "browser:down", "browser:up"]


@pytest.mark.asyncio
async def test_failed_mux_startup_is_reported():
    @asynccontextmanager
    async def broken(app):
        raise RuntimeError("database unreachable")
        yield

    dispatcher = RouteDispatcher(None, FastAPI(lifespan=broken), "/api/")
    sent = []

    async def receive():
        return {"type": "lifespan.startup"}

    async def send(message):
        sent.append(message)

    await dispatcher({"type": "lifespan", "asgi": {"version": "3.0"}, "state": {}}, receive, send)
    assert [m["type"] for m in sent] == ["lifespan.startup.failed"]
    assert "database unreachable" in sent[0]["message"]
