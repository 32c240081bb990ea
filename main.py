"""
Entrypoint for a SafeWeb demo deployment: a JSON API under the API prefix and a small form-driven browser app, both served through the SafeWeb policy layer.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import html
import logging
from urllib.parse import parse_qs

import uvicorn
import uvloop
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse

from config import config
from middleware.csrf import FORM_FIELD, csrf_token
from routers.redirect import redirect_http
from server import Server, new_server

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("safeweb")

api_app = FastAPI(title="SafeWeb API", docs_url=None, redoc_url=None, openapi_url=None)
browser_app = FastAPI(title="SafeWeb", docs_url=None, redoc_url=None, openapi_url=None)

_FORM_PAGE = """<!doctype html>
<html>
<head><title>SafeWeb</title></head>
<body>
<form method="post" action="/submit">
<input type="hidden" name="{field}" value="{token}">
<input type="text" name="message">
<button type="submit">Send</button>
</form>
</body>
</html>
"""


@api_app.get(f"{config.API_PREFIX}health")
async def health() -> dict:
    return {"status": "healthy", "service": "safeweb"}


@api_app.post(f"{config.API_PREFIX}echo")
async def echo(request: Request) -> JSONResponse:
    return JSONResponse(await request.json())


@browser_app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> str:
    return _FORM_PAGE.format(field=FORM_FIELD, token=html.escape(csrf_token(request)))


@browser_app.post("/submit", response_class=HTMLResponse)
async def submit(request: Request) -> str:
    form = parse_qs((await request.body()).decode("utf-8"))
    message = (form.get("message") or [""])[0]
    return f"<p>received: {html.escape(message)}</p>"


async def _serve_with_redirect(server: Server) -> None:
    redirect = uvicorn.Server(
        uvicorn.Config(
            redirect_http(config.PUBLIC_HOSTNAME),
            host=config.HOST,
            port=config.REDIRECT_HTTP_PORT,
            lifespan="off",
            log_level=config.LOG_LEVEL,
        )
    )
    await asyncio.gather(
        server.serve(host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL),
        redirect.serve(),
    )


def main() -> None:
    server = new_server(config.server_config(api_mux=api_app, browser_mux=browser_app))
    if config.REDIRECT_HTTP_PORT:
        logger.info("Redirecting plain HTTP on port %s to https://%s", config.REDIRECT_HTTP_PORT, config.PUBLIC_HOSTNAME)
        uvloop.run(_serve_with_redirect(server))
        return
    server.listen_and_serve(config.HOST, config.PORT, loop="uvloop", log_level=config.LOG_LEVEL)


if __name__ == "__main__":
    main()
