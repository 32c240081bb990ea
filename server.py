"""
SafeWeb server composition root. Validates a ServerConfig, builds the immutable API and browser policy chains around the caller's handlers, installs them behind the route dispatcher and runs the result under uvicorn.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import secrets
import socket
from typing import Any, Optional

import uvicorn
from starlette.types import ASGIApp, Receive, Scope, Send

from middleware.content_type import FORM_MEDIA_TYPE, JSON_MEDIA_TYPE, ContentTypeGateMiddleware
from middleware.cors import CORSHeadersMiddleware
from middleware.csrf import COOKIE_NAME, CSRFMiddleware
from middleware.headers import BrowserSecurityHeadersMiddleware
from models.server_config import ServerConfig
from routers.dispatch import RouteDispatcher
from services.common.cookies import CookiePolicy
from services.config_validator import CSRF_SECRET_BYTES, validate_config
from services.csrf_tokens import DEFAULT_MAX_AGE_SECONDS, FernetCSRFProtector
from services.errors import ServerStateError

logger = logging.getLogger(__name__)


def _api_chain(cfg: ServerConfig) -> Optional[ASGIApp]:
    if cfg.api_mux is None:
        return None
    app: ASGIApp = ContentTypeGateMiddleware(cfg.api_mux, allowed=JSON_MEDIA_TYPE)
    return CORSHeadersMiddleware(
        app,
        allow_origins=cfg.access_control_allow_origin,
        allow_methods=cfg.access_control_allow_methods,
        simple_requests=cfg.cors_on_simple_requests,
    )


def _browser_chain(cfg: ServerConfig) -> Optional[ASGIApp]:
    if cfg.browser_mux is None:
        return None
    cookie = CookiePolicy(
        name=COOKIE_NAME,
        max_age=DEFAULT_MAX_AGE_SECONDS,
        secure=cfg.secure_context,
        same_site="lax" if cfg.cookies_same_site_lax else "strict",
    )
    app: ASGIApp = CSRFMiddleware(
        cfg.browser_mux,
        protector=FernetCSRFProtector(cfg.csrf_secret, max_age_seconds=DEFAULT_MAX_AGE_SECONDS),
        cookie=cookie,
        trusted_origins=cfg.csrf_trusted_origins,
    )
    app = ContentTypeGateMiddleware(app, allowed=FORM_MEDIA_TYPE)
    return BrowserSecurityHeadersMiddleware(
        app,
        allow_inline_styles=cfg.csp_allow_inline_styles,
        strict_transport_security=cfg.strict_transport_security_options if cfg.secure_context else None,
    )


class Server:

    def __init__(self, cfg: ServerConfig) -> None:
        cfg = validate_config(cfg)
        if cfg.csrf_secret is None:
            cfg = cfg.model_copy(update={"csrf_secret": secrets.token_bytes(CSRF_SECRET_BYTES)})
        self.config = cfg
        self.api_chain = _api_chain(cfg)
        self.browser_chain = _browser_chain(cfg)
        self.handler = RouteDispatcher(self.api_chain, self.browser_chain, cfg.api_prefix)
        self._uvicorn: Optional[uvicorn.Server] = None
        logger.info(
            "safeweb_server_built api=%s browser=%s cors=%s secure_context=%s",
            self.api_chain is not None, self.browser_chain is not None,
            cfg.cors_enabled, cfg.secure_context,
        )

    @classmethod
    def create(cls, cfg: ServerConfig) -> Server:
        return cls(cfg)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.handler(scope, receive, send)

    @property
    def running(self) -> bool:
        return self._uvicorn is not None and not self._uvicorn.should_exit

    def _new_uvicorn(self, **options: Any) -> uvicorn.Server:
        if self._uvicorn is not None:
            raise ServerStateError("server already started")
        options.setdefault("log_level", "info")
        options.setdefault("proxy_headers", False)
        self._uvicorn = uvicorn.Server(uvicorn.Config(self.handler, **options))
        return self._uvicorn

    def listen_and_serve(self, host: str = "127.0.0.1", port: int = 8080, **options: Any) -> None:
        server = self._new_uvicorn(host=host, port=port, **options)
        logger.info("safeweb_listening host=%s port=%s", host, port)
        try:
            server.run()
        finally:
            self._uvicorn = None

    async def serve(self, sock: Optional[socket.socket] = None, **options: Any) -> None:
        server = self._new_uvicorn(**options)
        try:
            if sock is None:
                logger.info("safeweb_listening host=%s port=%s", server.config.host, server.config.port)
                await server.serve()
            else:
                logger.info("safeweb_serving socket=%s", sock.getsockname())
                await server.serve(sockets=[sock])
        finally:
            # stopped servers can be started again
            self._uvicorn = None

    def shutdown(self) -> None:
        if self._uvicorn is None:
            raise ServerStateError("server not started")
        self._uvicorn.should_exit = True

    def close(self) -> None:
        if self._uvicorn is None:
            raise ServerStateError("server not started")
        self._uvicorn.should_exit = True
        self._uvicorn.force_exit = True


def new_server(cfg: ServerConfig) -> Server:
    return Server(cfg)
