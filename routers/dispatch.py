"""
Root dispatcher that classifies every request by path as API or browser traffic and forwards it to the policy chain bound to that class. Lifespan events are relayed to every mounted chain and acknowledged once all of them have answered.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Mapping, Optional

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RouteClass(str, Enum):
    API = "api"
    BROWSER = "browser"


def classify(path: str, api_prefix: str) -> RouteClass:
    if path == api_prefix.rstrip("/") or path.startswith(api_prefix):
        return RouteClass.API
    return RouteClass.BROWSER


LIFESPAN_EXITED = "safeweb.lifespan.exited"


class _LifespanChild:
    """Drives one mounted app through the lifespan protocol over in-memory queues."""

    def __init__(self, name: str, app: ASGIApp, scope: Scope) -> None:
        self.name = name
        self.supported = True
        self._inbox: asyncio.Queue = asyncio.Queue()
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._task = asyncio.create_task(self._run(app, dict(scope)))

    async def _run(self, app: ASGIApp, scope: Scope) -> None:
        try:
            await app(scope, self._inbox.get, self._outbox.put)
        except Exception as exc:
            logger.debug("lifespan_app_exited route=%s error=%s", self.name, exc)
        await self._outbox.put({"type": LIFESPAN_EXITED})

    async def step(self, message: Message) -> Optional[Message]:
        if not self.supported:
            return None
        await self._inbox.put(message)
        reply = await self._outbox.get()
        if reply["type"] == LIFESPAN_EXITED:
            # app does not speak lifespan, or finished early
            self.supported = False
            return None
        return reply

    async def close(self) -> None:
        if not self._task.done():
            self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)


class RouteDispatcher:

    def __init__(
        self,
        api_app: Optional[ASGIApp],
        browser_app: Optional[ASGIApp],
        api_prefix: str,
    ) -> None:
        self.api_prefix = api_prefix
        self._routes: Mapping[RouteClass, Optional[ASGIApp]] = {
            RouteClass.API: api_app,
            RouteClass.BROWSER: browser_app,
        }

    def classify(self, path: str) -> RouteClass:
        if self._routes[RouteClass.API] is None:
            return RouteClass.BROWSER
        return classify(path, self.api_prefix)

    async def _relay_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        children = [
            _LifespanChild(route.value, app, scope)
            for route, app in self._routes.items()
            if app is not None
        ]
        try:
            while True:
                message = await receive()
                phase = message["type"]
                if phase not in ("lifespan.startup", "lifespan.shutdown"):
                    continue
                failures = []
                for child in children:
                    reply = await child.step(message)
                    if reply is not None and reply["type"].endswith(".failed"):
                        failures.append(f"{child.name}: {reply.get('message', '')}")
                if failures:
                    logger.error("lifespan_failed phase=%s errors=%s", phase, "; ".join(failures))
                    await send({"type": f"{phase}.failed", "message": "; ".join(failures)})
                    return
                await send({"type": f"{phase}.complete"})
                if phase == "lifespan.shutdown":
                    return
        finally:
            for child in children:
                await child.close()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._relay_lifespan(scope, receive, send)
            return

        route = self.classify(scope.get("path", "/"))
        app = self._routes[route]
        if app is None:
            logger.debug("no_handler route=%s path=%s", route.value, scope.get("path"))
            if scope["type"] == "http":
                await PlainTextResponse("404 page not found", status_code=404)(scope, receive, send)
            else:
                await send({"type": "websocket.close", "code": 1000})
            return
        await app(scope, receive, send)
