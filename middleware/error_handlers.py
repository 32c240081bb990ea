"""
Shared rejection helpers for the policy middleware.
Maps a RequestRejected error to its plain-text HTTP response so that every middleware terminates the chain the same way.


Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging

from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from services.errors import RequestRejected

logger = logging.getLogger(__name__)


def rejection_response(exc: RequestRejected) -> PlainTextResponse:
    return PlainTextResponse(exc.detail, status_code=exc.status_code)


async def reject(exc: RequestRejected, scope: Scope, receive: Receive, send: Send) -> None:
    logger.warning(
        "request_rejected kind=%s status=%s method=%s path=%s",
        type(exc).__name__, exc.status_code, scope.get("method"), scope.get("path"),
    )
    await rejection_response(exc)(scope, receive, send)
