"""
Plain-HTTP listener handler that permanently redirects every request to the HTTPS origin of the deployment.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send


def redirect_http(fqdn: str) -> ASGIApp:
    host = fqdn.strip().rstrip("/")
    if not host:
        raise ValueError("fqdn must not be empty")

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return
        target = f"https://{host}{scope.get('raw_path', b'').decode('latin-1') or scope.get('path', '/')}"
        query = scope.get("query_string", b"")
        if query:
            target = f"{target}?{query.decode('latin-1')}"
        await RedirectResponse(target, status_code=301)(scope, receive, send)

    return app
