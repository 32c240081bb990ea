"""
Pydantic model for the immutable SafeWeb server configuration supplied once at construction time, holding the two terminal ASGI handlers and the security knobs that shape their policy chains.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_PREFIX = "/api/"
DEFAULT_STRICT_TRANSPORT_SECURITY_OPTIONS = "max-age=31536000"

DESC_API_MUX = "ASGI app serving machine-to-machine routes under the API prefix"
DESC_BROWSER_MUX = "ASGI app serving every non-API route"
DESC_ALLOW_ORIGIN = "Origins allowed by CORS preflight responses on API routes"
DESC_ALLOW_METHODS = "Methods allowed by CORS preflight responses on API routes"
DESC_SECURE_CONTEXT = "Whether the deployment is served over HTTPS"
DESC_INLINE_STYLES = "Relax the Content-Security-Policy to allow inline style attributes"
DESC_API_PREFIX = "Reserved path prefix routed to the API handler"
DESC_CSRF_SECRET = "32-byte key used to seal the CSRF session cookie"
DESC_SAMESITE_LAX = "Issue the CSRF session cookie with SameSite=Lax instead of Strict"
DESC_HSTS = "Strict-Transport-Security value sent on browser responses in a secure context"
DESC_TRUSTED_ORIGINS = "Additional origins accepted by the CSRF referer check"
DESC_CORS_SIMPLE = "Also send Access-Control-Allow-Origin on non-preflight API requests"


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    api_mux: Optional[Any] = Field(None, description=DESC_API_MUX)
    browser_mux: Optional[Any] = Field(None, description=DESC_BROWSER_MUX)
    access_control_allow_origin: Tuple[str, ...] = Field(default=(), description=DESC_ALLOW_ORIGIN)
    access_control_allow_methods: Tuple[str, ...] = Field(default=(), description=DESC_ALLOW_METHODS)
    secure_context: bool = Field(False, description=DESC_SECURE_CONTEXT)
    csp_allow_inline_styles: bool = Field(False, description=DESC_INLINE_STYLES)
    api_prefix: str = Field(DEFAULT_API_PREFIX, description=DESC_API_PREFIX)
    csrf_secret: Optional[bytes] = Field(None, description=DESC_CSRF_SECRET)
    cookies_same_site_lax: bool = Field(False, description=DESC_SAMESITE_LAX)
    strict_transport_security_options: str = Field(
        DEFAULT_STRICT_TRANSPORT_SECURITY_OPTIONS, description=DESC_HSTS
    )
    csrf_trusted_origins: Tuple[str, ...] = Field(default=(), description=DESC_TRUSTED_ORIGINS)
    cors_on_simple_requests: bool = Field(False, description=DESC_CORS_SIMPLE)

    @property
    def cors_enabled(self) -> bool:
        return bool(self.access_control_allow_origin) and bool(self.access_control_allow_methods)
