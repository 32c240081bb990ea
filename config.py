"""
Configuration management for the SafeWeb entrypoint, loading settings from environment variables with support for defaults, type conversion, and validation. This module defines a `Config` class that encapsulates the listener settings and the security policy knobs that are turned into a `ServerConfig` for the policy layer, with stricter requirements for production environments.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import base64
import binascii
import logging
import os
from typing import Any, List, Optional

from models.server_config import (
    DEFAULT_API_PREFIX,
    DEFAULT_STRICT_TRANSPORT_SECURITY_OPTIONS,
    ServerConfig,
)

logger = logging.getLogger(__name__)


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _to_list(value: Optional[str], default: Optional[List[str]] = None) -> List[str]:
    if value is None:
        return default or []
    parsed = [item.strip() for item in value.split(",") if item.strip()]
    return parsed if parsed else (default or [])


def _decode_secret(value: Optional[str]) -> Optional[bytes]:
    raw = (value or "").strip()
    if not raw:
        return None
    if len(raw) == 64:
        try:
            return bytes.fromhex(raw)
        except ValueError:
            pass
    try:
        return base64.b64decode(raw + "=" * (-len(raw) % 4), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("SAFEWEB_CSRF_SECRET must be hex or urlsafe base64") from exc


def _env_name() -> str:
    return (os.getenv("APP_ENV") or os.getenv("ENVIRONMENT") or "development").strip().lower()


def _is_production_env() -> bool:
    return _env_name() in {"prod", "production"}


class Config:
    def __init__(self) -> None:
        self.APP_ENV: str = _env_name()
        self.IS_PRODUCTION: bool = _is_production_env()

        # Server configuration
        self.HOST: str = os.getenv("HOST", "127.0.0.1")
        self.PORT: int = int(os.getenv("PORT", "8080"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")
        # Optional plain-HTTP listener that redirects to HTTPS (0 disables it)
        self.REDIRECT_HTTP_PORT: int = int(os.getenv("SAFEWEB_REDIRECT_HTTP_PORT", "0"))
        self.PUBLIC_HOSTNAME: str = os.getenv("SAFEWEB_PUBLIC_HOSTNAME", "")

        # Policy layer
        self.SECURE_CONTEXT: bool = _to_bool(os.getenv("SAFEWEB_SECURE_CONTEXT"), default=self.IS_PRODUCTION)
        self.CSP_ALLOW_INLINE_STYLES: bool = _to_bool(os.getenv("SAFEWEB_CSP_ALLOW_INLINE_STYLES"), default=False)
        self.COOKIES_SAMESITE_LAX: bool = _to_bool(os.getenv("SAFEWEB_COOKIES_SAMESITE_LAX"), default=False)
        self.API_PREFIX: str = os.getenv("SAFEWEB_API_PREFIX", DEFAULT_API_PREFIX)
        self.HSTS_OPTIONS: str = os.getenv("SAFEWEB_HSTS_OPTIONS", DEFAULT_STRICT_TRANSPORT_SECURITY_OPTIONS)

        # CORS is disabled unless both lists are set
        self.CORS_ALLOW_ORIGINS: List[str] = _to_list(os.getenv("SAFEWEB_CORS_ALLOW_ORIGINS"))
        self.CORS_ALLOW_METHODS: List[str] = [
            m.upper() for m in _to_list(os.getenv("SAFEWEB_CORS_ALLOW_METHODS"))
        ]
        self.CORS_SIMPLE_REQUESTS: bool = _to_bool(os.getenv("SAFEWEB_CORS_SIMPLE_REQUESTS"), default=False)

        # CSRF
        self.CSRF_SECRET: Optional[bytes] = _decode_secret(os.getenv("SAFEWEB_CSRF_SECRET"))
        self.CSRF_TRUSTED_ORIGINS: List[str] = _to_list(os.getenv("SAFEWEB_CSRF_TRUSTED_ORIGINS"))

        self.validate()

    def validate(self) -> None:
        if not 0 < self.PORT < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        if not 0 <= self.REDIRECT_HTTP_PORT < 65536:
            raise ValueError("SAFEWEB_REDIRECT_HTTP_PORT must be between 0 and 65535")
        if self.REDIRECT_HTTP_PORT and not self.PUBLIC_HOSTNAME:
            raise ValueError("SAFEWEB_PUBLIC_HOSTNAME is required when SAFEWEB_REDIRECT_HTTP_PORT is set")

        if self.CSRF_SECRET is None:
            if self.IS_PRODUCTION:
                raise ValueError("SAFEWEB_CSRF_SECRET must be configured in production")
            logger.warning(
                "SAFEWEB_CSRF_SECRET not set; a random key is generated per process and CSRF cookies will not survive restarts.",
            )

        if self.IS_PRODUCTION and not self.SECURE_CONTEXT:
            raise ValueError("SAFEWEB_SECURE_CONTEXT must be enabled in production")

    def server_config(self, api_mux: Any = None, browser_mux: Any = None) -> ServerConfig:
        return ServerConfig(
            api_mux=api_mux,
            browser_mux=browser_mux,
            access_control_allow_origin=tuple(self.CORS_ALLOW_ORIGINS),
            access_control_allow_methods=tuple(self.CORS_ALLOW_METHODS),
            secure_context=self.SECURE_CONTEXT,
            csp_allow_inline_styles=self.CSP_ALLOW_INLINE_STYLES,
            api_prefix=self.API_PREFIX,
            csrf_secret=self.CSRF_SECRET,
            cookies_same_site_lax=self.COOKIES_SAMESITE_LAX,
            strict_transport_security_options=self.HSTS_OPTIONS,
            csrf_trusted_origins=tuple(self.CSRF_TRUSTED_ORIGINS),
            cors_on_simple_requests=self.CORS_SIMPLE_REQUESTS,
        )


config = Config()
