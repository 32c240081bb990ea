"""
Construction-time validation of a SafeWeb server configuration. Every cross-field constraint lives here so that an inconsistent configuration is rejected with a descriptive error before any handler chain is built.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging

from models.server_config import ServerConfig
from services.errors import IncompleteCORSConfig, InvalidAPIPrefix, InvalidCSRFSecret

logger = logging.getLogger(__name__)

CSRF_SECRET_BYTES = 32


def _check_cors_pair(cfg: ServerConfig) -> None:
    has_origins = bool(cfg.access_control_allow_origin)
    has_methods = bool(cfg.access_control_allow_methods)
    if has_origins and not has_methods:
        raise IncompleteCORSConfig("access_control_allow_methods")
    if has_methods and not has_origins:
        raise IncompleteCORSConfig("access_control_allow_origin")


def _check_csrf_secret(cfg: ServerConfig) -> None:
    if cfg.csrf_secret is None:
        return
    if len(cfg.csrf_secret) != CSRF_SECRET_BYTES:
        raise InvalidCSRFSecret(
            f"csrf_secret must be exactly {CSRF_SECRET_BYTES} bytes, got {len(cfg.csrf_secret)}"
        )


def _check_api_prefix(cfg: ServerConfig) -> None:
    prefix = cfg.api_prefix
    if len(prefix) < 2 or not prefix.startswith("/") or not prefix.endswith("/"):
        raise InvalidAPIPrefix(f"api_prefix must start and end with '/', got {prefix!r}")


_CHECKS = (_check_cors_pair, _check_csrf_secret, _check_api_prefix)


def validate_config(cfg: ServerConfig) -> ServerConfig:
    for check in _CHECKS:
        try:
            check(cfg)
        except ValueError as exc:
            logger.warning("server_config_rejected check=%s error=%s", check.__name__.lstrip("_"), exc)
            raise
    return cfg
