"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os

_SAFEWEB_VARS = (
    "SAFEWEB_SECURE_CONTEXT",
    "SAFEWEB_CSP_ALLOW_INLINE_STYLES",
    "SAFEWEB_COOKIES_SAMESITE_LAX",
    "SAFEWEB_CORS_ALLOW_ORIGINS",
    "SAFEWEB_CORS_ALLOW_METHODS",
    "SAFEWEB_CORS_SIMPLE_REQUESTS",
    "SAFEWEB_CSRF_TRUSTED_ORIGINS",
    "SAFEWEB_API_PREFIX",
    "SAFEWEB_HSTS_OPTIONS",
    "SAFEWEB_REDIRECT_HTTP_PORT",
    "SAFEWEB_PUBLIC_HOSTNAME",
)


def ensure_test_env() -> None:
    os.environ["APP_ENV"] = "test"
    os.environ.setdefault("LOG_LEVEL", "warning")
    os.environ.setdefault("SAFEWEB_CSRF_SECRET", "00" * 32)
    for name in _SAFEWEB_VARS:
        os.environ.pop(name, None)
