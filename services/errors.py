"""
Error taxonomy for SafeWeb: configuration errors raised while a server is being built, request rejections raised inside the policy middleware and mapped to a single HTTP status each, and lifecycle misuse of a running server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations


class ConfigError(ValueError):
    pass


class IncompleteCORSConfig(ConfigError):
    def __init__(self, missing: str) -> None:
        super().__init__(
            f"must set both access_control_allow_origin and access_control_allow_methods ({missing} is empty)"
        )
        self.missing = missing


class InvalidCSRFSecret(ConfigError):
    pass


class InvalidAPIPrefix(ConfigError):
    pass


class RequestRejected(Exception):
    status_code: int = 400
    detail: str = "Bad Request"

    def __init__(self, detail: str | None = None) -> None:
        if detail:
            self.detail = detail
        super().__init__(self.detail)


class UnsupportedMediaType(RequestRejected):
    status_code = 400
    detail = "invalid content type"

    def __init__(self, content_type: str, expected: str) -> None:
        super().__init__(f"invalid content type {content_type or '<none>'!r}, expected {expected!r}")
        self.content_type = content_type
        self.expected = expected


class CSRFForbidden(RequestRejected):
    status_code = 403
    detail = "Forbidden - CSRF token invalid"

    def __init__(self, reason: str) -> None:
        super().__init__()
        self.reason = reason


class RequestBodyTooLarge(RequestRejected):
    status_code = 413
    detail = "Request body too large"

    def __init__(self, max_bytes: int) -> None:
        super().__init__()
        self.max_bytes = max_bytes


class ServerStateError(RuntimeError):
    pass
