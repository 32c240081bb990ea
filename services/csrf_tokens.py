"""
CSRF token primitive used by the browser CSRF guard. A random per-session secret is sealed into a cookie with Fernet authenticated encryption, and every minted request token is that secret masked with a fresh one-time pad so tokens never repeat across responses while still validating against the same cookie.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from typing import Optional, Protocol

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 32
DEFAULT_MAX_AGE_SECONDS = 12 * 60 * 60


class CSRFProtector(Protocol):
    def new_secret(self) -> bytes: ...
    def seal(self, secret: bytes) -> str: ...
    def unseal(self, cookie_value: str) -> Optional[bytes]: ...
    def issue_token(self, secret: bytes) -> str: ...
    def validate(self, secret: bytes, token: str) -> bool: ...


def _xor(left: bytes, right: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(left, right))


class FernetCSRFProtector:

    def __init__(self, key: bytes, max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS) -> None:
        if len(key) != 32:
            raise ValueError("CSRF key must be 32 bytes")
        self._fernet = Fernet(base64.urlsafe_b64encode(key))
        self.max_age_seconds = int(max_age_seconds)

    def new_secret(self) -> bytes:
        return secrets.token_bytes(TOKEN_LENGTH)

    def seal(self, secret: bytes) -> str:
        # padding stripped so the value never needs cookie quoting
        return self._fernet.encrypt(secret).decode("ascii").rstrip("=")

    def unseal(self, cookie_value: str) -> Optional[bytes]:
        if not cookie_value:
            return None
        padded = cookie_value + "=" * (-len(cookie_value) % 4)
        try:
            secret = self._fernet.decrypt(padded.encode("ascii"), ttl=self.max_age_seconds)
        except (InvalidToken, UnicodeEncodeError):
            logger.debug("csrf_cookie_unseal_failed")
            return None
        if len(secret) != TOKEN_LENGTH:
            return None
        return secret

    def issue_token(self, secret: bytes) -> str:
        pad = secrets.token_bytes(TOKEN_LENGTH)
        return base64.urlsafe_b64encode(pad + _xor(pad, secret)).decode("ascii")

    def validate(self, secret: bytes, token: str) -> bool:
        if not token or not secret:
            return False
        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii"))
        except (binascii.Error, ValueError, UnicodeEncodeError):
            return False
        if len(raw) != TOKEN_LENGTH * 2:
            return False
        pad, masked = raw[:TOKEN_LENGTH], raw[TOKEN_LENGTH:]
        return secrets.compare_digest(_xor(pad, masked), secret)
