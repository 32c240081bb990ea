"""
Formatting of Set-Cookie header values for cookies issued directly from ASGI middleware, where no Response object is available to call set_cookie on. The Secure attribute follows the server's configured secure context rather than the scheme of an individual request.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from http.cookies import SimpleCookie
from typing import Literal

SameSite = Literal["strict", "lax"]


@dataclass(frozen=True)
class CookiePolicy:
    name: str
    max_age: int
    secure: bool
    same_site: SameSite = "strict"
    http_only: bool = True
    path: str = "/"


def format_set_cookie(policy: CookiePolicy, value: str) -> str:
    cookie: SimpleCookie = SimpleCookie()
    cookie[policy.name] = value
    morsel = cookie[policy.name]
    morsel["path"] = policy.path
    morsel["max-age"] = policy.max_age
    morsel["samesite"] = policy.same_site
    if policy.http_only:
        morsel["httponly"] = True
    if policy.secure:
        morsel["secure"] = True
    return cookie.output(header="").strip()
