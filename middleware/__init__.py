"""
Policy middleware for SafeWeb request chains.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from .content_type import ContentTypeGateMiddleware
from .cors import CORSHeadersMiddleware
from .csrf import CSRFMiddleware, csrf_token
from .headers import BrowserSecurityHeadersMiddleware, build_content_security_policy

__all__ = [
    "ContentTypeGateMiddleware",
    "CORSHeadersMiddleware",
    "CSRFMiddleware",
    "csrf_token",
    "BrowserSecurityHeadersMiddleware",
    "build_content_security_policy",
]
