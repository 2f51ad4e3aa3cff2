# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- TenantMiddleware: Resolves tenant from header or token claims.
- limiter: slowapi rate limiter shared by the app and routes.
"""

from src.api.middleware.auth import AuthMiddleware
from src.api.middleware.rate_limit import limiter
from src.api.middleware.tenant import TenantMiddleware

__all__ = [
    "AuthMiddleware",
    "TenantMiddleware",
    "limiter",
]
