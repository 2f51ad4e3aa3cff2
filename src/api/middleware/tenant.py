# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant resolution middleware.

This middleware resolves the tenant code from:
1. X-Tenant-Code header
2. JWT token claims (if authenticated)

The resolved code is stored in request.state for use by dependencies,
which open a session on that tenant's database.

Example:
    GET /api/v1/subjects
    X-Tenant-Code: school_abc
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.infrastructure.database import InvalidTenantCodeError, validate_tenant_code
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

# Header name for tenant code
TENANT_HEADER = "X-Tenant-Code"

# Paths that don't require tenant context
PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/health/ready",
    "/health/live",
    "/docs",
    "/redoc",
    "/openapi.json",
})


class TenantMiddleware(BaseHTTPMiddleware):
    """Middleware for resolving the tenant of a request.

    Must run after AuthMiddleware so the token claims are available.
    Malformed tenant codes are dropped; the request then continues without
    a tenant and tenant routes answer 400.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Resolve the tenant code and continue."""
        request.state.tenant_code = None
        clear_context()

        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        tenant_code = self._extract_tenant_code(request)
        if tenant_code:
            try:
                request.state.tenant_code = validate_tenant_code(tenant_code)
                bind_context(tenant_code=request.state.tenant_code)
                logger.debug("Tenant resolved: %s", request.state.tenant_code)
            except InvalidTenantCodeError:
                logger.warning("Rejected tenant code: %r", tenant_code)

        return await call_next(request)

    def _extract_tenant_code(self, request: Request) -> str | None:
        """Extract tenant code from the header, then from the token claims."""
        tenant_code = request.headers.get(TENANT_HEADER)
        if tenant_code:
            return tenant_code

        user = getattr(request.state, "user", None)
        if user is not None and user.tenant_code:
            return user.tenant_code

        return None


def get_tenant_from_request(request: Request) -> str | None:
    """Get the resolved tenant code from request state."""
    return getattr(request.state, "tenant_code", None)
