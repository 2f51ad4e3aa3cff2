# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting using slowapi.

Every route gets the default per-minute limit through SlowAPIMiddleware.
Bulk operations are decorated with a stricter limit. Limits are counted per
tenant and user, or per IP address for anonymous requests.

Example:
    @router.post("/bulk-import")
    @limiter.limit(RATE_LIMIT_BULK)
    async def bulk_import(request: Request, ...):
        ...
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.core.config import get_settings
from src.models.common import ErrorResponse

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Uses user ID if authenticated, otherwise the IP address, prefixed with
    the tenant code when one was resolved.

    Args:
        request: HTTP request.

    Returns:
        Client identifier string.
    """
    user = getattr(request.state, "user", None)
    tenant_code = getattr(request.state, "tenant_code", None)

    parts = []

    if tenant_code:
        parts.append(f"tenant:{tenant_code}")

    if user:
        parts.append(f"user:{user.id}")
    else:
        parts.append(f"ip:{get_remote_address(request)}")

    return ":".join(parts)


settings = get_settings()
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    storage_uri=settings.rate_limit.storage_uri,
    enabled=settings.rate_limit.enabled,
)

RATE_LIMIT_BULK = f"{settings.rate_limit.bulk_per_minute}/minute"


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> JSONResponse:
    """Handle rate limit exceeded errors.

    Returns a 429 response in the standard error envelope.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )

    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            message="Too many requests. Please try again later.",
        ).model_dump(exclude_none=True),
        headers={"Retry-After": "60"},
    )
