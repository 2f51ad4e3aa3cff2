# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get tenant database sessions
- Get authenticated users
- Get tenant context

Example:
    @router.get("/subjects")
    async def list_subjects(
        db: AsyncSession = Depends(get_tenant_db),
        current_user: CurrentUser = Depends(require_auth),
    ):
        ...
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import CurrentUser, get_current_user
from src.api.middleware.tenant import TENANT_HEADER, get_tenant_from_request
from src.core.config import get_settings
from src.infrastructure.database.tenant_manager import TenantDatabaseManager

logger = logging.getLogger(__name__)

# Tenant database manager singleton
_tenant_db_manager: TenantDatabaseManager | None = None


async def init_db() -> None:
    """Initialize the tenant database manager."""
    global _tenant_db_manager
    _tenant_db_manager = TenantDatabaseManager(get_settings())


async def close_db() -> None:
    """Close all tenant database connections."""
    global _tenant_db_manager

    if _tenant_db_manager:
        await _tenant_db_manager.close_all()
        _tenant_db_manager = None


def get_tenant_db_manager() -> TenantDatabaseManager:
    """Get the tenant database manager singleton.

    Raises:
        HTTPException: If not initialized.
    """
    if _tenant_db_manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tenant database manager not initialized",
        )
    return _tenant_db_manager


# =========================================================================
# Tenant Dependencies
# =========================================================================


def require_tenant(request: Request) -> str:
    """Require tenant context.

    A token issued for one tenant cannot be used against another.

    Args:
        request: HTTP request.

    Returns:
        Tenant code.

    Raises:
        HTTPException: If no tenant context or the token belongs to another tenant.
    """
    tenant_code = get_tenant_from_request(request)
    if not tenant_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Tenant context required. Provide {TENANT_HEADER} header.",
        )

    user = get_current_user(request)
    if user is not None and user.tenant_code and user.tenant_code.lower() != tenant_code:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token does not belong to this tenant",
        )

    return tenant_code


async def get_tenant_db(
    tenant_code: str = Depends(require_tenant),
) -> AsyncGenerator[AsyncSession, None]:
    """Get tenant database session.

    Args:
        tenant_code: Resolved tenant code.

    Yields:
        AsyncSession for tenant database.
    """
    manager = get_tenant_db_manager()

    async with manager.get_session(tenant_code) as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require admin user (tenant_admin or school_admin).

    Raises:
        HTTPException: If not authenticated or not admin.
    """
    user = require_auth(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user

