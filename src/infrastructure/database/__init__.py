# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

This package provides SQLAlchemy async database connections for tenant
databases. Every tenant owns an isolated database addressed through the
configured URL template.

Example:
    from src.infrastructure.database import TenantDatabaseManager

    tenant_manager = TenantDatabaseManager(settings)
    async with tenant_manager.get_session("acme") as session:
        result = await session.execute(select(Subject))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_engine_connection,
    create_engine_for_url,
)
from src.infrastructure.database.tenant_manager import (
    InvalidTenantCodeError,
    TenantDatabaseManager,
    validate_tenant_code,
)

__all__ = [
    "DatabaseError",
    "check_engine_connection",
    "create_engine_for_url",
    "InvalidTenantCodeError",
    "TenantDatabaseManager",
    "validate_tenant_code",
]
