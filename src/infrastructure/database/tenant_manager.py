# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant database connection management.

Each tenant has its own database. The connection URL is derived from the
configured URL template, and engines are created lazily on first access and
cached for subsequent requests.

Example:
    manager = TenantDatabaseManager(settings)

    async with manager.get_session("acme") as session:
        result = await session.execute(select(Subject))
        subjects = result.scalars().all()
"""

import logging
import re
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.infrastructure.database.connection import check_engine_connection, create_engine_for_url
from src.infrastructure.database.models import Base

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)

# Tenant codes are substituted into database URLs
TENANT_CODE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_]{1,49}$")


class InvalidTenantCodeError(Exception):
    """Raised when a tenant code cannot be used to address a database."""

    def __init__(self, tenant_code: str) -> None:
        """Initialize the error.

        Args:
            tenant_code: The rejected tenant code.
        """
        self.tenant_code = tenant_code
        super().__init__(f"Invalid tenant code: {tenant_code!r}")


def validate_tenant_code(tenant_code: str) -> str:
    """Normalize and validate a tenant code.

    Args:
        tenant_code: Raw tenant code.

    Returns:
        Lower-cased tenant code.

    Raises:
        InvalidTenantCodeError: If the code contains unsupported characters.
    """
    normalized = tenant_code.strip().lower()
    if not TENANT_CODE_PATTERN.match(normalized):
        raise InvalidTenantCodeError(tenant_code)
    return normalized


class TenantDatabaseManager:
    """Manages database connections for multiple tenants.

    Attributes:
        settings: Application settings containing database configuration.
    """

    def __init__(self, settings: "Settings") -> None:
        """Initialize the tenant database manager.

        Args:
            settings: Application settings containing database configuration.
        """
        self._settings = settings
        self._engines: dict[str, AsyncEngine] = {}
        self._sessionmakers: dict[str, async_sessionmaker[AsyncSession]] = {}

    def _get_or_create_engine(self, tenant_code: str) -> AsyncEngine:
        """Get or create an async engine for a tenant.

        Args:
            tenant_code: Unique identifier for the tenant.

        Returns:
            AsyncEngine for the tenant database.

        Raises:
            InvalidTenantCodeError: If the tenant code is malformed.
        """
        tenant_code = validate_tenant_code(tenant_code)

        if tenant_code not in self._engines:
            tenant_db = self._settings.tenant_db
            self._engines[tenant_code] = create_engine_for_url(
                tenant_db.url_for(tenant_code),
                pool_size=tenant_db.pool_size,
                max_overflow=tenant_db.max_overflow,
                echo=self._settings.debug and self._settings.log_level == "DEBUG",
            )
            logger.info("Created database engine for tenant %s", tenant_code)

        return self._engines[tenant_code]

    def _get_or_create_sessionmaker(
        self, tenant_code: str
    ) -> async_sessionmaker[AsyncSession]:
        """Get or create a sessionmaker for a tenant.

        Args:
            tenant_code: Unique identifier for the tenant.

        Returns:
            async_sessionmaker for the tenant database.
        """
        tenant_code = validate_tenant_code(tenant_code)

        if tenant_code not in self._sessionmakers:
            self._sessionmakers[tenant_code] = async_sessionmaker(
                bind=self._get_or_create_engine(tenant_code),
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

        return self._sessionmakers[tenant_code]

    @asynccontextmanager
    async def get_session(self, tenant_code: str) -> AsyncIterator[AsyncSession]:
        """Get an async session for a tenant database.

        The session is rolled back if the caller raises. Services commit
        their own units of work.

        Args:
            tenant_code: Unique identifier for the tenant.

        Yields:
            AsyncSession for database operations.

        Raises:
            InvalidTenantCodeError: If the tenant code is malformed.
        """
        sessionmaker = self._get_or_create_sessionmaker(tenant_code)

        async with sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    def get_engine(self, tenant_code: str) -> AsyncEngine:
        """Get the engine for a tenant, creating it if needed."""
        return self._get_or_create_engine(tenant_code)

    async def check_connection(self, tenant_code: str) -> bool:
        """Check if a tenant database is reachable.

        Args:
            tenant_code: Unique identifier for the tenant.

        Returns:
            True if the database answers a trivial query.
        """
        return await check_engine_connection(self._get_or_create_engine(tenant_code))

    async def create_schema(self, tenant_code: str) -> None:
        """Create all tables for a tenant database.

        Intended for development and seeding. Production schemas are managed
        with Alembic migrations.

        Args:
            tenant_code: Unique identifier for the tenant.
        """
        engine = self._get_or_create_engine(tenant_code)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema created for tenant %s", tenant_code)

    async def _close_tenant_connections(self, tenant_code: str) -> None:
        """Dispose the engine of one tenant."""
        engine = self._engines.pop(tenant_code, None)
        self._sessionmakers.pop(tenant_code, None)
        if engine is not None:
            await engine.dispose()

    async def close_all(self) -> None:
        """Close all tenant database connections.

        This should be called at application shutdown to properly
        close all connection pools.
        """
        for tenant_code in list(self._engines.keys()):
            await self._close_tenant_connections(tenant_code)
