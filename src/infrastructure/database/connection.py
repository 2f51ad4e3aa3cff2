# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database engine helpers using SQLAlchemy async.

Uses the SQLAlchemy 2.0 async API. Production deployments run on PostgreSQL
with the asyncpg driver; local development and tests may use SQLite through
aiosqlite.

Example:
    from src.infrastructure.database.connection import create_engine_for_url

    engine = create_engine_for_url(url, pool_size=10, max_overflow=10)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def create_engine_for_url(
    url: str,
    pool_size: int = 10,
    max_overflow: int = 10,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async engine for a database URL.

    Pool sizing only applies to server databases; SQLite engines use the
    driver's default pool.

    Args:
        url: Async SQLAlchemy database URL.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Whether to log SQL statements.

    Returns:
        Configured AsyncEngine.

    Raises:
        DatabaseError: If engine creation fails.
    """
    try:
        if url.startswith("sqlite"):
            return create_async_engine(url, echo=echo)

        return create_async_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
            echo=echo,
        )
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create database engine", e) from e


async def check_engine_connection(engine: AsyncEngine) -> bool:
    """Check if a database is reachable.

    Performs a simple query to verify database connectivity.

    Args:
        engine: Engine to check.

    Returns:
        True if the database is reachable, False otherwise.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
