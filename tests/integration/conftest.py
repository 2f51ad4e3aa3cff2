# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API integration tests.

Requests go through the full application (middleware, dependencies,
exception handlers) with the tenant database manager replaced by one that
hands out the test session.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from src.api import dependencies
from src.api.app import create_app
from src.core.config import get_settings
from src.domains.auth.jwt import JWTManager

TENANT_CODE = "test_tenant"


class StaticSessionManager:
    """Tenant database manager serving one session for every tenant."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.tenant_codes: list[str] = []

    @asynccontextmanager
    async def get_session(self, tenant_code: str) -> AsyncIterator[AsyncSession]:
        self.tenant_codes.append(tenant_code)
        yield self.session

    async def check_connection(self, tenant_code: str) -> bool:
        return True

    async def close_all(self) -> None:
        pass


@pytest.fixture
def app() -> FastAPI:
    """Create the application under test."""
    return create_app()


@pytest.fixture
def session_manager(db_session: AsyncSession, monkeypatch) -> StaticSessionManager:
    manager = StaticSessionManager(db_session)
    monkeypatch.setattr(dependencies, "_tenant_db_manager", manager)
    return manager


@pytest_asyncio.fixture
async def client(app: FastAPI, session_manager) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client bound to the application."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_token(
    user_type: str = "tenant_admin",
    tenant_code: str | None = TENANT_CODE,
) -> str:
    """Create an access token signed with the application secret."""
    return JWTManager(get_settings().jwt).create_access_token(
        user_id=str(uuid4()),
        tenant_code=tenant_code,
        user_type=user_type,
    )


@pytest.fixture
def token_factory():
    """Factory for access tokens with a chosen user type and tenant claim."""
    return make_token


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {
        "Authorization": f"Bearer {make_token('tenant_admin')}",
        "X-Tenant-Code": TENANT_CODE,
    }


@pytest.fixture
def reader_headers() -> dict[str, str]:
    """Headers for a non-admin user of the same tenant."""
    return {
        "Authorization": f"Bearer {make_token('student')}",
        "X-Tenant-Code": TENANT_CODE,
    }
