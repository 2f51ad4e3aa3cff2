# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for API dependencies."""

import time
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from src.api.dependencies import require_admin, require_auth, require_tenant
from src.api.middleware.auth import CurrentUser
from src.domains.auth.jwt import TokenPayload


def _user(user_type: str = "tenant_admin", tenant_code: str | None = "acme") -> CurrentUser:
    now = int(time.time())
    return CurrentUser(
        TokenPayload(
            sub="user-1",
            tenant_code=tenant_code,
            user_type=user_type,
            exp=now + 60,
            iat=now,
            jti="token-1",
        )
    )


def _request(tenant_code: str | None = None, user: CurrentUser | None = None):
    return SimpleNamespace(state=SimpleNamespace(tenant_code=tenant_code, user=user))


class TestRequireTenant:
    """Tests for require_tenant."""

    def test_returns_resolved_tenant(self):
        assert require_tenant(_request("acme", _user())) == "acme"

    def test_missing_tenant_is_bad_request(self):
        with pytest.raises(HTTPException) as exc_info:
            require_tenant(_request(None, _user()))

        assert exc_info.value.status_code == 400
        assert "X-Tenant-Code" in exc_info.value.detail

    def test_token_for_other_tenant_is_forbidden(self):
        with pytest.raises(HTTPException) as exc_info:
            require_tenant(_request("other_school", _user(tenant_code="acme")))

        assert exc_info.value.status_code == 403

    def test_token_without_tenant_claim_accepted(self):
        assert require_tenant(_request("acme", _user(tenant_code=None))) == "acme"

    def test_anonymous_request_keeps_tenant(self):
        assert require_tenant(_request("acme")) == "acme"


class TestRequireAuth:
    """Tests for require_auth and require_admin."""

    def test_anonymous_is_unauthorized(self):
        with pytest.raises(HTTPException) as exc_info:
            require_auth(_request("acme"))

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    def test_admin_passes(self):
        user = _user("school_admin")

        assert require_admin(_request("acme", user)) is user

    def test_non_admin_is_forbidden(self):
        with pytest.raises(HTTPException) as exc_info:
            require_admin(_request("acme", _user("student")))

        assert exc_info.value.status_code == 403
