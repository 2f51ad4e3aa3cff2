# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest

from src.core.config.settings import (
    APISettings,
    CORSSettings,
    JWTSettings,
    PrerequisiteSettings,
    RateLimitSettings,
    Settings,
    TenantDatabaseSettings,
    clear_settings_cache,
    get_settings,
)


class TestTenantDatabaseSettings:
    """Tests for TenantDatabaseSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = TenantDatabaseSettings()

        assert settings.url_template.startswith("postgresql+asyncpg://")
        assert "{tenant_code}" in settings.url_template
        assert settings.default_tenant == "default"
        assert settings.pool_size == 10
        assert settings.max_overflow == 10

    def test_url_for(self) -> None:
        """Test the tenant code is substituted into the template."""
        settings = TenantDatabaseSettings(
            url_template="postgresql+asyncpg://u:p@db:5432/school_{tenant_code}"
        )

        assert settings.url_for("acme") == "postgresql+asyncpg://u:p@db:5432/school_acme"

    def test_loads_from_environment(self) -> None:
        """Test that settings load from environment variables."""
        env = {
            "TENANT_DB_URL_TEMPLATE": "sqlite+aiosqlite:///./{tenant_code}.db",
            "TENANT_DB_DEFAULT_TENANT": "demo",
            "TENANT_DB_POOL_SIZE": "3",
        }

        with patch.dict(os.environ, env, clear=False):
            settings = TenantDatabaseSettings()

        assert settings.url_for("demo") == "sqlite+aiosqlite:///./demo.db"
        assert settings.default_tenant == "demo"
        assert settings.pool_size == 3


class TestJWTSettings:
    """Tests for JWTSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = JWTSettings()

        assert settings.secret_key.get_secret_value() == "change-this-in-production"
        assert settings.algorithm == "HS256"
        assert settings.access_token_expire_minutes == 30

    def test_expiry_alias(self) -> None:
        """Test expiry is read from ACCESS_TOKEN_EXPIRE_MINUTES."""
        with patch.dict(os.environ, {"ACCESS_TOKEN_EXPIRE_MINUTES": "5"}, clear=False):
            settings = JWTSettings()

        assert settings.access_token_expire_minutes == 5


class TestRateLimitSettings:
    """Tests for RateLimitSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = RateLimitSettings()

        assert settings.enabled is True
        assert settings.requests_per_minute == 120
        assert settings.bulk_per_minute == 30
        assert settings.storage_uri == "memory://"

    def test_disable_from_environment(self) -> None:
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": "false"}, clear=False):
            settings = RateLimitSettings()

        assert settings.enabled is False


class TestCORSSettings:
    """Tests for CORSSettings."""

    def test_origins_list_property(self) -> None:
        """Test origins_list property parses comma-separated origins."""
        settings = CORSSettings(origins="http://a.com, http://b.com,,")

        assert settings.origins_list == ["http://a.com", "http://b.com"]


class TestAPISettings:
    """Tests for APISettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = APISettings()

        assert settings.host == "0.0.0.0"
        assert settings.port == 8000
        assert settings.reload is False


class TestPrerequisiteSettings:
    """Tests for PrerequisiteSettings."""

    def test_default_values(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = PrerequisiteSettings()

        assert settings.max_bulk_items == 500

    def test_loads_from_environment(self) -> None:
        with patch.dict(os.environ, {"PREREQUISITE_MAX_BULK_ITEMS": "10"}, clear=False):
            settings = PrerequisiteSettings()

        assert settings.max_bulk_items == 10


class TestSettings:
    """Tests for main Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.environment == "development"
        assert settings.debug is True
        assert settings.log_level == "DEBUG"

    def test_production_with_default_jwt_secret_raises_error(self) -> None:
        """Test that production environment with default JWT secret raises error."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError) as exc_info:
                Settings(environment="production")

        assert "JWT secret key must be changed" in str(exc_info.value)

    def test_production_with_custom_jwt_secret_succeeds(self) -> None:
        """Test that production environment with custom JWT secret works."""
        env = {"JWT_SECRET_KEY": "my-secure-production-secret-key-12345"}

        with patch.dict(os.environ, env, clear=False):
            settings = Settings(environment="production")

        assert settings.environment == "production"
        assert settings.is_production is True
        assert settings.is_development is False

    def test_subsettings_loaded(self) -> None:
        """Test that all subsettings are loaded."""
        settings = Settings()

        assert isinstance(settings.tenant_db, TenantDatabaseSettings)
        assert isinstance(settings.jwt, JWTSettings)
        assert isinstance(settings.rate_limit, RateLimitSettings)
        assert isinstance(settings.cors, CORSSettings)
        assert isinstance(settings.api, APISettings)
        assert isinstance(settings.prerequisite, PrerequisiteSettings)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_cached_instance(self) -> None:
        """Test that get_settings returns cached instance."""
        clear_settings_cache()

        settings1 = get_settings()
        settings2 = get_settings()

        assert isinstance(settings1, Settings)
        assert settings1 is settings2

    def test_clear_cache_allows_reload(self) -> None:
        """Test that clearing cache allows reloading settings."""
        clear_settings_cache()

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2
