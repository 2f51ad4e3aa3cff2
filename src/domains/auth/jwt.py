# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT access token handling using python-jose.

Tokens are issued by the school administration identity service and carry
the tenant and user type of the caller. This service only needs to validate
them; create_access_token exists for seeding, scripts and tests.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token("user-1", tenant_code="acme",
    ...                                         user_type="school_admin")
    >>> jwt_manager.decode_token(token).tenant_code
    'acme'
"""

import logging
import secrets
from datetime import timedelta
from uuid import UUID

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError

from src.core.config.settings import JWTSettings
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

# User types allowed to change subjects and prerequisites
ADMIN_USER_TYPES = frozenset({"tenant_admin", "school_admin"})


class TokenPayload(BaseModel):
    """Access token claims.

    Attributes:
        sub: Subject (user ID).
        tenant_code: Tenant the user belongs to.
        user_type: User type (student, teacher, school_admin, ...).
        roles: Role codes.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: Token ID.
    """

    sub: str
    tenant_code: str | None = None
    user_type: str | None = None
    roles: list[str] = []
    exp: int
    iat: int
    jti: str


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """Creates and validates access tokens.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        """Initialize the JWT manager.

        Args:
            settings: JWT configuration settings.
        """
        self._settings = settings

    def create_access_token(
        self,
        user_id: str | UUID,
        tenant_code: str | None = None,
        user_type: str | None = None,
        roles: list[str] | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            user_id: User identifier.
            tenant_code: Tenant code for routing.
            user_type: Type of user.
            roles: Role codes.

        Returns:
            Encoded JWT string.
        """
        now = utc_now()
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "type": "access",
            "tenant_code": tenant_code,
            "user_type": user_type,
            "roles": roles or [],
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        return jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate an access token.

        Args:
            token: JWT string.

        Returns:
            Decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, type or claims are invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        if payload.get("type", "access") != "access":
            raise InvalidTokenError(f"Expected access token, got {payload.get('type')}")

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            raise InvalidTokenError(f"Invalid token claims: {e.error_count()} errors")
