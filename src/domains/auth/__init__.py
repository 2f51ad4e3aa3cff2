# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain.

Users authenticate against the school administration identity service,
which issues JWT access tokens. This package validates those tokens.

Exports:
    JWTManager: JWT token creation and validation.
    TokenPayload: Decoded access token claims.
"""

from src.domains.auth.jwt import (
    ADMIN_USER_TYPES,
    InvalidTokenError,
    JWTError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)

__all__ = [
    "ADMIN_USER_TYPES",
    "JWTManager",
    "TokenPayload",
    "JWTError",
    "TokenExpiredError",
    "InvalidTokenError",
]
