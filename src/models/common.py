# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared API response models.

Every endpoint answers with the same envelope:
    {"success": true, "message": "...", "data": ...}
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard response envelope."""

    success: bool = Field(default=True, description="Whether the operation succeeded")
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: T | None = Field(default=None, description="Operation payload")


class ErrorResponse(BaseModel):
    """Error envelope returned by exception handlers."""

    success: bool = False
    message: str
    errors: list[dict] | None = None
