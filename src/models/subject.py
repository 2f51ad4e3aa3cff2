# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject request and response models."""

from datetime import datetime

from pydantic import BaseModel, Field


class SubjectCreateRequest(BaseModel):
    """Request to create a subject."""

    code: str = Field(min_length=1, max_length=50, description="Unique subject code, e.g. CS101")
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    credits: int | None = Field(default=None, ge=0, le=60)


class SubjectUpdateRequest(BaseModel):
    """Request to update a subject. Omitted fields are left unchanged."""

    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    credits: int | None = Field(default=None, ge=0, le=60)
    is_active: bool | None = None


class SubjectSummary(BaseModel):
    """Compact subject reference embedded in other responses."""

    id: str
    code: str
    name: str


class SubjectResponse(BaseModel):
    """Full subject details."""

    id: str
    code: str
    name: str
    description: str | None = None
    credits: int | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SubjectListResponse(BaseModel):
    """Paginated list of subjects."""

    items: list[SubjectResponse]
    total: int
    limit: int
    offset: int
