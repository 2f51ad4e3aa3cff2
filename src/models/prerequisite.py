# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject prerequisite request and response models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from src.models.subject import SubjectSummary


class PrerequisiteCreateRequest(BaseModel):
    """Request to make one subject require another."""

    subject_id: UUID = Field(description="Subject that requires the prerequisite")
    prerequisite_id: UUID = Field(description="Subject that must be completed first")


class PrerequisiteUpdateRequest(BaseModel):
    """Request to reassign the endpoints of an existing prerequisite."""

    subject_id: UUID | None = None
    prerequisite_id: UUID | None = None


class BulkPrerequisiteItem(BaseModel):
    """One pair in a bulk import.

    Both fields are optional here so that incomplete pairs are reported
    per item instead of rejecting the whole request.
    """

    subject_id: UUID | None = None
    prerequisite_id: UUID | None = None


class BulkImportRequest(BaseModel):
    """Bulk import request."""

    prerequisites: list[BulkPrerequisiteItem] = Field(min_length=1)


class PrerequisiteResponse(BaseModel):
    """Prerequisite edge with both endpoint subjects."""

    id: str
    subject_id: str
    prerequisite_id: str
    subject: SubjectSummary | None = None
    prerequisite: SubjectSummary | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BulkImportSuccess(BaseModel):
    """A pair that was stored."""

    index: int
    data: PrerequisiteResponse
    message: str = "Prerequisite created successfully"


class BulkImportFailure(BaseModel):
    """A pair that was rejected, with the reason."""

    index: int
    data: dict[str, Any]
    error: str


class BulkImportResult(BaseModel):
    """Summary of a bulk import."""

    succeeded: list[BulkImportSuccess] = Field(default_factory=list)
    failed: list[BulkImportFailure] = Field(default_factory=list)
    total: int = 0


class PrerequisiteChainEntry(BaseModel):
    """Direct prerequisite of a chain node.

    ``level`` is the depth from the subject the chain was requested for.
    """

    id: str = Field(description="Prerequisite edge ID")
    subject: SubjectSummary
    level: int


class PrerequisiteChainNode(BaseModel):
    """A subject in the chain and its direct prerequisites."""

    subject: SubjectSummary
    prerequisites: list[PrerequisiteChainEntry]


class CircularCheckResponse(BaseModel):
    """Result of a circular dependency check."""

    subject_id: str
    prerequisite_id: str
    circular: bool


class PrerequisiteExportResponse(BaseModel):
    """Exported prerequisite edges."""

    items: list[PrerequisiteResponse]
    total: int
    export_format: str = "json"
