# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject prerequisite API endpoints.

This module provides endpoints for the prerequisite graph:
- GET / - List prerequisite edges
- POST / - Add a prerequisite edge
- GET /{prerequisite_id} - Get edge details
- PUT /{prerequisite_id} - Reassign an edge
- DELETE /{prerequisite_id} - Remove an edge

Graph operations:
- POST /bulk-import - Import many edges in one unit of work
- GET /bulk-export - Export edges with subject details
- GET /check-circular - Check whether an edge would create a cycle

Every change keeps the graph acyclic. Reads require an authenticated user;
changes require tenant admin or school admin access.
"""

import logging
from typing import Annotated, NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_tenant_db, require_admin, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.middleware.rate_limit import RATE_LIMIT_BULK, limiter
from src.core.config import get_settings
from src.domains.prerequisite.service import (
    BulkImportError,
    CircularDependencyError,
    DuplicateEdgeError,
    InvalidEdgeError,
    PrerequisiteNotFoundError,
    PrerequisiteService,
    PrerequisiteServiceError,
)
from src.domains.subject.service import SubjectNotFoundError, SubjectService
from src.models.common import APIResponse
from src.models.prerequisite import (
    BulkImportRequest,
    BulkImportResult,
    CircularCheckResponse,
    PrerequisiteCreateRequest,
    PrerequisiteExportResponse,
    PrerequisiteResponse,
    PrerequisiteUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> PrerequisiteService:
    """Get prerequisite service instance.

    Args:
        db: Tenant database session.

    Returns:
        Configured PrerequisiteService instance.
    """
    return PrerequisiteService(db=db)


async def _ensure_subjects(db: AsyncSession, *subject_ids: UUID | None) -> None:
    """Raise 404 if any of the given subjects does not exist."""
    try:
        await SubjectService(db=db).ensure_exist(
            subject_id for subject_id in subject_ids if subject_id is not None
        )
    except SubjectNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


def _raise_for_service_error(error: PrerequisiteServiceError) -> NoReturn:
    """Translate a prerequisite service error into an HTTP error."""
    if isinstance(error, PrerequisiteNotFoundError):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prerequisite not found",
        )
    if isinstance(error, InvalidEdgeError):
        raise HTTPException(
            status_code=422,
            detail=str(error),
        )
    if isinstance(error, (DuplicateEdgeError, CircularDependencyError)):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(error),
        )
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(error),
    )


@router.get(
    "",
    response_model=APIResponse[list[PrerequisiteResponse]],
    summary="List prerequisites",
    description="List prerequisite edges, optionally filtered by either endpoint.",
)
async def list_prerequisites(
    subject_id: Annotated[UUID | None, Query(description="Filter by subject")] = None,
    prerequisite_id: Annotated[
        UUID | None, Query(description="Filter by prerequisite subject")
    ] = None,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[list[PrerequisiteResponse]]:
    edges = await _get_service(db).list_prerequisites(
        subject_id=subject_id,
        prerequisite_id=prerequisite_id,
    )

    return APIResponse(data=edges)


@router.post(
    "",
    response_model=APIResponse[PrerequisiteResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add prerequisite",
    description="Make a subject require another subject. Rejects self-references, "
    "duplicates and edges that would create a circular dependency.",
)
async def add_prerequisite(
    data: PrerequisiteCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[PrerequisiteResponse]:
    """Add a prerequisite edge.

    Args:
        data: Subject and prerequisite IDs.
        current_user: Authenticated admin.
        db: Database session.

    Returns:
        Created edge.

    Raises:
        HTTPException: 404 for unknown subjects, 422 for self-references,
            409 for duplicates and circular dependencies.
    """
    logger.info(
        "Adding prerequisite: %s -> %s by %s",
        data.subject_id,
        data.prerequisite_id,
        current_user.id,
    )

    await _ensure_subjects(db, data.subject_id, data.prerequisite_id)

    try:
        edge = await _get_service(db).add_prerequisite(data.subject_id, data.prerequisite_id)
    except PrerequisiteServiceError as e:
        _raise_for_service_error(e)

    return APIResponse(message="Prerequisite created successfully", data=edge)


@router.post(
    "/bulk-import",
    response_model=APIResponse[BulkImportResult],
    summary="Bulk import prerequisites",
    description="Import many prerequisite pairs. Each pair is validated on its own; "
    "rejected pairs are reported with their index and reason.",
)
@limiter.limit(RATE_LIMIT_BULK)
async def bulk_import_prerequisites(
    request: Request,
    data: BulkImportRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[BulkImportResult]:
    """Bulk import prerequisite pairs.

    Raises:
        HTTPException: 400 if the batch is too large, 500 if the batch was
            aborted and rolled back.
    """
    max_items = get_settings().prerequisite.max_bulk_items
    if len(data.prerequisites) > max_items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Bulk import accepts at most {max_items} prerequisites",
        )

    logger.info(
        "Bulk importing %s prerequisites by %s",
        len(data.prerequisites),
        current_user.id,
    )

    referenced = []
    for item in data.prerequisites:
        referenced.extend(
            subject_id for subject_id in (item.subject_id, item.prerequisite_id) if subject_id
        )
    unknown = await SubjectService(db=db).find_missing(referenced)

    try:
        result = await _get_service(db).bulk_import(
            data.prerequisites,
            unknown_subject_ids=unknown,
        )
    except BulkImportError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    return APIResponse(
        message=(
            f"Bulk import completed: {len(result.succeeded)} succeeded, "
            f"{len(result.failed)} failed"
        ),
        data=result,
    )


@router.get(
    "/bulk-export",
    response_model=APIResponse[PrerequisiteExportResponse],
    summary="Export prerequisites",
    description="Export prerequisite edges with subject details as JSON.",
)
async def export_prerequisites(
    subject_id: Annotated[UUID | None, Query(description="Filter by subject")] = None,
    prerequisite_id: Annotated[
        UUID | None, Query(description="Filter by prerequisite subject")
    ] = None,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[PrerequisiteExportResponse]:
    export = await _get_service(db).export_prerequisites(
        subject_id=subject_id,
        prerequisite_id=prerequisite_id,
    )

    return APIResponse(data=export)


@router.get(
    "/check-circular",
    response_model=APIResponse[CircularCheckResponse],
    summary="Check circular dependency",
    description="Whether making subject_id require prerequisite_id would create a "
    "circular dependency. Nothing is stored.",
)
async def check_circular_dependency(
    subject_id: Annotated[UUID, Query(description="Prospective subject")],
    prerequisite_id: Annotated[UUID, Query(description="Prospective prerequisite")],
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[CircularCheckResponse]:
    await _ensure_subjects(db, subject_id, prerequisite_id)

    circular = await _get_service(db).check_circular_dependency(subject_id, prerequisite_id)

    return APIResponse(
        data=CircularCheckResponse(
            subject_id=str(subject_id),
            prerequisite_id=str(prerequisite_id),
            circular=circular,
        )
    )


@router.get(
    "/{prerequisite_id}",
    response_model=APIResponse[PrerequisiteResponse],
    summary="Get prerequisite",
)
async def get_prerequisite(
    prerequisite_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[PrerequisiteResponse]:
    try:
        edge = await _get_service(db).get_prerequisite(prerequisite_id)
    except PrerequisiteServiceError as e:
        _raise_for_service_error(e)

    return APIResponse(data=edge)


@router.put(
    "/{prerequisite_id}",
    response_model=APIResponse[PrerequisiteResponse],
    summary="Update prerequisite",
    description="Reassign the subject or prerequisite of an edge. The new pair is "
    "validated like a new edge.",
)
async def update_prerequisite(
    prerequisite_id: UUID,
    data: PrerequisiteUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[PrerequisiteResponse]:
    logger.info("Updating prerequisite: %s by %s", prerequisite_id, current_user.id)

    await _ensure_subjects(db, data.subject_id, data.prerequisite_id)

    try:
        edge = await _get_service(db).update_prerequisite(
            prerequisite_id,
            subject_id=data.subject_id,
            prerequisite_id=data.prerequisite_id,
        )
    except PrerequisiteServiceError as e:
        _raise_for_service_error(e)

    return APIResponse(message="Prerequisite updated successfully", data=edge)


@router.delete(
    "/{prerequisite_id}",
    response_model=APIResponse[None],
    summary="Delete prerequisite",
)
async def delete_prerequisite(
    prerequisite_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[None]:
    logger.info("Deleting prerequisite: %s by %s", prerequisite_id, current_user.id)

    try:
        await _get_service(db).delete_prerequisite(prerequisite_id)
    except PrerequisiteServiceError as e:
        _raise_for_service_error(e)

    return APIResponse(message="Prerequisite deleted successfully")
