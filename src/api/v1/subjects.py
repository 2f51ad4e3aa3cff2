# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject management API endpoints.

This module provides endpoints for the subject catalogue:
- POST / - Create a subject
- GET / - List subjects with filtering
- GET /{subject_id} - Get subject details
- PUT /{subject_id} - Update subject
- DELETE /{subject_id} - Delete subject and its prerequisite edges

Prerequisite lookups for a subject:
- GET /{subject_id}/prerequisites - Direct prerequisites
- GET /{subject_id}/required-by - Subjects that require this one
- GET /{subject_id}/prerequisite-chain - Transitive prerequisite chain

Reads require an authenticated user. Changes require tenant admin or
school admin access.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_tenant_db, require_admin, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.prerequisite.service import PrerequisiteService
from src.domains.subject.service import (
    SubjectCodeExistsError,
    SubjectNotFoundError,
    SubjectService,
    SubjectServiceError,
)
from src.models.common import APIResponse
from src.models.prerequisite import PrerequisiteChainNode, PrerequisiteResponse
from src.models.subject import (
    SubjectCreateRequest,
    SubjectListResponse,
    SubjectResponse,
    SubjectUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> SubjectService:
    return SubjectService(db=db)


async def _ensure_subject(db: AsyncSession, subject_id: UUID) -> None:
    """Raise 404 if the subject does not exist."""
    try:
        await _get_service(db).ensure_exist([subject_id])
    except SubjectNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subject not found",
        )


@router.post(
    "",
    response_model=APIResponse[SubjectResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create subject",
    description="Create a new subject. Requires admin access.",
)
async def create_subject(
    data: SubjectCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[SubjectResponse]:
    """Create a new subject.

    Raises:
        HTTPException: If the subject code already exists.
    """
    logger.info("Creating subject: %s by %s", data.code, current_user.id)

    service = _get_service(db)

    try:
        subject = await service.create_subject(data)
    except SubjectCodeExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return APIResponse(message="Subject created successfully", data=subject)


@router.get(
    "",
    response_model=APIResponse[SubjectListResponse],
    summary="List subjects",
    description="List subjects with optional filtering.",
)
async def list_subjects(
    search: Annotated[str | None, Query(description="Search by name or code")] = None,
    is_active: Annotated[bool | None, Query(description="Filter by active status")] = None,
    limit: Annotated[int, Query(ge=1, le=200, description="Maximum results")] = 50,
    offset: Annotated[int, Query(ge=0, description="Pagination offset")] = 0,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[SubjectListResponse]:
    """List subjects with filtering and pagination."""
    subjects, total = await _get_service(db).list_subjects(
        search=search,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )

    return APIResponse(
        data=SubjectListResponse(items=subjects, total=total, limit=limit, offset=offset)
    )


@router.get(
    "/{subject_id}",
    response_model=APIResponse[SubjectResponse],
    summary="Get subject",
)
async def get_subject(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[SubjectResponse]:
    try:
        subject = await _get_service(db).get_subject(subject_id)
    except SubjectNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subject not found",
        )

    return APIResponse(data=subject)


@router.put(
    "/{subject_id}",
    response_model=APIResponse[SubjectResponse],
    summary="Update subject",
    description="Update subject information. Requires admin access.",
)
async def update_subject(
    subject_id: UUID,
    data: SubjectUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[SubjectResponse]:
    """Update subject information.

    Raises:
        HTTPException: If subject not found or the new code is taken.
    """
    logger.info("Updating subject: %s by %s", subject_id, current_user.id)

    service = _get_service(db)

    try:
        subject = await service.update_subject(subject_id, data)
    except SubjectNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subject not found",
        )
    except SubjectCodeExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except SubjectServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return APIResponse(message="Subject updated successfully", data=subject)


@router.delete(
    "/{subject_id}",
    response_model=APIResponse[None],
    summary="Delete subject",
    description="Delete a subject and every prerequisite edge touching it. "
    "Requires admin access.",
)
async def delete_subject(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[None]:
    logger.info("Deleting subject: %s by %s", subject_id, current_user.id)

    try:
        await _get_service(db).delete_subject(subject_id)
    except SubjectNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subject not found",
        )

    return APIResponse(message="Subject deleted successfully")


# =========================================================================
# Prerequisite lookups
# =========================================================================


@router.get(
    "/{subject_id}/prerequisites",
    response_model=APIResponse[list[PrerequisiteResponse]],
    summary="Direct prerequisites",
    description="Subjects that must be completed directly before this one, "
    "ordered by prerequisite ID.",
)
async def get_subject_prerequisites(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[list[PrerequisiteResponse]]:
    await _ensure_subject(db, subject_id)

    edges = await PrerequisiteService(db=db).get_prerequisites_by_subject(subject_id)

    return APIResponse(data=edges)


@router.get(
    "/{subject_id}/required-by",
    response_model=APIResponse[list[PrerequisiteResponse]],
    summary="Dependent subjects",
    description="Subjects that list this subject as a direct prerequisite.",
)
async def get_subject_dependents(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[list[PrerequisiteResponse]]:
    await _ensure_subject(db, subject_id)

    edges = await PrerequisiteService(db=db).get_subjects_requiring(subject_id)

    return APIResponse(data=edges)


@router.get(
    "/{subject_id}/prerequisite-chain",
    response_model=APIResponse[dict[str, PrerequisiteChainNode]],
    summary="Prerequisite chain",
    description="Every direct and indirect prerequisite of the subject, keyed by "
    "subject ID. Levels count the distance from the requested subject.",
)
async def get_subject_prerequisite_chain(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_tenant_db),
) -> APIResponse[dict[str, PrerequisiteChainNode]]:
    await _ensure_subject(db, subject_id)

    chain = await PrerequisiteService(db=db).get_prerequisite_chain(subject_id)

    return APIResponse(data=chain)
