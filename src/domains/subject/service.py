# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject service for managing the subject catalogue.

This module provides the SubjectService class for:
- Subject CRUD operations
- Existence checks used before prerequisite graph changes
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Subject, SubjectPrerequisite
from src.models.subject import (
    SubjectCreateRequest,
    SubjectResponse,
    SubjectUpdateRequest,
)
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class SubjectServiceError(Exception):
    """Base exception for subject service errors."""

    pass


class SubjectNotFoundError(SubjectServiceError):
    """Raised when subject is not found."""

    pass


class SubjectCodeExistsError(SubjectServiceError):
    """Raised when subject code already exists."""

    pass


class SubjectService:
    """Service for managing subjects.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize subject service.

        Args:
            db: Async database session for tenant database.
        """
        self.db = db

    async def create_subject(self, request: SubjectCreateRequest) -> SubjectResponse:
        """Create a new subject.

        Args:
            request: Subject creation data.

        Returns:
            Created subject.

        Raises:
            SubjectCodeExistsError: If the code is already used.
        """
        if await self._get_by_code(request.code):
            raise SubjectCodeExistsError(f"Subject with code '{request.code}' already exists")

        subject = Subject(
            code=request.code,
            name=request.name,
            description=request.description,
            credits=request.credits,
            is_active=True,
        )

        self.db.add(subject)
        await self.db.commit()
        await self.db.refresh(subject)

        logger.info("Created subject: %s (%s)", subject.code, subject.id)

        return self._to_response(subject)

    async def list_subjects(
        self,
        search: str | None = None,
        is_active: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[SubjectResponse], int]:
        """List subjects with filtering.

        Args:
            search: Search in name or code.
            is_active: Filter by active status.
            limit: Maximum results.
            offset: Pagination offset.

        Returns:
            Tuple of (list of subjects, total count).
        """
        query = select(Subject)

        conditions = []

        if is_active is not None:
            conditions.append(Subject.is_active == is_active)

        if search:
            search_pattern = f"%{search}%"
            conditions.append(
                or_(Subject.name.ilike(search_pattern), Subject.code.ilike(search_pattern))
            )

        if conditions:
            query = query.where(and_(*conditions))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Subject.code).limit(limit).offset(offset)

        result = await self.db.execute(query)
        subjects = result.scalars().all()

        return [self._to_response(subject) for subject in subjects], total

    async def get_subject(self, subject_id: UUID | str) -> SubjectResponse:
        """Get subject by ID.

        Raises:
            SubjectNotFoundError: If subject not found.
        """
        return self._to_response(await self._get_by_id(subject_id))

    async def update_subject(
        self,
        subject_id: UUID | str,
        request: SubjectUpdateRequest,
    ) -> SubjectResponse:
        """Update a subject.

        Args:
            subject_id: Subject identifier.
            request: Update data. Omitted fields are left unchanged.

        Returns:
            Updated subject.

        Raises:
            SubjectNotFoundError: If subject not found.
            SubjectCodeExistsError: If the new code belongs to another subject.
        """
        subject = await self._get_by_id(subject_id)

        if request.code is not None and request.code != subject.code:
            if await self._get_by_code(request.code):
                raise SubjectCodeExistsError(
                    f"Subject with code '{request.code}' already exists"
                )
            subject.code = request.code
        if request.name is not None:
            subject.name = request.name
        if request.description is not None:
            subject.description = request.description
        if request.credits is not None:
            subject.credits = request.credits
        if request.is_active is not None:
            subject.is_active = request.is_active

        await self.db.commit()
        await self.db.refresh(subject)

        logger.info("Updated subject: %s", subject_id)

        return self._to_response(subject)

    async def delete_subject(self, subject_id: UUID | str) -> None:
        """Delete a subject together with every prerequisite edge touching it.

        Raises:
            SubjectNotFoundError: If subject not found.
        """
        subject = await self._get_by_id(subject_id)

        await self.db.execute(
            delete(SubjectPrerequisite).where(
                or_(
                    SubjectPrerequisite.subject_id == subject.id,
                    SubjectPrerequisite.prerequisite_id == subject.id,
                )
            )
        )
        await self.db.delete(subject)
        await self.db.commit()

        logger.info("Deleted subject: %s", subject_id)

    async def find_missing(self, subject_ids: Iterable[UUID | str]) -> list[str]:
        """Return the given IDs that have no stored subject, in input order."""
        wanted = list(dict.fromkeys(str(subject_id) for subject_id in subject_ids))
        if not wanted:
            return []

        result = await self.db.execute(select(Subject.id).where(Subject.id.in_(wanted)))
        found = set(result.scalars().all())

        return [subject_id for subject_id in wanted if subject_id not in found]

    async def ensure_exist(self, subject_ids: Iterable[UUID | str]) -> None:
        """Check that every given subject exists.

        Raises:
            SubjectNotFoundError: Naming the first missing subject.
        """
        missing = await self.find_missing(subject_ids)
        if missing:
            raise SubjectNotFoundError(f"Subject {missing[0]} not found")

    async def _get_by_id(self, subject_id: UUID | str) -> Subject:
        query = select(Subject).where(Subject.id == str(subject_id))
        result = await self.db.execute(query)
        subject = result.scalar_one_or_none()

        if not subject:
            raise SubjectNotFoundError(f"Subject {subject_id} not found")

        return subject

    async def _get_by_code(self, code: str) -> Subject | None:
        query = select(Subject).where(Subject.code == code)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_response(subject: Subject) -> SubjectResponse:
        return SubjectResponse(
            id=subject.id,
            code=subject.code,
            name=subject.name,
            description=subject.description,
            credits=subject.credits,
            is_active=subject.is_active,
            created_at=ensure_utc(subject.created_at),
            updated_at=ensure_utc(subject.updated_at),
        )
