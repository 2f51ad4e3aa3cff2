# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Subject service."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from src.domains.prerequisite.service import PrerequisiteService
from src.domains.subject.service import (
    SubjectCodeExistsError,
    SubjectNotFoundError,
    SubjectService,
)
from src.infrastructure.database.models import SubjectPrerequisite
from src.models.subject import SubjectCreateRequest, SubjectUpdateRequest


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def subject_service(mock_db):
    """Create subject service with mock database."""
    return SubjectService(db=mock_db)


@pytest.fixture
def sample_subject():
    """Create a sample subject model."""
    subject = MagicMock()
    subject.id = str(uuid4())
    subject.code = "CS101"
    subject.name = "Introduction to Programming"
    subject.description = None
    subject.credits = 4
    subject.is_active = True
    subject.created_at = datetime.now(timezone.utc)
    subject.updated_at = datetime.now(timezone.utc)
    return subject


def _scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestSubjectServiceWithMocks:
    """Tests for SubjectService against a mocked session."""

    @pytest.mark.asyncio
    async def test_create_subject_code_exists(self, subject_service, mock_db, sample_subject):
        """Test creating a subject with a taken code."""
        mock_db.execute.return_value = _scalar_result(sample_subject)

        request = SubjectCreateRequest(code="CS101", name="Another")

        with pytest.raises(SubjectCodeExistsError, match="CS101"):
            await subject_service.create_subject(request)

        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_subject_not_found(self, subject_service, mock_db):
        """Test getting a missing subject."""
        mock_db.execute.return_value = _scalar_result(None)

        with pytest.raises(SubjectNotFoundError):
            await subject_service.get_subject(uuid4())

    @pytest.mark.asyncio
    async def test_get_subject_success(self, subject_service, mock_db, sample_subject):
        """Test getting a subject by ID."""
        mock_db.execute.return_value = _scalar_result(sample_subject)

        result = await subject_service.get_subject(sample_subject.id)

        assert result.id == sample_subject.id
        assert result.code == "CS101"
        assert result.credits == 4

    @pytest.mark.asyncio
    async def test_delete_subject_not_found(self, subject_service, mock_db):
        """Test deleting a missing subject."""
        mock_db.execute.return_value = _scalar_result(None)

        with pytest.raises(SubjectNotFoundError):
            await subject_service.delete_subject(uuid4())

        mock_db.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_find_missing_empty_input(self, subject_service, mock_db):
        """Test no query is made for an empty ID list."""
        assert await subject_service.find_missing([]) == []

        mock_db.execute.assert_not_called()


class TestSubjectServiceWithDatabase:
    """Tests for SubjectService against the test database."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, db_session):
        service = SubjectService(db_session)

        created = await service.create_subject(
            SubjectCreateRequest(code="MATH101", name="Calculus I", credits=4)
        )
        fetched = await service.get_subject(created.id)

        assert fetched.code == "MATH101"
        assert fetched.credits == 4
        assert fetched.is_active is True

    @pytest.mark.asyncio
    async def test_create_duplicate_code(self, db_session, make_subject):
        await make_subject("MATH101")
        service = SubjectService(db_session)

        with pytest.raises(SubjectCodeExistsError):
            await service.create_subject(SubjectCreateRequest(code="MATH101", name="Again"))

    @pytest.mark.asyncio
    async def test_list_subjects_search_and_filter(self, db_session, make_subject):
        await make_subject("MATH101", "Calculus I")
        await make_subject("MATH201", "Calculus II")
        await make_subject("ENG101", "Academic Writing", is_active=False)
        service = SubjectService(db_session)

        items, total = await service.list_subjects(search="calc")
        assert total == 2
        assert [item.code for item in items] == ["MATH101", "MATH201"]

        items, total = await service.list_subjects(is_active=False)
        assert total == 1
        assert items[0].code == "ENG101"

        items, total = await service.list_subjects(limit=1, offset=1)
        assert total == 3
        assert [item.code for item in items] == ["MATH101"]

    @pytest.mark.asyncio
    async def test_update_subject(self, db_session, make_subject):
        subject = await make_subject("CS101", "Programming")
        service = SubjectService(db_session)

        updated = await service.update_subject(
            subject.id, SubjectUpdateRequest(name="Intro to Programming", credits=3)
        )

        assert updated.name == "Intro to Programming"
        assert updated.credits == 3
        assert updated.code == "CS101"

    @pytest.mark.asyncio
    async def test_update_subject_code_taken(self, db_session, make_subject):
        await make_subject("CS101")
        other = await make_subject("CS201")
        service = SubjectService(db_session)

        with pytest.raises(SubjectCodeExistsError):
            await service.update_subject(other.id, SubjectUpdateRequest(code="CS101"))

    @pytest.mark.asyncio
    async def test_find_missing_and_ensure_exist(self, db_session, make_subject):
        subject = await make_subject("CS101")
        missing = str(uuid4())
        service = SubjectService(db_session)

        assert await service.find_missing([subject.id, missing, missing]) == [missing]
        await service.ensure_exist([subject.id])

        with pytest.raises(SubjectNotFoundError, match=missing):
            await service.ensure_exist([subject.id, missing])

    @pytest.mark.asyncio
    async def test_delete_subject_removes_edges(self, db_session, make_subject):
        """Test edges on both sides of a deleted subject are removed."""
        first = await make_subject("CS101")
        second = await make_subject("CS201")
        third = await make_subject("CS301")
        first_id, second_id, third_id = first.id, second.id, third.id

        prerequisites = PrerequisiteService(db_session)
        await prerequisites.add_prerequisite(second_id, first_id)
        await prerequisites.add_prerequisite(third_id, second_id)
        await prerequisites.add_prerequisite(third_id, first_id)

        await SubjectService(db_session).delete_subject(second_id)

        result = await db_session.execute(
            select(func.count()).select_from(SubjectPrerequisite)
        )
        assert result.scalar_one() == 1
        remaining = await prerequisites.list_prerequisites()
        assert [(e.subject_id, e.prerequisite_id) for e in remaining] == [(third_id, first_id)]

        with pytest.raises(SubjectNotFoundError):
            await SubjectService(db_session).get_subject(second_id)
