# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite service for managing the subject prerequisite graph.

This module provides the PrerequisiteService class for:
- Adding, updating and removing prerequisite edges
- Circular dependency detection
- Direct and transitive prerequisite lookups
- Bulk import and export of edges

The prerequisite graph of a tenant must stay acyclic. Every mutation reads
the current edge set once, validates the change against it, and only then
writes. Subject existence is checked by the caller (see SubjectService).
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.prerequisite.graph import PrerequisiteGraph
from src.infrastructure.database.models import Subject, SubjectPrerequisite, generate_uuid
from src.models.prerequisite import (
    BulkImportFailure,
    BulkImportResult,
    BulkImportSuccess,
    PrerequisiteChainEntry,
    PrerequisiteChainNode,
    PrerequisiteExportResponse,
    PrerequisiteResponse,
)
from src.models.subject import SubjectSummary
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

SELF_REFERENCE_MESSAGE = "Subject cannot be a prerequisite of itself"
DUPLICATE_MESSAGE = "This prerequisite relationship already exists"
CIRCULAR_MESSAGE = (
    "Circular dependency detected. This would create an infinite prerequisite chain."
)
BULK_CIRCULAR_MESSAGE = "Circular dependency detected"
MISSING_FIELDS_MESSAGE = "Missing required fields: subject_id and prerequisite_id"
UNIQUE_PAIR_CONSTRAINT = "uq_subject_prerequisites_pair"


class PrerequisiteServiceError(Exception):
    """Base exception for prerequisite service errors."""

    pass


class InvalidEdgeError(PrerequisiteServiceError):
    """Raised when a subject is made a prerequisite of itself."""

    pass


class DuplicateEdgeError(PrerequisiteServiceError):
    """Raised when the prerequisite relationship already exists."""

    pass


class CircularDependencyError(PrerequisiteServiceError):
    """Raised when an edge would close a cycle in the graph."""

    pass


class PrerequisiteNotFoundError(PrerequisiteServiceError):
    """Raised when a prerequisite edge is not found."""

    pass


class BulkImportError(PrerequisiteServiceError):
    """Raised when a bulk import aborts and is rolled back."""

    pass


def _normalize_id(value: UUID | str | None) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _is_duplicate_pair(error: IntegrityError) -> bool:
    """Whether an integrity error comes from the unique (subject, prerequisite) pair."""
    message = str(error.orig)
    return (
        UNIQUE_PAIR_CONSTRAINT in message
        or "UNIQUE constraint failed: subject_prerequisites." in message
    )


def _item_ids(item: Any) -> tuple[str | None, str | None]:
    """Extract the endpoint IDs of a bulk item (mapping or object)."""
    if isinstance(item, Mapping):
        subject_id = item.get("subject_id")
        prerequisite_id = item.get("prerequisite_id")
    else:
        subject_id = getattr(item, "subject_id", None)
        prerequisite_id = getattr(item, "prerequisite_id", None)
    return _normalize_id(subject_id), _normalize_id(prerequisite_id)


class PrerequisiteService:
    """Service for managing subject prerequisites.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize prerequisite service.

        Args:
            db: Async database session for tenant database.
        """
        self.db = db

    async def list_prerequisites(
        self,
        subject_id: UUID | str | None = None,
        prerequisite_id: UUID | str | None = None,
    ) -> list[PrerequisiteResponse]:
        """List prerequisite edges, optionally filtered by either endpoint.

        Args:
            subject_id: Only edges of this subject.
            prerequisite_id: Only edges pointing at this prerequisite.

        Returns:
            Edges ordered by subject ID, then prerequisite ID.
        """
        query = select(SubjectPrerequisite)

        if subject_id is not None:
            query = query.where(SubjectPrerequisite.subject_id == str(subject_id))
        if prerequisite_id is not None:
            query = query.where(SubjectPrerequisite.prerequisite_id == str(prerequisite_id))

        query = query.order_by(
            SubjectPrerequisite.subject_id,
            SubjectPrerequisite.prerequisite_id,
        )
        result = await self.db.execute(query)
        return await self._to_responses(result.scalars().all())

    async def get_prerequisite(self, edge_id: UUID | str) -> PrerequisiteResponse:
        """Get a prerequisite edge by ID.

        Raises:
            PrerequisiteNotFoundError: If the edge does not exist.
        """
        edge = await self._get_by_id(edge_id)
        return (await self._to_responses([edge]))[0]

    async def add_prerequisite(
        self,
        subject_id: UUID | str,
        prerequisite_id: UUID | str,
    ) -> PrerequisiteResponse:
        """Make subject_id require prerequisite_id.

        Args:
            subject_id: Subject that requires the prerequisite.
            prerequisite_id: Subject that must be completed first.

        Returns:
            The stored edge.

        Raises:
            InvalidEdgeError: If both IDs are the same subject.
            DuplicateEdgeError: If the pair already exists.
            CircularDependencyError: If prerequisite_id already depends on subject_id.
            IntegrityError: If a subject does not exist.
        """
        subject_id = str(subject_id)
        prerequisite_id = str(prerequisite_id)

        if subject_id == prerequisite_id:
            raise InvalidEdgeError(SELF_REFERENCE_MESSAGE)

        graph = await self._load_graph()

        if graph.has_edge(subject_id, prerequisite_id):
            raise DuplicateEdgeError(DUPLICATE_MESSAGE)

        if graph.would_create_cycle(subject_id, prerequisite_id):
            logger.info(
                "Rejected circular prerequisite: %s -> %s", subject_id, prerequisite_id
            )
            raise CircularDependencyError(CIRCULAR_MESSAGE)

        edge = SubjectPrerequisite(
            id=generate_uuid(),
            subject_id=subject_id,
            prerequisite_id=prerequisite_id,
        )
        self.db.add(edge)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # A concurrent request stored the same pair first
            if _is_duplicate_pair(e):
                raise DuplicateEdgeError(DUPLICATE_MESSAGE) from e
            raise

        await self.db.refresh(edge)

        logger.info("Added prerequisite %s: %s -> %s", edge.id, subject_id, prerequisite_id)

        return (await self._to_responses([edge]))[0]

    async def update_prerequisite(
        self,
        edge_id: UUID | str,
        subject_id: UUID | str | None = None,
        prerequisite_id: UUID | str | None = None,
    ) -> PrerequisiteResponse:
        """Reassign the endpoints of an edge.

        The change is validated as if the edge were removed and the new pair
        added: the new pair is checked against the graph without the old edge.

        Args:
            edge_id: Edge to update.
            subject_id: New subject, or None to keep the current one.
            prerequisite_id: New prerequisite, or None to keep the current one.

        Returns:
            The updated edge.

        Raises:
            PrerequisiteNotFoundError: If the edge does not exist.
            InvalidEdgeError: If the new pair is a self-reference.
            DuplicateEdgeError: If another edge already holds the new pair.
            CircularDependencyError: If the new pair would close a cycle.
        """
        edge = await self._get_by_id(edge_id)

        new_subject_id = str(subject_id) if subject_id is not None else edge.subject_id
        new_prerequisite_id = (
            str(prerequisite_id) if prerequisite_id is not None else edge.prerequisite_id
        )

        if new_subject_id == new_prerequisite_id:
            raise InvalidEdgeError(SELF_REFERENCE_MESSAGE)

        graph = await self._load_graph()
        graph.remove(edge.subject_id, edge.prerequisite_id)

        if graph.has_edge(new_subject_id, new_prerequisite_id):
            raise DuplicateEdgeError(DUPLICATE_MESSAGE)

        if graph.would_create_cycle(new_subject_id, new_prerequisite_id):
            raise CircularDependencyError(CIRCULAR_MESSAGE)

        edge.subject_id = new_subject_id
        edge.prerequisite_id = new_prerequisite_id

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_duplicate_pair(e):
                raise DuplicateEdgeError(DUPLICATE_MESSAGE) from e
            raise

        await self.db.refresh(edge)

        logger.info(
            "Updated prerequisite %s: %s -> %s", edge.id, new_subject_id, new_prerequisite_id
        )

        return (await self._to_responses([edge]))[0]

    async def delete_prerequisite(self, edge_id: UUID | str) -> None:
        """Delete a prerequisite edge.

        Raises:
            PrerequisiteNotFoundError: If the edge does not exist.
        """
        edge = await self._get_by_id(edge_id)

        await self.db.delete(edge)
        await self.db.commit()

        logger.info("Deleted prerequisite %s", edge_id)

    async def check_circular_dependency(
        self,
        subject_id: UUID | str,
        prerequisite_id: UUID | str,
    ) -> bool:
        """Check whether adding the pair would create a cycle.

        The edge set is read once at the start of the check.

        Args:
            subject_id: Prospective subject.
            prerequisite_id: Prospective prerequisite.

        Returns:
            True if subject_id is a direct or indirect prerequisite of
            prerequisite_id.
        """
        graph = await self._load_graph()
        return graph.would_create_cycle(str(subject_id), str(prerequisite_id))

    async def get_prerequisites_by_subject(
        self, subject_id: UUID | str
    ) -> list[PrerequisiteResponse]:
        """Direct prerequisites of a subject, ordered by prerequisite ID."""
        query = (
            select(SubjectPrerequisite)
            .where(SubjectPrerequisite.subject_id == str(subject_id))
            .order_by(SubjectPrerequisite.prerequisite_id)
        )
        result = await self.db.execute(query)
        return await self._to_responses(result.scalars().all())

    async def get_subjects_requiring(
        self, prerequisite_id: UUID | str
    ) -> list[PrerequisiteResponse]:
        """Edges of subjects that directly require the given subject, ordered by subject ID."""
        query = (
            select(SubjectPrerequisite)
            .where(SubjectPrerequisite.prerequisite_id == str(prerequisite_id))
            .order_by(SubjectPrerequisite.subject_id)
        )
        result = await self.db.execute(query)
        return await self._to_responses(result.scalars().all())

    async def get_prerequisite_chain(
        self, subject_id: UUID | str
    ) -> dict[str, PrerequisiteChainNode]:
        """Transitive prerequisite chain of a subject.

        Args:
            subject_id: Chain root.

        Returns:
            Mapping of every subject in the chain that has prerequisites to
            its direct prerequisites. Empty if the root has none.
        """
        graph = await self._load_graph()
        chain = graph.chain(str(subject_id))

        if not chain:
            return {}

        subject_ids = set(chain)
        for links in chain.values():
            subject_ids.update(link.prerequisite_id for link in links)
        subjects = await self._load_subjects(subject_ids)

        return {
            node_id: PrerequisiteChainNode(
                subject=self._to_summary(subjects[node_id]),
                prerequisites=[
                    PrerequisiteChainEntry(
                        id=link.edge_id,
                        subject=self._to_summary(subjects[link.prerequisite_id]),
                        level=link.level,
                    )
                    for link in links
                ],
            )
            for node_id, links in chain.items()
        }

    async def bulk_import(
        self,
        items: Sequence[Any],
        unknown_subject_ids: Collection[UUID | str] = (),
    ) -> BulkImportResult:
        """Import many prerequisite pairs in one unit of work.

        Each item is validated on its own; invalid items are reported and
        skipped while valid ones are stored. Items see the edges stored by
        earlier items of the same batch.

        Args:
            items: Pairs as mappings or objects with subject_id and
                prerequisite_id.
            unknown_subject_ids: IDs known not to exist as subjects. Items
                referencing them fail.

        Returns:
            Succeeded and failed items with their batch index.

        Raises:
            BulkImportError: If an unexpected error aborted the batch. No
                item of the batch is stored in that case.
        """
        unknown = {str(subject_id) for subject_id in unknown_subject_ids}
        failed: list[BulkImportFailure] = []
        stored: list[tuple[int, SubjectPrerequisite]] = []

        try:
            graph = await self._load_graph()

            for index, item in enumerate(items):
                subject_id, prerequisite_id = _item_ids(item)
                data = {"subject_id": subject_id, "prerequisite_id": prerequisite_id}

                error = self._validate_bulk_item(graph, unknown, subject_id, prerequisite_id)
                if error:
                    failed.append(BulkImportFailure(index=index, data=data, error=error))
                    continue

                edge = SubjectPrerequisite(
                    id=generate_uuid(),
                    subject_id=subject_id,
                    prerequisite_id=prerequisite_id,
                )
                self.db.add(edge)
                await self.db.flush()

                graph.add(subject_id, prerequisite_id, edge.id)
                stored.append((index, edge))

            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.exception("Bulk prerequisite import aborted")
            raise BulkImportError(f"Bulk import failed: {e}") from e

        responses = await self._to_responses([edge for _, edge in stored])
        succeeded = [
            BulkImportSuccess(index=index, data=response)
            for (index, _), response in zip(stored, responses)
        ]

        logger.info(
            "Bulk prerequisite import: %s stored, %s failed, %s total",
            len(succeeded),
            len(failed),
            len(items),
        )

        return BulkImportResult(succeeded=succeeded, failed=failed, total=len(items))

    async def export_prerequisites(
        self,
        subject_id: UUID | str | None = None,
        prerequisite_id: UUID | str | None = None,
    ) -> PrerequisiteExportResponse:
        """Export edges with both endpoint subjects."""
        items = await self.list_prerequisites(subject_id, prerequisite_id)
        return PrerequisiteExportResponse(items=items, total=len(items))

    @staticmethod
    def _validate_bulk_item(
        graph: PrerequisiteGraph,
        unknown: set[str],
        subject_id: str | None,
        prerequisite_id: str | None,
    ) -> str | None:
        """Return the rejection reason for a bulk item, or None if it is valid."""
        if not subject_id or not prerequisite_id:
            return MISSING_FIELDS_MESSAGE

        for endpoint in (subject_id, prerequisite_id):
            if endpoint in unknown:
                return f"Subject not found: {endpoint}"

        if subject_id == prerequisite_id:
            return SELF_REFERENCE_MESSAGE

        if graph.has_edge(subject_id, prerequisite_id):
            return DUPLICATE_MESSAGE

        if graph.would_create_cycle(subject_id, prerequisite_id):
            return BULK_CIRCULAR_MESSAGE

        return None

    async def _load_graph(self) -> PrerequisiteGraph:
        """Read the full edge set of the tenant."""
        query = select(
            SubjectPrerequisite.id,
            SubjectPrerequisite.subject_id,
            SubjectPrerequisite.prerequisite_id,
        )
        result = await self.db.execute(query)
        return PrerequisiteGraph.from_edges(tuple(row) for row in result.all())

    async def _get_by_id(self, edge_id: UUID | str) -> SubjectPrerequisite:
        """Get edge by ID.

        Raises:
            PrerequisiteNotFoundError: If not found.
        """
        query = select(SubjectPrerequisite).where(SubjectPrerequisite.id == str(edge_id))
        result = await self.db.execute(query)
        edge = result.scalar_one_or_none()

        if not edge:
            raise PrerequisiteNotFoundError(f"Prerequisite {edge_id} not found")

        return edge

    async def _load_subjects(self, subject_ids: Iterable[str]) -> dict[str, Subject]:
        subject_ids = set(subject_ids)
        if not subject_ids:
            return {}

        result = await self.db.execute(select(Subject).where(Subject.id.in_(subject_ids)))
        return {subject.id: subject for subject in result.scalars().all()}

    async def _to_responses(
        self, edges: Sequence[SubjectPrerequisite]
    ) -> list[PrerequisiteResponse]:
        """Convert edges to responses, loading endpoint subjects in one query."""
        subject_ids: set[str] = set()
        for edge in edges:
            subject_ids.add(edge.subject_id)
            subject_ids.add(edge.prerequisite_id)
        subjects = await self._load_subjects(subject_ids)

        return [
            PrerequisiteResponse(
                id=edge.id,
                subject_id=edge.subject_id,
                prerequisite_id=edge.prerequisite_id,
                subject=self._to_summary(subjects.get(edge.subject_id)),
                prerequisite=self._to_summary(subjects.get(edge.prerequisite_id)),
                created_at=ensure_utc(edge.created_at),
                updated_at=ensure_utc(edge.updated_at),
            )
            for edge in edges
        ]

    @staticmethod
    def _to_summary(subject: Subject | None) -> SubjectSummary | None:
        if subject is None:
            return None
        return SubjectSummary(id=subject.id, code=subject.code, name=subject.name)
