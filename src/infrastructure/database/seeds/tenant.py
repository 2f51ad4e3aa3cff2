# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant database seed data.

This module provides demo data for tenant databases:
- Subject catalogue (computer science, mathematics, business, English)
- Prerequisite edges between those subjects

Prerequisites are loaded through PrerequisiteService so the same
self-reference, duplicate and cycle rules apply as for API imports.
Seeding is idempotent: existing subjects and edges are left alone.

Usage:
    TENANT_CODE=acme python -m src.infrastructure.database.seeds.tenant
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.prerequisite.service import PrerequisiteService
from src.infrastructure.database.models import Subject

logger = logging.getLogger(__name__)

# (code, name, credits)
SUBJECTS = [
    ("CS101", "Introduction to Programming", 4),
    ("CS201", "Data Structures", 4),
    ("CS301", "Algorithms", 4),
    ("CS401", "Software Engineering", 4),
    ("CS501", "Distributed Systems", 3),
    ("MATH101", "Calculus I", 4),
    ("MATH201", "Calculus II", 4),
    ("MATH301", "Linear Algebra", 3),
    ("MATH401", "Real Analysis", 3),
    ("BUS101", "Principles of Management", 3),
    ("BUS201", "Financial Accounting", 3),
    ("BUS301", "Corporate Finance", 3),
    ("BUS401", "Business Strategy", 3),
    ("ENG101", "Academic Writing", 3),
    ("ENG201", "Technical Communication", 3),
    ("ENG301", "Literature and Society", 3),
    ("ENG401", "Advanced Rhetoric", 3),
]

# (subject code, prerequisite code)
PREREQUISITES = [
    # Computer science
    ("CS201", "CS101"),
    ("CS301", "CS201"),
    ("CS301", "MATH101"),
    ("CS401", "CS301"),
    ("CS401", "MATH201"),
    ("CS501", "CS401"),
    ("CS501", "MATH301"),
    # Mathematics
    ("MATH201", "MATH101"),
    ("MATH301", "MATH201"),
    ("MATH401", "MATH301"),
    # Business
    ("BUS201", "BUS101"),
    ("BUS301", "BUS201"),
    ("BUS301", "MATH101"),
    ("BUS401", "BUS301"),
    ("BUS401", "MATH201"),
    # English
    ("ENG201", "ENG101"),
    ("ENG301", "ENG201"),
    ("ENG401", "ENG301"),
    # Cross-disciplinary
    ("CS201", "MATH101"),
    ("BUS201", "ENG101"),
    ("CS401", "ENG201"),
]


async def seed_subjects(session: AsyncSession) -> dict[str, Subject]:
    """Seed the demo subject catalogue.

    Args:
        session: Database session.

    Returns:
        Mapping of subject code to subject, including pre-existing ones.
    """
    result = await session.execute(select(Subject))
    subjects = {subject.code: subject for subject in result.scalars().all()}

    created = 0
    for code, name, credits in SUBJECTS:
        if code in subjects:
            continue
        subject = Subject(code=code, name=name, credits=credits, is_active=True)
        session.add(subject)
        subjects[code] = subject
        created += 1

    await session.commit()
    logger.info("Seeded %s subjects (%s already present)", created, len(SUBJECTS) - created)
    return subjects


async def seed_prerequisites(
    session: AsyncSession,
    subjects: dict[str, Subject],
) -> dict[str, int]:
    """Seed the demo prerequisite edges.

    Pairs naming an unknown subject code are skipped. Pairs that already
    exist, or would close a cycle, are reported by the import and skipped.

    Args:
        session: Database session.
        subjects: Mapping of subject code to subject.

    Returns:
        Counts of created and skipped edges.
    """
    items = []
    pairs = []
    missing = 0
    for subject_code, prerequisite_code in PREREQUISITES:
        subject = subjects.get(subject_code)
        prerequisite = subjects.get(prerequisite_code)
        if subject is None or prerequisite is None:
            logger.warning(
                "Skipping %s -> %s: subject not found", subject_code, prerequisite_code
            )
            missing += 1
            continue
        items.append({"subject_id": subject.id, "prerequisite_id": prerequisite.id})
        pairs.append((subject_code, prerequisite_code))

    result = await PrerequisiteService(session).bulk_import(items)

    for failure in result.failed:
        subject_code, prerequisite_code = pairs[failure.index]
        logger.info(
            "Skipped %s -> %s: %s", subject_code, prerequisite_code, failure.error
        )

    counts = {"created": len(result.succeeded), "skipped": len(result.failed) + missing}
    logger.info(
        "Prerequisite seeding completed: %s created, %s skipped",
        counts["created"],
        counts["skipped"],
    )
    return counts


async def seed_tenant_database(session: AsyncSession) -> dict:
    """Seed a tenant database with the demo catalogue.

    Args:
        session: Database session.

    Returns:
        Dictionary with seeded subjects and prerequisite counts.
    """
    logger.info("Seeding tenant database...")

    subjects = await seed_subjects(session)
    prerequisites = await seed_prerequisites(session, subjects)

    logger.info("Tenant database seeding complete")

    return {"subjects": subjects, "prerequisites": prerequisites}


if __name__ == "__main__":
    import os

    from src.core.config import get_settings
    from src.infrastructure.database.tenant_manager import TenantDatabaseManager
    from src.utils.logging import setup_logging

    async def main() -> None:
        settings = get_settings()
        setup_logging(settings)

        tenant_code = os.environ.get("TENANT_CODE", settings.tenant_db.default_tenant)
        manager = TenantDatabaseManager(settings)

        try:
            await manager.create_schema(tenant_code)
            async with manager.get_session(tenant_code) as session:
                await seed_tenant_database(session)
        finally:
            await manager.close_all()

    asyncio.run(main())
