# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for tenant seed data."""

import pytest

from src.domains.prerequisite.service import PrerequisiteService
from src.infrastructure.database.seeds import seed_tenant_database
from src.infrastructure.database.seeds.tenant import PREREQUISITES, SUBJECTS


class TestTenantSeeds:
    """Tests for seed_tenant_database."""

    @pytest.mark.asyncio
    async def test_seed_creates_catalogue(self, db_session):
        result = await seed_tenant_database(db_session)

        assert set(result["subjects"]) == {code for code, _, _ in SUBJECTS}
        assert result["prerequisites"] == {"created": len(PREREQUISITES), "skipped": 0}

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        await seed_tenant_database(db_session)

        result = await seed_tenant_database(db_session)

        assert result["prerequisites"] == {"created": 0, "skipped": len(PREREQUISITES)}
        edges = await PrerequisiteService(db_session).list_prerequisites()
        assert len(edges) == len(PREREQUISITES)

    @pytest.mark.asyncio
    async def test_seeded_chain(self, db_session):
        result = await seed_tenant_database(db_session)
        subjects = result["subjects"]

        chain = await PrerequisiteService(db_session).get_prerequisite_chain(
            subjects["MATH401"].id
        )

        assert [node.subject.code for node in chain.values()] == [
            "MATH401",
            "MATH301",
            "MATH201",
        ]
        assert chain[subjects["MATH201"].id].prerequisites[0].level == 3
