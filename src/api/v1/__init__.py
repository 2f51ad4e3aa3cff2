# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    subjects: Subject catalogue and per-subject prerequisite lookups.
    prerequisites: Prerequisite edge management, bulk import/export and
        circular dependency checks.
"""

from fastapi import APIRouter

from src.api.v1 import prerequisites, subjects

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
router.include_router(prerequisites.router, prefix="/prerequisites", tags=["Prerequisites"])

__all__ = ["router"]
