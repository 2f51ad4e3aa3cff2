# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database seed package.

This package contains demo data for tenant databases: a subject catalogue
and the prerequisite edges between its subjects.
"""

from src.infrastructure.database.seeds.tenant import seed_tenant_database

__all__ = ["seed_tenant_database"]
