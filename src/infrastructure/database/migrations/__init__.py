# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migrations package.

Alembic migrations for tenant databases. Every tenant database carries the
same schema: the subject catalogue and its prerequisite edges.
"""
