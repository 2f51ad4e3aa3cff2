# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant database migrations.

Contains migrations for per-tenant tables:
- Subjects
- Subject prerequisite edges
"""
