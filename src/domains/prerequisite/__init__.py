# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite domain package.

This package provides prerequisite graph management including:
- Prerequisite edge CRUD operations
- Circular dependency detection
- Transitive prerequisite chains
- Bulk import and export
"""

from src.domains.prerequisite.graph import ChainLink, PrerequisiteGraph
from src.domains.prerequisite.service import (
    BulkImportError,
    CircularDependencyError,
    DuplicateEdgeError,
    InvalidEdgeError,
    PrerequisiteNotFoundError,
    PrerequisiteService,
    PrerequisiteServiceError,
)

__all__ = [
    "ChainLink",
    "PrerequisiteGraph",
    "PrerequisiteService",
    "PrerequisiteServiceError",
    "InvalidEdgeError",
    "DuplicateEdgeError",
    "CircularDependencyError",
    "PrerequisiteNotFoundError",
    "BulkImportError",
]
