# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject domain package.

This package provides the subject catalogue that prerequisite edges
connect.
"""

from src.domains.subject.service import (
    SubjectCodeExistsError,
    SubjectNotFoundError,
    SubjectService,
    SubjectServiceError,
)

__all__ = [
    "SubjectService",
    "SubjectServiceError",
    "SubjectNotFoundError",
    "SubjectCodeExistsError",
]
