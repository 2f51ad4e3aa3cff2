"""Academic Prerequisite Service.

Subject catalogue and prerequisite graph management for multi-tenant
school administration.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
