# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial tenant database schema.

Revision ID: 001_tenant_initial
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_tenant_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = ("tenant",)
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create subject and prerequisite tables."""
    op.create_table(
        "subjects",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("credits", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    # Directed edge: subject requires prerequisite
    op.create_table(
        "subject_prerequisites",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "subject_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "prerequisite_id",
            sa.String(36),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "subject_id", "prerequisite_id", name="uq_subject_prerequisites_pair"
        ),
        sa.CheckConstraint(
            "subject_id <> prerequisite_id", name="ck_subject_prerequisites_not_self"
        ),
    )
    op.create_index(
        "ix_subject_prerequisites_subject_id", "subject_prerequisites", ["subject_id"]
    )
    op.create_index(
        "ix_subject_prerequisites_prerequisite_id",
        "subject_prerequisites",
        ["prerequisite_id"],
    )


def downgrade() -> None:
    """Drop subject and prerequisite tables."""
    op.drop_index("ix_subject_prerequisites_prerequisite_id", "subject_prerequisites")
    op.drop_index("ix_subject_prerequisites_subject_id", "subject_prerequisites")
    op.drop_table("subject_prerequisites")
    op.drop_index("ix_subjects_code", "subjects")
    op.drop_table("subjects")
