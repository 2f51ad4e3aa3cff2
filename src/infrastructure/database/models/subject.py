# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject and subject prerequisite models.

A SubjectPrerequisite row is a directed edge "subject requires prerequisite".
Uniqueness of the pair and the no-self-reference rule are enforced by the
database; acyclicity of the whole graph is enforced by PrerequisiteService.
"""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Subject(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Course subject that may require other subjects as prerequisites."""

    __tablename__ = "subjects"

    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Subject {self.code}>"


class SubjectPrerequisite(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Directed prerequisite edge between two subjects."""

    __tablename__ = "subject_prerequisites"
    __table_args__ = (
        UniqueConstraint("subject_id", "prerequisite_id", name="uq_subject_prerequisites_pair"),
        CheckConstraint("subject_id <> prerequisite_id", name="ck_subject_prerequisites_not_self"),
    )

    subject_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    prerequisite_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<SubjectPrerequisite {self.subject_id} -> {self.prerequisite_id}>"
