"""
CV Site Backend — Skill SQLAlchemy Model
==========================================

What:  ORM model for the `skills` table (one row per skill shown on the CV).
Who:   Exposed at /api/skills; referenced by projects.

Query Patterns:
    - List by category: SELECT ... WHERE category = :c AND deleted IS NOT true
      ORDER BY name → uses idx_skills_category
"""

from typing import Optional

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cvsite.database import Base
from cvsite.models.common import CRUDColumnsMixin


class Skill(CRUDColumnsMixin, Base):
    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(120), nullable=False)

    # 1 (basic) .. 5 (expert); free-form on the client side, so nullable
    level: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # e.g. "language", "framework", "tooling"
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        Index("idx_skills_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Skill(id={self.id}, name='{self.name}', deleted={self.deleted})>"
