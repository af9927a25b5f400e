"""
CV Site Backend — Project SQLAlchemy Model
============================================

What:  ORM model for the `projects` table and its `project_skills`
       association table.
Who:   Exposed at /api/projects with `skills` populated on every response.

Relations:
    main_skill  many-to-one  → skills.id via main_skill_id
    skills      many-to-many → skills via project_skills

Both relations are declared to the route builder in cvsite.routes.resources,
which is where payload objects get reduced to ids.
"""

from typing import List, Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cvsite.database import Base
from cvsite.models.common import CRUDColumnsMixin
from cvsite.models.skill import Skill


project_skills = Table(
    "project_skills",
    Base.metadata,
    Column("project_id", ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Project(CRUDColumnsMixin, Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    main_skill_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("skills.id", ondelete="SET NULL"),
        nullable=True,
    )

    # lazy="raise": relations are only ever read after an explicit
    # selectinload; an implicit lazy load cannot run under AsyncSession
    main_skill: Mapped[Optional[Skill]] = relationship(lazy="raise")

    skills: Mapped[List[Skill]] = relationship(
        secondary=project_skills,
        lazy="raise",
        order_by=Skill.id,
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, title='{self.title}', deleted={self.deleted})>"
