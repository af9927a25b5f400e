"""Create skills, projects and project_skills tables

Revision ID: 001
Revises: None
Create Date: 2024-03-02 00:00:00.000000+00:00

What:  Initial schema for the CRUD resources of the CV site.
How:   Every resource table carries creator / deleted / created_at
       (see cvsite/models/common.py); DELETE only flips `deleted`.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _crud_columns() -> list:
    return [
        sa.Column("creator", sa.String(64), nullable=True,
                  comment="Principal that created the record"),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.text("false"),
                  comment="Soft-delete marker; rows are never physically removed"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "skills",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("level", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(64), nullable=True),
        *_crud_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_skills_category", "skills", ["category"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("url", sa.String(500), nullable=True),
        sa.Column("main_skill_id", sa.Integer(), nullable=True),
        *_crud_columns(),
        sa.ForeignKeyConstraint(["main_skill_id"], ["skills.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "project_skills",
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("skill_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["skill_id"], ["skills.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("project_id", "skill_id"),
    )


def downgrade() -> None:
    op.drop_table("project_skills")
    op.drop_table("projects")
    op.drop_index("idx_skills_category", table_name="skills")
    op.drop_table("skills")
