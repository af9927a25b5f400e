# Models package init
# Importing the package registers every table on Base.metadata (Alembic, tests).
from cvsite.models.skill import Skill
from cvsite.models.project import Project, project_skills

__all__ = ["Skill", "Project", "project_skills"]
