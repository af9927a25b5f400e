"""
CV Site Backend — CRUD Resource Routes
========================================

What:  Declares the CV resources and builds their routers.
Who:   Mounted by cvsite.main.create_app.

Route Inventory (prefix = settings.api_prefix):
    /skills     public reads, writes require an identified user,
                ?category= filter on list, sorted by name
    /projects   public reads, writes require an identified user,
                skills and main_skill populated, newest first
"""

from cvsite.config import settings
from cvsite.crud import (
    RelationField,
    ResourceModel,
    RouteConfig,
    build_resource_router,
    filter_from_query,
    require_principal,
)
from cvsite.models import Project, Skill

WRITE_HOOKS = {
    "pre-create": require_principal,
    "pre-update": require_principal,
    "pre-patch": require_principal,
    "pre-remove": require_principal,
}

skill_resource = ResourceModel(name="skill", model=Skill)

project_resource = ResourceModel(
    name="project",
    model=Project,
    relations=(
        RelationField(name="main_skill", target=Skill, column="main_skill_id"),
        RelationField(name="skills", target=Skill, many=True),
    ),
)

skills_router = build_resource_router(
    skill_resource,
    RouteConfig.from_options(
        actions={**WRITE_HOOKS, "pre-list": filter_from_query("category")},
        sort="name",
    ),
    prefix=f"{settings.api_prefix}/skills",
    tags=["Skills"],
)

projects_router = build_resource_router(
    project_resource,
    RouteConfig.from_options(
        actions=WRITE_HOOKS,
        populate=["skills", "main_skill"],
        sort="-created_at",
    ),
    prefix=f"{settings.api_prefix}/projects",
    tags=["Projects"],
)

routers = [skills_router, projects_router]
