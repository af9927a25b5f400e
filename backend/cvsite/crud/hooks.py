"""
CV Site Backend — Reusable Chain Hooks
========================================

What:  Small handlers meant for `pre-<verb>` / `post-<verb>` slots.
Who:   Referenced by resource configurations in cvsite.routes.resources.
"""

from typing import Callable

from cvsite.crud.context import RequestContext
from cvsite.exceptions import AuthenticationError


def filter_from_query(*fields: str) -> Callable[[RequestContext], None]:
    """
    Copies the named query parameters into the filter pattern.

    `GET /api/skills?category=language` with filter_from_query("category")
    lists only language skills.
    """

    def apply_filters(ctx: RequestContext) -> None:
        for name in fields:
            value = ctx.query.get(name)
            if value not in (None, ""):
                ctx.pattern[name] = value

    return apply_filters


def require_principal(ctx: RequestContext) -> None:
    """Rejects anonymous callers."""
    if ctx.principal.is_anonymous:
        raise AuthenticationError(
            message="This action requires an identified user",
            context={"path": ctx.request.url.path if ctx.request else None},
        )
