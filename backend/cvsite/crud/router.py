"""
CV Site Backend — Resource Router Builder
===========================================

What:  Turns a ResourceModel plus a RouteConfig into a FastAPI APIRouter
       exposing the six canonical CRUD routes.
How:   1. Normalize populate entries and parse the sort option (fail fast)
       2. Build the default handlers over a Repository
       3. For every enabled verb: chain = [check_params] + pre + core + post
       4. Register one endpoint per verb that creates a RequestContext, runs
          the chain and serializes ctx.result
Who:   Called at import time by cvsite.routes.resources; routers are mounted
       by cvsite.main.create_app.

Example:

    router = build_resource_router(
        ResourceModel(name="skill", model=Skill),
        RouteConfig.from_options(
            actions={"pre-list": filter_from_query("category"), "remove": False},
            sort="name",
        ),
        prefix="/api/skills",
    )

A disabled verb has no route at all: requests for it get Starlette's routing
outcome (404, or 405 when another verb shares the path).
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from cvsite.crud.actions import Handler, RouteConfig, Verb
from cvsite.crud.context import RequestContext, run_chain
from cvsite.crud.handlers import DefaultActions
from cvsite.crud.params import check_params
from cvsite.crud.query import Repository, normalize_populate, parse_sort
from cvsite.crud.resource import ResourceModel
from cvsite.database import get_db_session
from cvsite.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"description": "Malformed id, paging parameter or body", "model": ErrorResponse},
    401: {"description": "Action requires an identified user", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}

# Verbs whose default handler raises NotFoundError
_NOT_FOUND_VERBS = frozenset({Verb.UPDATE, Verb.PATCH, Verb.REMOVE})


def _error_responses(verb: Verb) -> Dict[int, Dict[str, Any]]:
    responses = dict(_ERROR_RESPONSES)
    if verb in _NOT_FOUND_VERBS:
        responses[404] = {"description": "Record missing or deleted", "model": ErrorResponse}
    return responses


def build_resource_router(
    resource: ResourceModel,
    config: Optional[RouteConfig] = None,
    prefix: str = "",
    tags: Optional[List[str]] = None,
) -> APIRouter:
    """
    Build the CRUD router for one resource.

    Raises:
        ConfigurationError: invalid populate entries or sort fields (the
            action table itself is validated when the RouteConfig is built)
    """
    config = config or RouteConfig()
    repository = Repository(
        resource,
        populate=normalize_populate(resource, config.populate),
        order_by=parse_sort(resource, config.sort),
    )
    defaults = DefaultActions(resource, repository)

    router = APIRouter(prefix=prefix, tags=tags or [resource.name])
    for verb in config.enabled_verbs:
        chain = [check_params, *config.actions[verb].chain(defaults.for_verb(verb))]
        method, path = verb.route
        router.add_api_route(
            path,
            _make_endpoint(verb, chain),
            methods=[method],
            name=f"{resource.name}:{verb.value}",
            summary=f"{verb.value.capitalize()} {resource.name}",
            responses=_error_responses(verb),
        )
        logger.debug(
            "Route %s %s%s -> %d handler(s)", method, prefix, path, len(chain)
        )

    logger.info(
        "Built %s router at '%s' with actions: %s",
        resource.name,
        prefix or "/",
        ", ".join(verb.value for verb in config.enabled_verbs),
    )
    return router


def _make_endpoint(verb: Verb, chain: List[Handler]) -> Any:
    """Endpoint closure for one verb; item routes declare the path param."""

    async def run(request: Request, db: AsyncSession) -> JSONResponse:
        ctx = await RequestContext.from_request(request, db)
        await run_chain(chain, ctx)
        return JSONResponse(status_code=ctx.status_code, content=jsonable_encoder(ctx.result))

    if verb.has_item_id:

        async def item_endpoint(
            item_id: str,
            request: Request,
            db: AsyncSession = Depends(get_db_session),
        ) -> JSONResponse:
            return await run(request, db)

        return item_endpoint

    async def collection_endpoint(
        request: Request,
        db: AsyncSession = Depends(get_db_session),
    ) -> JSONResponse:
        return await run(request, db)

    return collection_endpoint
