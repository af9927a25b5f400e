"""
CV Site Backend — Default CRUD Handlers
=========================================

What:  The core handler of each verb when the configuration does not
       replace it.
How:   Each method reads the RequestContext, runs one persistence call
       through the Repository, optionally re-selects with relation loaders,
       and leaves the rendered record in ctx.result.

Soft-delete semantics:
    list / retrieve   never return records with deleted = true
    update / patch    NotFoundError when the record is missing or deleted
    remove            NotFoundError only when no row has that id at all
"""

import logging
from typing import Any, Dict, List

from cvsite.crud.actions import Handler, Verb
from cvsite.crud.context import RequestContext
from cvsite.crud.query import Repository
from cvsite.crud.resource import ResourceModel
from cvsite.exceptions import NotFoundError
from cvsite.schemas.common import PageResponse

logger = logging.getLogger(__name__)


class DefaultActions:
    """Default verb implementations for one resource."""

    def __init__(self, resource: ResourceModel, repository: Repository):
        self.resource = resource
        self.repository = repository

    def for_verb(self, verb: Verb) -> List[Handler]:
        return [getattr(self, verb.value)]

    # ── helpers ───────────────────────────────────────────────────────────

    @property
    def _populated(self):
        return self.repository.populated_paths

    def _render(self, instance: Any, populated: bool = True) -> Any:
        return self.resource.serialize(instance, self._populated if populated else frozenset())

    def _id_pattern(self, ctx: RequestContext) -> Dict[str, Any]:
        pattern = dict(ctx.pattern)
        pattern[self.resource.primary_key] = ctx.params["item_id"]
        return pattern

    # ── verbs ─────────────────────────────────────────────────────────────

    async def list(self, ctx: RequestContext) -> None:
        limit = ctx.query.get("limit")
        if limit:
            items, cursor = await self.repository.paginate(
                ctx.db, ctx.pattern, limit=limit, cursor=ctx.query.get("cursor")
            )
            ctx.result = PageResponse(
                cursor=cursor,
                limit=limit,
                items=[self._render(item) for item in items],
                total=len(items),
            )
            return

        items = await self.repository.find(ctx.db, ctx.pattern)
        ctx.result = [self._render(item) for item in items]

    async def retrieve(self, ctx: RequestContext) -> None:
        instance = await self.repository.find_one(ctx.db, self._id_pattern(ctx))
        ctx.result = self._render(instance)

    async def create(self, ctx: RequestContext) -> None:
        values = self.resource.normalize_payload(ctx.payload)
        values[self.resource.creator_field] = ctx.principal.user_id
        instance = await self.repository.create(ctx.db, values)
        instance = await self.repository.reload(ctx.db, instance)
        ctx.result = self._render(instance)
        ctx.status_code = 201

    async def update(self, ctx: RequestContext) -> None:
        # Loaded without population: relation writes must diff against the
        # full, unfiltered collection
        instance = await self.repository.find_one(
            ctx.db, self._id_pattern(ctx), exclude_deleted=False, populate=False
        )
        if instance is None or getattr(instance, self.resource.soft_delete_field):
            raise NotFoundError(resource=self.resource.name, resource_id=str(ctx.params["item_id"]))

        values = self.resource.normalize_payload(ctx.payload)
        await self.repository.save(ctx.db, instance, values)
        logger.info("Updated %s %s", self.resource.name, ctx.params["item_id"])
        instance = await self.repository.reload(ctx.db, instance)
        ctx.result = self._render(instance)

    async def patch(self, ctx: RequestContext) -> None:
        await self.update(ctx)

    async def remove(self, ctx: RequestContext) -> None:
        instance = await self.repository.find_by_id(ctx.db, ctx.params["item_id"])
        if instance is None:
            raise NotFoundError(resource=self.resource.name, resource_id=str(ctx.params["item_id"]))
        await self.repository.mark_deleted(ctx.db, instance)
        ctx.result = self._render(instance, populated=False)
