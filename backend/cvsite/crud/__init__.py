"""
CV Site Backend — Resource Route Builder
==========================================

What:  Generates list/retrieve/create/update/patch/remove routes for an ORM
       model, with configurable hook chains, relation normalization and
       population, soft delete and cursor pagination.

Module Inventory:
    - actions.py:  Verb, ActionSpec, RouteConfig (action table + merge rules)
    - context.py:  RequestContext and the chain runner
    - params.py:   check_params, the validator heading every chain
    - resource.py: ResourceModel / RelationField descriptors and rendering
    - query.py:    Repository (queries, pagination, writes, population)
    - handlers.py: DefaultActions, the core handler of each verb
    - hooks.py:    reusable pre/post hooks
    - router.py:   build_resource_router
"""

from cvsite.crud.actions import ActionSpec, RouteConfig, Verb
from cvsite.crud.context import Principal, RequestContext
from cvsite.crud.hooks import filter_from_query, require_principal
from cvsite.crud.query import PopulateSpec
from cvsite.crud.resource import RelationField, ResourceModel
from cvsite.crud.router import build_resource_router

__all__ = [
    "ActionSpec",
    "PopulateSpec",
    "Principal",
    "RelationField",
    "RequestContext",
    "ResourceModel",
    "RouteConfig",
    "Verb",
    "build_resource_router",
    "filter_from_query",
    "require_principal",
]
