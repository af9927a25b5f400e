"""
CV Site Backend — Resource Action Table
=========================================

What:  The six CRUD verbs, their HTTP bindings, and the configuration that
       decides which handler chain each verb runs.
How:   Each verb owns an ActionSpec: (pre hooks, core handlers, post hooks)
       plus an enabled flag. The final chain is pre + core + post, with the
       request-parameter validator placed in front by the router.
Who:   Built by resource definitions (cvsite.routes.resources) and tests;
       consumed by cvsite.crud.router.build_resource_router.

Verb → Route:

    create    POST    /
    list      GET     /
    retrieve  GET     /{item_id}
    update    PUT     /{item_id}
    patch     PATCH   /{item_id}
    remove    DELETE  /{item_id}

Option keys accepted by RouteConfig.from_options (processed in order):

    "<verb>": handler | [handlers]   replace the core chain
    "<verb>": False                  remove the route
    "pre-<verb>" / "post-<verb>"     prepend / append hooks to one verb
    "pre-*" / "post-*"               prepend / append to every verb enabled
                                     at that point of the declaration

Anything else raises ConfigurationError when the router is built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from cvsite.exceptions import ConfigurationError

Handler = Callable[[Any], Any]

ITEM_PATH = "/{item_id}"


class Verb(str, Enum):
    CREATE = "create"
    LIST = "list"
    RETRIEVE = "retrieve"
    UPDATE = "update"
    REMOVE = "remove"
    PATCH = "patch"

    @property
    def route(self) -> Tuple[str, str]:
        """(HTTP method, path) for this verb."""
        return _ROUTES[self]

    @property
    def has_item_id(self) -> bool:
        return self.route[1] == ITEM_PATH


_ROUTES: Dict[Verb, Tuple[str, str]] = {
    Verb.CREATE: ("POST", "/"),
    Verb.LIST: ("GET", "/"),
    Verb.RETRIEVE: ("GET", ITEM_PATH),
    Verb.UPDATE: ("PUT", ITEM_PATH),
    Verb.REMOVE: ("DELETE", ITEM_PATH),
    Verb.PATCH: ("PATCH", ITEM_PATH),
}


def _as_verb(name: Any, key: str) -> Verb:
    if isinstance(name, Verb):
        return name
    try:
        return Verb(name)
    except ValueError:
        raise ConfigurationError(
            message=f"action not found: {key}",
            context={"known_actions": [v.value for v in Verb]},
        )


def flatten_handlers(value: Any, key: str) -> List[Handler]:
    """Flattens nested handler lists; every leaf must be callable."""
    if isinstance(value, (list, tuple)):
        handlers: List[Handler] = []
        for item in value:
            handlers.extend(flatten_handlers(item, key))
        return handlers
    if callable(value):
        return [value]
    raise ConfigurationError(
        message=f"'{key}' must be a handler, a list of handlers or False",
        context={"value": repr(value)},
    )


@dataclass
class ActionSpec:
    """
    Handler configuration for one verb.

    `handlers=None` keeps the default core handler; a list replaces it.
    """

    pre: List[Handler] = field(default_factory=list)
    handlers: Optional[List[Handler]] = None
    post: List[Handler] = field(default_factory=list)
    enabled: bool = True

    def chain(self, default: Sequence[Handler]) -> List[Handler]:
        core = self.handlers if self.handlers is not None else list(default)
        return [*self.pre, *core, *self.post]


@dataclass
class RouteConfig:
    """
    Everything build_resource_router needs besides the resource itself.

    Attributes:
        actions:  Verb → ActionSpec; verbs left out keep the defaults
        populate: Relations to render as nested records (see query.normalize_populate)
        sort:     Ordering for unpaginated list responses (see query.parse_sort)
    """

    actions: Dict[Verb, ActionSpec] = field(default_factory=dict)
    populate: Sequence[Any] = ()
    sort: Optional[Any] = None

    def __post_init__(self) -> None:
        specs: Dict[Verb, ActionSpec] = {}
        for name, spec in self.actions.items():
            verb = _as_verb(name, str(name))
            if not isinstance(spec, ActionSpec):
                raise ConfigurationError(
                    message=f"Configuration for '{verb.value}' must be an ActionSpec",
                )
            specs[verb] = spec
        for verb in Verb:
            specs.setdefault(verb, ActionSpec())
        self.actions = specs

    @property
    def enabled_verbs(self) -> List[Verb]:
        return [verb for verb in Verb if self.actions[verb].enabled]

    @classmethod
    def from_options(
        cls,
        actions: Optional[Mapping[str, Any]] = None,
        populate: Sequence[Any] = (),
        sort: Optional[Any] = None,
    ) -> "RouteConfig":
        """Builds a RouteConfig from string-keyed action options."""
        specs = {verb: ActionSpec() for verb in Verb}

        for key, value in (actions or {}).items():
            if "-" not in key:
                spec = specs[_as_verb(key, key)]
                if value is False:
                    spec.enabled = False
                else:
                    spec.handlers = flatten_handlers(value, key)
                    spec.enabled = True
                continue

            prefix, _, target = key.partition("-")
            if prefix not in ("pre", "post"):
                raise ConfigurationError(
                    message=f"Unsupported action option '{key}'",
                    context={"expected": "<verb>, pre-<verb>, post-<verb>, pre-*, post-*"},
                )
            handlers = flatten_handlers(value, key)
            if target == "*":
                verbs = [verb for verb in Verb if specs[verb].enabled]
            else:
                verbs = [_as_verb(target, key)]
            for verb in verbs:
                getattr(specs[verb], prefix).extend(handlers)

        return cls(actions=specs, populate=populate, sort=sort)
