"""
CV Site Backend — Resource Descriptors
========================================

What:  Describes an ORM model to the CRUD route builder: which fields are
       relations, which columns a payload may write, and how a record is
       rendered as JSON.
Who:   Built once per resource in cvsite.routes.resources; read by the
       repository and default handlers on every request.

Relation fields are declared explicitly rather than discovered from the
mapper, so a payload can only ever rewrite the references listed here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Type

from sqlalchemy import inspect

from cvsite.exceptions import ConfigurationError


def reference_id(value: Any) -> Any:
    """Reduces an embedded object to its id; anything else is returned as-is."""
    if isinstance(value, Mapping) and value.get("id") is not None:
        return value["id"]
    return value


@dataclass(frozen=True)
class RelationField:
    """
    A payload field holding a reference to another model.

    Attributes:
        name:   Payload key and ORM relationship attribute (e.g. "skills")
        target: Referenced ORM class
        many:   True for collections (many-to-many / one-to-many)
        column: Foreign-key attribute written for single references
                (e.g. "main_skill_id"); required when many is False
    """

    name: str
    target: Type[Any]
    many: bool = False
    column: Optional[str] = None

    def normalize(self, value: Any) -> Any:
        """
        Rewrites `{"id": 3, "name": "Go"}` to `3`, element-wise for sequences.

        Idempotent: ids pass through unchanged, so an already-normalized
        payload yields the same result.
        """
        if self.many and isinstance(value, (list, tuple)):
            return [reference_id(item) for item in value]
        return reference_id(value)


@dataclass
class ResourceModel:
    """
    Data-model descriptor handed to build_resource_router.

    The descriptor never changes the underlying schema; it only reads the
    mapper to learn column names and the primary key.
    """

    name: str
    model: Type[Any]
    relations: Sequence[RelationField] = field(default_factory=tuple)
    soft_delete_field: str = "deleted"
    creator_field: str = "creator"
    read_only: Sequence[str] = ("created_at",)

    def __post_init__(self) -> None:
        mapper = inspect(self.model)
        self.columns: List[str] = [attr.key for attr in mapper.column_attrs]
        primary_keys = [col.key for col in mapper.primary_key]
        if len(primary_keys) != 1:
            raise ConfigurationError(
                message=f"{self.name} must have exactly one primary key column",
                context={"primary_key": primary_keys},
            )
        self.primary_key: str = primary_keys[0]

        for required in (self.soft_delete_field, self.creator_field):
            if required not in self.columns:
                raise ConfigurationError(
                    message=f"{self.name} has no '{required}' column",
                    context={"resource": self.name},
                )

        self.relation_map: Dict[str, RelationField] = {}
        for relation in self.relations:
            if relation.name not in mapper.relationships:
                raise ConfigurationError(
                    message=f"{self.name} has no relationship '{relation.name}'",
                    context={"resource": self.name},
                )
            if not relation.many and relation.column not in self.columns:
                raise ConfigurationError(
                    message=f"Relation '{relation.name}' needs a foreign-key column",
                    context={"resource": self.name, "column": relation.column},
                )
            self.relation_map[relation.name] = relation

        # Foreign-key columns are rendered and written through their relation
        self._fk_columns: Dict[str, str] = {
            rel.column: rel.name for rel in self.relations if not rel.many
        }
        protected = {
            self.primary_key,
            self.soft_delete_field,
            self.creator_field,
            *self.read_only,
            *self._fk_columns,
        }
        self.writable: FrozenSet[str] = frozenset(
            col for col in self.columns if col not in protected
        )

    # ── Payload helpers ───────────────────────────────────────────────────

    def column(self, name: str) -> Any:
        return getattr(self.model, name)

    def normalize_payload(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Returns a copy of `payload` with every truthy relation value reduced to ids."""
        normalized = dict(payload)
        for name, relation in self.relation_map.items():
            if normalized.get(name):
                normalized[name] = relation.normalize(normalized[name])
        return normalized

    # ── Rendering ─────────────────────────────────────────────────────────

    def serialize(self, instance: Any, populated: FrozenSet[str] = frozenset()) -> Optional[Dict[str, Any]]:
        """
        Renders a record as a JSON-ready dict.

        Unpopulated relations render as ids (or lists of ids); relations in
        `populated` render as nested objects. Attributes that were never
        loaded are skipped rather than lazily fetched.
        """
        if instance is None:
            return None
        state = inspect(instance)
        unloaded = state.unloaded
        data: Dict[str, Any] = {}
        for col in self.columns:
            if col in self._fk_columns or col in unloaded:
                continue
            data[col] = getattr(instance, col)

        for name, relation in self.relation_map.items():
            if not relation.many:
                if name in populated and name not in unloaded:
                    data[name] = _plain(getattr(instance, name))
                else:
                    data[name] = getattr(instance, relation.column)
                continue
            if name in unloaded:
                continue
            related = getattr(instance, name)
            if name in populated:
                data[name] = [_plain(item) for item in related]
            else:
                data[name] = [inspect(item).identity[0] for item in related]
        return data


def _plain(instance: Any) -> Optional[Dict[str, Any]]:
    """Column-only rendering of a related record."""
    if instance is None:
        return None
    state = inspect(instance)
    return {
        attr.key: getattr(instance, attr.key)
        for attr in state.mapper.column_attrs
        if attr.key not in state.unloaded
    }
