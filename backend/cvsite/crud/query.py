"""
CV Site Backend — CRUD Query Layer
====================================

What:  All database access for a resource router: filtered finds, id
       lookups, cursor pagination, create/save, soft delete and relation
       population.
How:   Async SQLAlchemy 2.0 `select()` statements executed on the request's
       AsyncSession. Every write ends in a flush; population is a separate
       re-select issued only after that flush has completed.
Who:   Used by cvsite.crud.handlers.DefaultActions.

Population:
    A populate entry loads a relation as nested records. With
    `exclude_deleted` (the default for bare field names) soft-deleted
    targets are filtered out with a loader criteria:

        selectinload(Project.skills.and_(Skill.deleted.is_not(True)))

    Unpopulated collections are still loaded (unfiltered) so they can be
    rendered as id lists.

Cursor Pagination:
    Pages are ordered by primary key descending. The cursor is the id of the
    last item of the previous page and acts as an exclusive upper bound:

        SELECT ... WHERE deleted IS NOT true AND id < :cursor
        ORDER BY id DESC LIMIT :limit
"""

import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import asc, desc, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cvsite.crud.params import MAX_ID
from cvsite.crud.resource import RelationField, ResourceModel
from cvsite.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Construction-time options
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PopulateSpec:
    """A relation to load as nested records on every response."""

    path: str
    exclude_deleted: bool = True


PopulateEntry = Union[str, PopulateSpec, Mapping[str, Any]]
SortSpec = Union[str, Sequence[str], Mapping[str, int]]


def normalize_populate(
    resource: ResourceModel, entries: Optional[Iterable[PopulateEntry]]
) -> Tuple[PopulateSpec, ...]:
    """
    Turns configuration entries into PopulateSpecs.

    A bare field name is sugar for populating that relation while excluding
    soft-deleted targets. Mappings accept `path` and `exclude_deleted`.
    """
    specs: List[PopulateSpec] = []
    for entry in entries or ():
        if isinstance(entry, str):
            spec = PopulateSpec(path=entry)
        elif isinstance(entry, PopulateSpec):
            spec = entry
        elif isinstance(entry, Mapping) and "path" in entry:
            spec = PopulateSpec(
                path=entry["path"],
                exclude_deleted=bool(entry.get("exclude_deleted", True)),
            )
        else:
            raise ConfigurationError(
                message=f"Invalid populate entry for {resource.name}: {entry!r}",
            )
        if spec.path not in resource.relation_map:
            raise ConfigurationError(
                message=f"Cannot populate '{spec.path}': not a declared relation of {resource.name}",
                context={"relations": sorted(resource.relation_map)},
            )
        specs.append(spec)
    return tuple(specs)


def parse_sort(resource: ResourceModel, spec: Optional[SortSpec]) -> Tuple[Any, ...]:
    """
    Parses a sort specification into ORDER BY clauses.

    Accepted forms:
        "-created_at name"          leading '-' means descending
        ["-created_at", "name"]
        {"created_at": -1, "name": 1}
    """
    if not spec:
        return ()
    if isinstance(spec, Mapping):
        items = [(name, int(direction) < 0) for name, direction in spec.items()]
    else:
        tokens = spec.split() if isinstance(spec, str) else list(spec)
        items = [(token.lstrip("-"), token.startswith("-")) for token in tokens]

    clauses = []
    for name, descending in items:
        if name not in resource.columns:
            raise ConfigurationError(
                message=f"Cannot sort {resource.name} by unknown field '{name}'",
                context={"columns": resource.columns},
            )
        column = resource.column(name)
        clauses.append(desc(column) if descending else asc(column))
    return tuple(clauses)


def _coerce_id(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(message=f"Invalid reference in '{field}': {value!r}", field=field)
    try:
        ref = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            message=f"Invalid reference in '{field}': {value!r}",
            field=field,
        )
    if not 1 <= ref <= MAX_ID:
        raise ValidationError(message=f"Reference out of range in '{field}': {ref}", field=field)
    return ref


# ══════════════════════════════════════════════════════════════════════════
# Repository
# ══════════════════════════════════════════════════════════════════════════


class Repository:
    """
    Query/persistence operations for one resource.

    Stateless apart from construction-time options; every method takes the
    request's session explicitly.
    """

    def __init__(
        self,
        resource: ResourceModel,
        populate: Sequence[PopulateSpec] = (),
        order_by: Sequence[Any] = (),
    ):
        self.resource = resource
        self.populate = {spec.path: spec for spec in populate}
        self.order_by = tuple(order_by)
        self.model = resource.model
        self.pk = resource.column(resource.primary_key)

    @property
    def populated_paths(self) -> FrozenSet[str]:
        return frozenset(self.populate)

    # ── Statement building ────────────────────────────────────────────────

    def loader_options(self, populate: bool = True) -> List[Any]:
        options = []
        for name, relation in self.resource.relation_map.items():
            attr = self.resource.column(name)
            spec = self.populate.get(name) if populate else None
            if spec is not None:
                if spec.exclude_deleted:
                    target_deleted = getattr(relation.target, self.resource.soft_delete_field)
                    attr = attr.and_(target_deleted.is_not(True))
                options.append(selectinload(attr))
            elif relation.many:
                options.append(selectinload(attr))
        return options

    def not_deleted(self) -> Any:
        return self.resource.column(self.resource.soft_delete_field).is_not(True)

    def filters(self, pattern: Mapping[str, Any]) -> List[Any]:
        """Equality filters from a pattern; list values become IN clauses."""
        clauses = []
        for key, value in pattern.items():
            if key not in self.resource.columns:
                raise ValidationError(
                    message=f"Cannot filter {self.resource.name} by unknown field '{key}'",
                    field=key,
                )
            column = self.resource.column(key)
            if isinstance(value, (list, tuple, set)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find(
        self, db: AsyncSession, pattern: Mapping[str, Any], populate: bool = True
    ) -> List[Any]:
        stmt = (
            select(self.model)
            .where(*self.filters(pattern), self.not_deleted())
            .options(*self.loader_options(populate))
        )
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(
        self,
        db: AsyncSession,
        pattern: Mapping[str, Any],
        exclude_deleted: bool = True,
        populate: bool = True,
    ) -> Optional[Any]:
        stmt = select(self.model).where(*self.filters(pattern))
        if exclude_deleted:
            stmt = stmt.where(self.not_deleted())
        stmt = stmt.options(*self.loader_options(populate)).limit(1)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def find_by_id(self, db: AsyncSession, item_id: int) -> Optional[Any]:
        """Primary-key lookup that ignores the soft-delete marker."""
        return await self.find_one(
            db, {self.resource.primary_key: item_id}, exclude_deleted=False, populate=False
        )

    async def paginate(
        self,
        db: AsyncSession,
        pattern: Mapping[str, Any],
        limit: int,
        cursor: Optional[int] = None,
    ) -> Tuple[List[Any], Optional[int]]:
        """
        Returns one page and the cursor for the next one.

        The next cursor is the id of the last returned item, or None when the
        page is empty.
        """
        stmt = select(self.model).where(*self.filters(pattern), self.not_deleted())
        if cursor is not None:
            stmt = stmt.where(self.pk < cursor)
        stmt = (
            stmt.options(*self.loader_options())
            .order_by(self.pk.desc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        items = list(result.scalars().all())
        next_cursor = getattr(items[-1], self.resource.primary_key) if items else None
        return items, next_cursor

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, values: Mapping[str, Any]) -> Any:
        instance = self.model()
        creator = self.resource.creator_field
        setattr(instance, creator, values.get(creator))
        await self._assign(db, instance, values)
        db.add(instance)
        await db.flush()
        logger.info("Created %s %s", self.resource.name, getattr(instance, self.resource.primary_key))
        return instance

    async def save(self, db: AsyncSession, instance: Any, values: Mapping[str, Any]) -> Any:
        await self._assign(db, instance, values)
        await db.flush()
        return instance

    async def mark_deleted(self, db: AsyncSession, instance: Any) -> Any:
        setattr(instance, self.resource.soft_delete_field, True)
        await db.flush()
        logger.info(
            "Soft-deleted %s %s", self.resource.name, getattr(instance, self.resource.primary_key)
        )
        return instance

    async def reload(self, db: AsyncSession, instance: Any, populate: bool = True) -> Any:
        """
        Re-selects a flushed record with relation loaders applied.

        populate_existing overwrites the identity-map copy, so relations
        changed by the preceding save are read back from the database.
        """
        stmt = (
            select(self.model)
            .where(self.pk == getattr(instance, self.resource.primary_key))
            .options(*self.loader_options(populate))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalars().one()

    async def _assign(self, db: AsyncSession, instance: Any, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            if key in self.resource.writable:
                setattr(instance, key, value)
            elif key in self.resource.relation_map:
                await self._bind(db, instance, self.resource.relation_map[key], value)

    async def _bind(self, db: AsyncSession, instance: Any, relation: RelationField, value: Any) -> None:
        """Writes normalized reference ids onto the record."""
        if relation.many:
            ids = list(dict.fromkeys(_coerce_id(relation.name, v) for v in (value or [])))
            targets = await self._load_targets(db, relation, ids)
            setattr(instance, relation.name, targets)
            return

        if value is None or value == "":
            setattr(instance, relation.column, None)
            return
        ref = _coerce_id(relation.name, value)
        await self._load_targets(db, relation, [ref])
        setattr(instance, relation.column, ref)

    async def _load_targets(self, db: AsyncSession, relation: RelationField, ids: List[int]) -> List[Any]:
        if not ids:
            return []
        target_pk = inspect(relation.target).primary_key[0]
        result = await db.execute(select(relation.target).where(target_pk.in_(ids)))
        found = {inspect(t).identity[0]: t for t in result.scalars().all()}
        missing = [i for i in ids if i not in found]
        if missing:
            raise ValidationError(
                message=f"Unknown {relation.name} reference(s): {missing}",
                field=relation.name,
                context={"missing": missing},
            )
        return [found[i] for i in ids]
