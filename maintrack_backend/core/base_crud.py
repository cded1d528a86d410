"""
Tenant-scoped store operations shared by the maintenance entities.
Every read and write filters on tenant_organization_id.
"""

from abc import ABC
from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import String, and_, cast, func, or_, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from ..modules.commons.schemas import PaginationParams
from .exceptions import DatabaseError
from .logging import get_logger
from .pagination import page_offset
from .utils import sanitize_string

logger = get_logger(__name__)

ModelType = TypeVar("ModelType")
FilterSchemaType = TypeVar("FilterSchemaType", bound=BaseModel)


class BaseCRUD(Generic[ModelType, FilterSchemaType], ABC):
    """
    Base CRUD class providing the store contract for one entity collection.

    Subclasses describe their filter schema through `_apply_filters`; the
    base class supplies tenant scoping, search, tag overlap, ordering and
    pagination.

    Attributes:
        model: SQLAlchemy model class
        search_fields: Fields to search in for text-based queries
        default_order_by: Default ordering field
        default_order_desc: Whether the default ordering is descending
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    # Overridden per entity
    search_fields: list[str] = []
    default_order_by: str = "created_at"
    default_order_desc: bool = True

    def _apply_tenant_filter(self, query: Select, tenant_organization_id: UUID) -> Select:
        """Apply tenant filtering."""
        return query.where(self.model.tenant_organization_id == tenant_organization_id)

    def _apply_search_filter(
        self, query: Select, search_query: str | None = None
    ) -> Select:
        """Apply text-based search filtering across configured search fields."""
        search_query = sanitize_string(search_query)
        if search_query and self.search_fields:
            search_conditions = []
            for field_name in self.search_fields:
                if hasattr(self.model, field_name):
                    field = getattr(self.model, field_name)
                    search_conditions.append(field.ilike(f"%{search_query}%"))
            if search_conditions:
                query = query.where(or_(*search_conditions))
        return query

    def _apply_tags_filter(self, query: Select, tags: list[str] | None = None) -> Select:
        """Match rows whose JSON tag list shares at least one tag with `tags`."""
        if tags and hasattr(self.model, "tags"):
            tag_text = cast(self.model.tags, String)
            query = query.where(or_(*[tag_text.like(f'%"{tag}"%') for tag in tags]))
        return query

    def _apply_in_filter(self, query: Select, field_name: str, values: list | None) -> Select:
        """Set-membership filter; an empty or missing list means no filter."""
        if values:
            query = query.where(getattr(self.model, field_name).in_(values))
        return query

    def _apply_equal_filter(self, query: Select, field_name: str, value: Any) -> Select:
        if value is not None:
            query = query.where(getattr(self.model, field_name) == value)
        return query

    def _apply_range_filter(
        self,
        query: Select,
        field_name: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Select:
        """Inclusive range filter on a datetime column."""
        field = getattr(self.model, field_name)
        if start is not None:
            query = query.where(field >= start)
        if end is not None:
            query = query.where(field <= end)
        return query

    def _apply_filters(
        self, query: Select, filters: FilterSchemaType | None, now: datetime
    ) -> Select:
        """Apply the entity-specific filter schema. Override in subclasses."""
        return query

    def _apply_ordering(
        self, query: Select, pagination: PaginationParams | None = None
    ) -> Select:
        """Order by the requested column, or the store default for unknown ones."""
        order_field, descending = self.default_order_by, self.default_order_desc
        if pagination is not None:
            order_field, descending = pagination.resolve_sort(
                self.default_order_by, self.default_order_desc
            )
            if order_field not in sa_inspect(self.model).column_attrs:
                order_field = self.default_order_by

        field = getattr(self.model, order_field)
        # Tie-break on id so pages stay stable
        if descending:
            return query.order_by(field.desc(), self.model.id.desc())
        return query.order_by(field.asc(), self.model.id.asc())

    def _filtered_query(
        self,
        query: Select,
        tenant_organization_id: UUID,
        filters: FilterSchemaType | None,
        now: datetime,
    ) -> Select:
        query = self._apply_tenant_filter(query, tenant_organization_id)
        if filters is not None:
            query = self._apply_search_filter(query, getattr(filters, "search", None))
            query = self._apply_tags_filter(query, getattr(filters, "tags", None))
        return self._apply_filters(query, filters, now)

    async def create(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """Insert a fully populated record and commit."""
        db.add(db_obj)
        return await self._commit(db, db_obj)

    async def create_unless_conflict(
        self, db: AsyncSession, db_obj: ModelType
    ) -> ModelType | None:
        """
        Insert a record inside a SAVEPOINT, then commit.

        A unique-constraint violation rolls back only the savepoint, so
        objects the session already returned stay loaded and usable.

        Returns:
            The created model instance, or None on an integrity conflict
        """
        try:
            async with db.begin_nested():
                db.add(db_obj)
                await db.flush()
        except IntegrityError:
            return None
        return await self._commit(db, db_obj)

    async def get(
        self,
        db: AsyncSession,
        tenant_organization_id: UUID,
        id: UUID,
    ) -> ModelType | None:
        """Load one record, or None when it is absent from this tenant."""
        query = select(self.model).where(
            and_(
                self.model.tenant_organization_id == tenant_organization_id,
                self.model.id == id,
            )
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        tenant_organization_id: UUID,
        pagination: PaginationParams,
        now: datetime,
        filters: FilterSchemaType | None = None,
    ) -> tuple[list[ModelType], int]:
        """
        Get multiple records with pagination, filtering, and search.

        Args:
            db: Database session
            tenant_organization_id: Tenant organization ID
            pagination: Pagination and sorting parameters
            now: Reference time for time-relative filters (overdue)
            filters: Entity filter schema

        Returns:
            Tuple of (records, total_count)
        """
        total = await self.count(db, tenant_organization_id, now, filters)

        query = self._filtered_query(
            select(self.model), tenant_organization_id, filters, now
        )
        query = self._apply_ordering(query, pagination)
        query = query.offset(
            page_offset(pagination.page, pagination.page_size)
        ).limit(pagination.page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def list_all(
        self,
        db: AsyncSession,
        tenant_organization_id: UUID,
        now: datetime,
        filters: FilterSchemaType | None = None,
    ) -> list[ModelType]:
        """Get every matching record of a tenant, unpaginated."""
        query = self._filtered_query(
            select(self.model), tenant_organization_id, filters, now
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def save(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """Persist in-memory changes of a loaded record in one commit."""
        db.add(db_obj)
        try:
            return await self._commit(db, db_obj)
        except IntegrityError as e:
            raise DatabaseError(
                f"Failed to update {self.model.__name__}", {"error": str(e.orig)}
            ) from e

    async def save_many(self, db: AsyncSession, db_objs: list[ModelType]) -> None:
        """Persist changes of several loaded records in one commit."""
        if not db_objs:
            return
        db.add_all(db_objs)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise DatabaseError(
                f"Failed to update {self.model.__name__} records", {"error": str(e)}
            ) from e

    def apply_patch(self, db_obj: ModelType, patch: dict[str, Any]) -> list[str]:
        """
        Copy patch values onto a loaded record.

        Explicit None clears nullable columns; None for a NOT NULL column is
        ignored. Keys that are not mapped columns are skipped.

        Returns:
            Names of the attributes that were assigned
        """
        columns = sa_inspect(self.model).column_attrs
        applied = []
        for field, value in patch.items():
            if field not in columns:
                continue
            if value is None and not columns[field].columns[0].nullable:
                continue
            setattr(db_obj, field, value)
            applied.append(field)
        return applied

    async def delete(self, db: AsyncSession, db_obj: ModelType) -> None:
        """Hard delete a record."""
        await db.delete(db_obj)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise DatabaseError(
                f"Failed to delete {self.model.__name__}", {"error": str(e)}
            ) from e

    async def count(
        self,
        db: AsyncSession,
        tenant_organization_id: UUID,
        now: datetime,
        filters: FilterSchemaType | None = None,
    ) -> int:
        """Count records matching the given filters."""
        query = self._filtered_query(
            select(func.count(self.model.id)), tenant_organization_id, filters, now
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def count_by_field(
        self,
        db: AsyncSession,
        tenant_organization_id: UUID,
        field_name: str,
    ) -> dict[str, int]:
        """Group the tenant's records by one column and count each group."""
        field = getattr(self.model, field_name)
        query = self._apply_tenant_filter(
            select(field, func.count(self.model.id)), tenant_organization_id
        ).group_by(field)
        result = await db.execute(query)
        counts: dict[str, int] = {}
        for value, count in result.all():
            key = value.value if hasattr(value, "value") else str(value)
            counts[key] = count
        return counts

    async def _commit(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """Commit, rolling back on failure so the store keeps its prior state.

        IntegrityError is re-raised as-is for callers that resolve conflicts
        themselves; any other failure becomes a DatabaseError.
        """
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(
                "Integrity conflict, session rolled back",
                extra={"model": self.model.__name__},
            )
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Commit failed, session rolled back",
                extra={"model": self.model.__name__, "error": str(e)},
            )
            raise DatabaseError(
                f"Failed to persist {self.model.__name__}", {"error": str(e)}
            ) from e
        await db.refresh(db_obj)
        return db_obj
