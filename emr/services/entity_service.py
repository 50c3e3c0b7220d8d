"""
Generic entity service: one instance per exposed entity type.

Design notes
------------
- Every entity supports the same six operations (get_by_id, get, create,
  update, patch, delete); a service is parametrised only by the mapped
  model, its pydantic schema and the public route name.
- Failures raise ``ApplicationError``; nothing is caught here.  The
  ``get_db`` dependency rolls the request's transaction back.
- Service methods flush but do not commit; the transaction boundary is
  owned by ``get_db`` in the router layer.
- Relationships are declared ``lazy="noload"``; ``get_by_id`` eager-loads
  only the relations a projected field list references.
"""
import logging
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from emr.exceptions import MISMATCHED_ID, PATCH_MISSING, ApplicationError, not_found
from emr.models import SYSTEM_COLUMNS
from emr.patching import apply_patch
from emr.projection import map_to_fields, relations_to_load
from emr.query import build_query, run_query
from emr.schemas import FilterCriterion

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityService:
    def __init__(self, model, schema: type[BaseModel], name: str | None = None) -> None:
        self.model = model
        self.schema = schema
        self.name = name or model.__name__.lower()
        self.writable_fields = frozenset(schema.model_fields) - SYSTEM_COLUMNS

    def __repr__(self) -> str:
        return f"EntityService({self.model.__name__})"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch(self, db: AsyncSession, entity_id: uuid.UUID):
        result = await db.execute(select(self.model).where(self.model.id == entity_id))
        return result.scalar_one_or_none()

    def _assign(self, entity, values: dict) -> None:
        for field, value in values.items():
            setattr(entity, field, value)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(
        self, db: AsyncSession, entity_id: uuid.UUID, fields: str | None = None
    ) -> dict | None:
        """
        Return ``id`` plus the requested *fields* of the entity, or None
        when it does not exist.
        """
        stmt = select(self.model).where(self.model.id == entity_id)
        relations = relations_to_load(self.model, fields)
        if relations:
            stmt = stmt.options(
                *(selectinload(getattr(self.model, key)) for key in relations)
            ).execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return map_to_fields(result.scalar_one_or_none(), fields)

    async def get(
        self,
        db: AsyncSession,
        filters: list[FilterCriterion] | None = None,
        search_term: str | None = None,
        page_number: int = 1,
        page_size: int = 10,
        sort_field: str | None = None,
        sort_order: str | None = "asc",
    ) -> list:
        """Return one page of the filtered, optionally sorted entity set."""
        stmt = build_query(
            self.model,
            filters=filters,
            search_term=search_term,
            page_number=page_number,
            page_size=page_size,
            sort_field=sort_field,
            sort_order=sort_order,
        )
        return await run_query(db, stmt)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        data: BaseModel,
        tenant_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
    ) -> uuid.UUID:
        """Persist a new entity and return its id (payload id or generated)."""
        entity = self.model(**data.model_dump(include=self.writable_fields))
        if data.id is not None:
            entity.id = data.id
        entity.tenant_id = tenant_id
        entity.created_by = user_id
        entity.created_on = _utcnow()

        db.add(entity)
        await db.flush()
        logger.info("Created %s %s", self.name, entity.id)
        return entity.id

    async def update(
        self,
        db: AsyncSession,
        entity_id: uuid.UUID,
        data: BaseModel,
        tenant_id: uuid.UUID | None = None,
        user_id: uuid.UUID | None = None,
    ) -> bool:
        """
        Replace every writable field of the entity with the payload's
        values; fields left out of the payload are cleared.
        """
        if data.id is not None and data.id != entity_id:
            raise ApplicationError(MISMATCHED_ID)
        entity = await self._fetch(db, entity_id)
        if entity is None:
            raise not_found()

        self._assign(entity, data.model_dump(include=self.writable_fields))
        entity.tenant_id = tenant_id
        entity.updated_by = user_id
        entity.updated_on = _utcnow()

        await db.flush()
        logger.info("Updated %s %s", self.name, entity_id)
        return True

    async def patch(
        self,
        db: AsyncSession,
        entity_id: uuid.UUID,
        document: list | None,
        user_id: uuid.UUID | None = None,
    ) -> bool:
        """Apply a JSON Patch document to the entity."""
        if document is None:
            raise ApplicationError(PATCH_MISSING)
        entity = await self._fetch(db, entity_id)
        if entity is None:
            raise not_found()

        self._assign(entity, apply_patch(entity, document, self.schema))
        entity.updated_by = user_id
        entity.updated_on = _utcnow()

        await db.flush()
        logger.info("Patched %s %s (%d operations)", self.name, entity_id, len(document))
        return True

    async def delete(self, db: AsyncSession, entity_id: uuid.UUID) -> bool:
        entity = await self._fetch(db, entity_id)
        if entity is None:
            raise not_found()

        await db.delete(entity)
        await db.flush()
        logger.info("Deleted %s %s", self.name, entity_id)
        return True
