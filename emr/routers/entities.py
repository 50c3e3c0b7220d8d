import uuid

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from emr.database import get_db
from emr.dependencies import QueryParams, RequestContext
from emr.schemas import IdResponse, StatusResponse
from emr.services import ENTITY_SERVICES, EntityService


def build_router(service: EntityService) -> APIRouter:
    """Expose the six CRUD operations of *service* under ``/api/<name>``."""
    schema = service.schema
    router = APIRouter(prefix=f"/api/{service.name}", tags=[service.name])

    @router.post("", response_model=IdResponse)
    async def create_entity(
        data: schema,
        ctx: RequestContext = Depends(),
        db: AsyncSession = Depends(get_db),
    ):
        entity_id = await service.create(db, data, tenant_id=ctx.tenant_id, user_id=ctx.user_id)
        return {"id": entity_id}

    @router.get("", response_model=list[schema])
    async def list_entities(
        params: QueryParams = Depends(),
        db: AsyncSession = Depends(get_db),
    ):
        return await service.get(
            db,
            filters=params.filters,
            search_term=params.search_term,
            page_number=params.page_number,
            page_size=params.page_size,
            sort_field=params.sort_field,
            sort_order=params.sort_order,
        )

    @router.get("/{entity_id}")
    async def get_entity(
        entity_id: uuid.UUID,
        fields: str | None = None,
        db: AsyncSession = Depends(get_db),
    ):
        return await service.get_by_id(db, entity_id, fields)

    @router.put("/{entity_id}", response_model=StatusResponse)
    async def update_entity(
        entity_id: uuid.UUID,
        data: schema,
        ctx: RequestContext = Depends(),
        db: AsyncSession = Depends(get_db),
    ):
        status = await service.update(
            db, entity_id, data, tenant_id=ctx.tenant_id, user_id=ctx.user_id
        )
        return {"status": status}

    @router.patch("/{entity_id}", response_model=StatusResponse)
    async def patch_entity(
        entity_id: uuid.UUID,
        document: list[dict] | None = Body(None),
        ctx: RequestContext = Depends(),
        db: AsyncSession = Depends(get_db),
    ):
        status = await service.patch(db, entity_id, document, user_id=ctx.user_id)
        return {"status": status}

    @router.delete("/{entity_id}", response_model=StatusResponse)
    async def delete_entity(entity_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
        status = await service.delete(db, entity_id)
        return {"status": status}

    return router


routers: list[APIRouter] = [build_router(service) for service in ENTITY_SERVICES.values()]
