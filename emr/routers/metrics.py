from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from emr.database import get_db
from emr.schemas import MetricsResponse
from emr.services import ENTITY_SERVICES

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    counts: dict[str, int] = {}
    for name, service in ENTITY_SERVICES.items():
        counts[name] = (
            await db.execute(select(func.count()).select_from(service.model))
        ).scalar_one()

    return MetricsResponse(entities=counts, total_rows=sum(counts.values()))
