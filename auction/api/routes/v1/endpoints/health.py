"""
Liveness and readiness probes.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response, status
from loguru import logger
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from auction.api.dependencies import get_db_session
from auction.core.config import settings
from auction.core.locks import item_locks

router = APIRouter()


class HealthStatus(BaseModel):
    status: str
    version: str
    environment: str

    model_config = {"json_schema_extra": {"example": {"status": "ok", "version": "0.1.0", "environment": "development"}}}


class ComponentStatus(BaseModel):
    name: str
    status: str
    details: Optional[Dict[str, Any]] = None


class DetailedHealthStatus(HealthStatus):
    components: List[ComponentStatus]


async def check_database(db: AsyncSession) -> ComponentStatus:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness: database check failed: {e}")
        return ComponentStatus(name="database", status="unhealthy", details={"error": str(e)})
    return ComponentStatus(name="database", status="healthy", details={"type": db.get_bind().dialect.name})


def check_engine() -> ComponentStatus:
    """Items currently inside their critical section in this process."""
    return ComponentStatus(name="auction_engine", status="healthy", details={"contended_items": len(item_locks)})


@router.get("", response_model=HealthStatus, summary="Liveness probe")
async def health_check() -> HealthStatus:
    return HealthStatus(status="ok", version=settings.VERSION, environment=settings.ENVIRONMENT)


@router.get(
    "/ready",
    response_model=DetailedHealthStatus,
    summary="Readiness probe",
    responses={503: {"description": "A dependency is unavailable"}},
)
async def readiness_check(response: Response, db: AsyncSession = Depends(get_db_session)) -> DetailedHealthStatus:
    components = [await check_database(db), check_engine()]
    healthy = all(component.status == "healthy" for component in components)
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return DetailedHealthStatus(
        status="ok" if healthy else "degraded",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        components=components,
    )
