"""Health and readiness endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from pymongo.errors import PyMongoError

from ...deps import StoreDependency
from ...schemas.system import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get(
    "/healthz",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def read_health(store: StoreDependency) -> HealthCheckResponse:
    """Report liveness together with document store reachability."""
    try:
        await store.ping()
    except PyMongoError:
        logger.warning("Document store ping failed", exc_info=True)
        return HealthCheckResponse(status="degraded", database="unavailable")
    return HealthCheckResponse(status="ok", database="ok")
