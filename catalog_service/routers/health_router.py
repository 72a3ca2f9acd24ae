"""
Health check router.

Liveness endpoint for load balancers and orchestrators.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel

from .. import __version__

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = "catalog-service"
    version: str = __version__


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Does not touch the document store; every read is a live round-trip
    there, so probing it here would only add load.
    """
    return HealthResponse(
        status="healthy", timestamp=datetime.now(timezone.utc).isoformat()
    )
