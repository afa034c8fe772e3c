"""
Health Check Endpoints

Liveness and readiness for orchestration systems. The service is ready once
the record extract is loaded.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from superstore.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Application status and loaded dataset size."""
    settings = get_settings()
    records = getattr(request.app.state, "records", None)

    if records is None:
        checks = {"dataset": {"status": "not_loaded"}}
        status = "degraded"
    else:
        checks = {"dataset": {"status": "loaded", "records": len(records)}}
        status = "healthy"

    return HealthResponse(
        status=status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the application is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(request: Request, response: Response) -> Dict[str, str]:
    """Returns 200 once records are loaded, 503 before."""
    if getattr(request.app.state, "records", None) is None:
        response.status_code = 503
        return {"status": "not_ready", "reason": "records_not_loaded"}
    return {"status": "ready"}
