"""Health check and system endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from festival_scheduling import __version__
from festival_scheduling.core.database import get_db_session
from festival_scheduling.core.settings import get_settings
from festival_scheduling.schemas.base import HealthCheckResponse
from festival_scheduling.services.events import get_event_publisher

router = APIRouter()

SERVICE_NAME = "festival-scheduling-service"


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """
    Service health check endpoint.

    Checks the health of the service and its dependencies:
    - Database connectivity
    - Schedule notification publisher
    """
    settings = get_settings()
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "version": __version__,
        "environment": settings.environment,
        "dependencies": {},
    }

    overall_status = "healthy"

    # Check database connectivity
    try:
        result = await session.execute(text("SELECT 1 AS health_check"))
        row = result.fetchone()
        if row is None or row[0] != 1:
            raise RuntimeError("Unexpected database response")
        health_data["dependencies"]["database"] = {
            "status": "healthy",
            "details": "Connection successful",
        }
    except Exception as e:
        health_data["dependencies"]["database"] = {
            "status": "unhealthy",
            "error": str(e),
            "details": "Database connection failed",
        }
        overall_status = "unhealthy"

    # Check schedule notification publisher
    event_publisher = get_event_publisher()
    if event_publisher.event_bus_type == "sqs":
        if event_publisher.sqs_client and event_publisher.queue_url:
            health_data["dependencies"]["notifications"] = {
                "status": "healthy",
                "type": "sqs",
                "details": "SQS client initialized",
            }
        else:
            health_data["dependencies"]["notifications"] = {
                "status": "degraded",
                "type": "sqs",
                "details": "SQS not properly configured",
            }
            if overall_status == "healthy":
                overall_status = "degraded"
    else:
        health_data["dependencies"]["notifications"] = {
            "status": "healthy",
            "type": "mock",
            "details": "Mock notification publisher active",
        }

    health_data["status"] = overall_status

    if overall_status == "unhealthy":
        raise HTTPException(status_code=503, detail=health_data)

    return HealthCheckResponse(**health_data)


@router.get("/version")
async def version_info():
    """Get service version information."""
    return {
        "service": SERVICE_NAME,
        "version": __version__,
        "environment": get_settings().environment,
        "api_version": "v1",
    }
