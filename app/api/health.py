"""Health check endpoints.

- /health: detailed component verification
- /liveness and /readiness: container probes
"""

import time
from datetime import datetime, timezone
from typing import Literal

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app import __version__
from app.api.schemas import ComponentHealth, HealthResponse, LivenessResponse, ReadinessResponse

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])

# Track application start time for uptime calculation
_start_time: float = time.time()


def reset_start_time() -> None:
    """Reset the start time (for testing)."""
    global _start_time
    _start_time = time.time()


def _check_storage() -> ComponentHealth:
    """Check that an object storage backend is configured."""
    try:
        from app.services.storage import get_object_storage

        storage = get_object_storage()
        return ComponentHealth(status="healthy", details={"backend": storage.name})
    except RuntimeError:
        return ComponentHealth(
            status="unhealthy",
            details={"error": "Object storage not configured"},
        )
    except Exception as e:
        return ComponentHealth(
            status="unhealthy",
            details={"error": str(e)},
        )


def _check_resolvers() -> ComponentHealth:
    """Check that the resolver manager is configured and list enabled platforms."""
    try:
        from app.main import get_resolver_manager

        manager = get_resolver_manager()
        resolvers = manager.list_resolvers()
        return ComponentHealth(
            status="healthy",
            details={
                "enabled": sorted(p for p, enabled in resolvers.items() if enabled),
                "disabled": sorted(p for p, enabled in resolvers.items() if not enabled),
            },
        )
    except RuntimeError:
        return ComponentHealth(
            status="unhealthy",
            details={"error": "Resolver manager not configured"},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "All components healthy"},
        503: {"description": "One or more components unhealthy"},
    },
)
async def health_check() -> JSONResponse:
    """
    Detailed health check endpoint.

    Returns HTTP 200 if all components are healthy,
    HTTP 503 if any component is unhealthy.
    """
    components = {
        "storage": _check_storage(),
        "resolvers": _check_resolvers(),
    }

    all_healthy = all(c.status == "healthy" for c in components.values())
    overall_status: Literal["healthy", "unhealthy"] = "healthy" if all_healthy else "unhealthy"

    response = HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        components=components,
    )

    status_code = status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    logger.info(
        "health_check_completed",
        status=overall_status,
        components={k: v.status for k, v in components.items()},
    )

    return JSONResponse(content=response.model_dump(), status_code=status_code)


@router.get("/liveness", response_model=LivenessResponse)
async def liveness_check() -> LivenessResponse:
    """
    Liveness probe endpoint.

    Returns HTTP 200 if the process is alive.
    """
    return LivenessResponse(status="alive")


@router.get(
    "/readiness",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Service is ready to accept traffic"},
        503: {"description": "Service is not ready"},
    },
)
async def readiness_check() -> JSONResponse:
    """
    Readiness probe endpoint.

    Ready once object storage and the resolver manager are configured.
    """
    issues = []

    if _check_storage().status != "healthy":
        issues.append("Object storage not configured")
    if _check_resolvers().status != "healthy":
        issues.append("Resolver manager not configured")

    if issues:
        response = ReadinessResponse(
            status="not_ready",
            ready=False,
            message="; ".join(issues),
        )
        return JSONResponse(
            content=response.model_dump(),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return JSONResponse(
        content=ReadinessResponse(status="ready", ready=True).model_dump(),
        status_code=status.HTTP_200_OK,
    )
