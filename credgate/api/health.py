"""
Health Check Module
===================
Liveness and readiness endpoints with per-component status.

Components are named async checks; the SQL database is the only one the
app registers itself.
"""

import time
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import structlog

from credgate.database import Database

logger = structlog.get_logger(__name__)

ComponentCheck = Callable[[], Awaitable[None]]


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


async def run_check(name: str, check: ComponentCheck) -> ComponentHealth:
    """Run one component check, timing it and catching its failure."""
    start = time.perf_counter()
    try:
        await check()
    except Exception as e:
        logger.error("Health check failed", component=name, error=str(e))
        # Only the exception type leaves the process
        return ComponentHealth(status="error", error=type(e).__name__)
    latency_ms = (time.perf_counter() - start) * 1000
    return ComponentHealth(status="connected", latency_ms=round(latency_ms, 2))


def create_health_router(
    service_name: str,
    version: str,
    database: Optional[Database] = None,
    checks: Optional[Dict[str, ComponentCheck]] = None,
) -> APIRouter:
    """
    Create /health, /health/live and /health/ready endpoints.

    Args:
        service_name: Reported in the health body
        version: Service version
        database: Registered as the ``database`` component when given
        checks: Extra named component checks
    """
    router = APIRouter(tags=["Health"])
    components = dict(checks or {})
    if database is not None:
        components["database"] = database.ping

    async def run_all() -> Dict[str, ComponentHealth]:
        return {name: await run_check(name, check) for name, check in components.items()}

    @router.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        results = await run_all()
        healthy = all(result.status != "error" for result in results.values())
        return HealthResponse(
            status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
            service=service_name,
            version=version,
            components=results,
            timestamp=time.time(),
        )

    @router.get("/health/live")
    async def liveness_probe():
        return {"status": "alive"}

    @router.get("/health/ready")
    async def readiness_probe():
        failing = [name for name, result in (await run_all()).items() if result.status == "error"]
        if failing:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready", "failing": failing},
            )
        return {"status": "ready"}

    return router
