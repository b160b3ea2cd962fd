from __future__ import annotations

from fastapi import APIRouter, Request, Response, status

from qrdine.infrastructure.cache.redis_client import ping_redis, redis_configured
from qrdine.infrastructure.db.session import ping_database

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(request: Request, response: Response) -> dict[str, object]:
    engine = getattr(request.app.state, "engine", None)
    database_ready = engine is not None and ping_database(engine)
    # the menu cache is optional; without REDIS_URL reads go straight to the database
    redis_ready = ping_redis(timeout_seconds=1.0) if redis_configured() else True

    if database_ready and redis_ready:
        return {"status": "ok"}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "unavailable",
        "checks": {"database": database_ready, "redis": redis_ready},
    }
