from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from sqlalchemy import Engine
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from qrdine.api.error_handling import register_exception_handlers
from qrdine.api.middleware.request_id import RequestIDMiddleware
from qrdine.api.routes.admin_orders import router as admin_orders_router
from qrdine.api.routes.admin_reviews import router as admin_reviews_router
from qrdine.api.routes.admin_sessions import router as admin_sessions_router
from qrdine.api.routes.admin_staff_calls import router as admin_staff_calls_router
from qrdine.api.routes.admin_tables import router as admin_tables_router
from qrdine.api.routes.health import router as health_router
from qrdine.api.routes.menu import router as menu_router
from qrdine.api.routes.metrics import router as metrics_router
from qrdine.api.routes.orders import router as orders_router
from qrdine.api.routes.reviews import router as reviews_router
from qrdine.api.routes.tables import router as tables_router
from qrdine.application.ports.cache import CacheStore
from qrdine.infrastructure.cache.cache_store import RedisCacheStore
from qrdine.infrastructure.cache.redis_client import redis_configured
from qrdine.infrastructure.db.session import get_engine
from qrdine.infrastructure.observability.logging_config import configure_logging
from qrdine.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("qrdine.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    if env in {"dev", "test"}:
        return ["*"]

    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_label(request: Request) -> str:
    # path templates keep metric cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            route = _route_label(request)
            REQUEST_COUNT.labels(method=method, route=route, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        route = _route_label(request)
        REQUEST_COUNT.labels(
            method=method,
            route=route,
            status_code=str(response.status_code),
        ).inc()
        REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_engine = app.state.engine is None
    if owns_engine:
        app.state.engine = get_engine()
    if app.state.cache is None and redis_configured():
        app.state.cache = RedisCacheStore()
    logger.info("app_started")
    try:
        yield
    finally:
        if owns_engine:
            app.state.engine.dispose()
            app.state.engine = None


def create_app(engine: Engine | None = None, cache: CacheStore | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="QRDine Backend", version="0.1.0", lifespan=lifespan)
    app.state.engine = engine
    app.state.cache = cache

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(menu_router)
    app.include_router(tables_router)
    app.include_router(orders_router)
    app.include_router(reviews_router)
    app.include_router(admin_tables_router)
    app.include_router(admin_orders_router)
    app.include_router(admin_staff_calls_router)
    app.include_router(admin_sessions_router)
    app.include_router(admin_reviews_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
