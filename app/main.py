import logging

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from app.api.performance import router as performance_router
from app.config import settings
from app.db import Base, get_engine
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.telemetry import setup_otel

logger = logging.getLogger(__name__)

app = FastAPI(title="hrms_performance API")

configure_logging()
setup_otel(app)
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies)
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


_include_api_router(performance_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.head("/health")
def head_health():
    return Response(status_code=200)


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.on_event("startup")
def _create_tables():
    if not settings.db_auto_create:
        return
    from app import models  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("Database tables ensured (DB_AUTO_CREATE)")
