"""RGAA Audit API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rgaa_audit.core.config import settings
from rgaa_audit.core.criteria import get_catalog
from rgaa_audit.core.exceptions import register_exception_handlers
from rgaa_audit.middleware.request_log import RequestLogMiddleware
from rgaa_audit.schemas.common import HealthResponse

# v1 routers
from rgaa_audit.routers.v1.audits import router as audits_v1_router
from rgaa_audit.routers.v1.reports import router as reports_v1_router
from rgaa_audit.routers.uploads import router as uploads_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail fast on a broken criteria catalog instead of on the first request
    catalog = get_catalog()
    logger.info("Loaded %s: %d topics, %d criteria", catalog.referential, len(catalog.topics), len(catalog))

    if settings.is_development:
        # Migrations are the source of truth elsewhere; dev gets a zero-setup schema
        from rgaa_audit.db.base import Base, engine
        import rgaa_audit.domain  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Request logging ---
    app.add_middleware(RequestLogMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(audits_v1_router, prefix="/api/v1")
    app.include_router(reports_v1_router, prefix="/api/v1")

    # --- Uploaded example images (only while their audit is live) ---
    app.include_router(uploads_router, prefix=settings.storage_url)

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
