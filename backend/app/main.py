"""Packstation API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PackstationError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and Keycloak client initialized on startup, closed on shutdown (lifespan)

Design Decisions:
    - Lifespan over @app.on_event: cleanup runs in the same context manager
    - REST under /packstationen, GraphQL under /graphql, probes under /api/v1/health
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.middleware import ResponseTimeMiddleware
from app.api.routes import health, packstation_read, packstation_write
from app.config import get_settings
from app.graphql.schema import graphql_router
from app.infrastructure.database import close_db, init_db
from app.infrastructure.keycloak_client import close_keycloak, init_keycloak
from app.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_keycloak(settings)
    logger.info("Packstation API started")
    yield
    await close_keycloak()
    await close_db()
    logger.info("Packstation API shutting down")


app = FastAPI(
    title="Packstation API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag", "Location", "X-Response-Time"],
)
app.add_middleware(ResponseTimeMiddleware)

app.include_router(health.router)
app.include_router(packstation_read.router)
app.include_router(packstation_write.router)
app.include_router(graphql_router, prefix="/graphql")

register_error_handlers(app)
