"""Birthday Wish API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map WishError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - Stored photos served read-only at /uploads/<filename> (404 when absent)
    - When a built client exists, paths it does not hold (e.g. /wish/<id>) get its index.html

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Static mounts registered AFTER API routes so /api/* takes precedence
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.error_handlers import register_error_handlers
from app.api.routes import greetings, health
from app.config import get_settings
from app.core.domain_types import UPLOADS_URL_PREFIX
from app.infrastructure import database
from app.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


class ClientStaticFiles(StaticFiles):
    """Built client; unknown paths (e.g. /wish/<id>) get index.html so the client router resolves them."""

    async def get_response(self, path: str, scope):
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response("index.html", scope)
        if response.status_code == 404:
            return await super().get_response("index.html", scope)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Birthday Wish API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Birthday Wish API shutting down")


app = FastAPI(
    title="Birthday Wish API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(greetings.router)

os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(
    UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.upload_dir),
    name="uploads",
)

# Built client (creation form, /wish/<id>, not-found page)
if os.path.isdir(settings.static_dir):
    app.mount(
        "/", ClientStaticFiles(directory=settings.static_dir, html=True), name="client",
    )
