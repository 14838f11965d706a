"""Build Share API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BuildShareError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Startup order: logging → database → TTL policy → build store
    - A TTL policy failure aborts startup; the process never serves without it

Design Decisions:
    - Lifespan over @app.on_event: cleaner cleanup of the engine
    - The store lives on app.state and reaches routes through a dependency
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from buildshare import __version__
from buildshare.api.error_handlers import register_error_handlers
from buildshare.api.routes import builds, health
from buildshare.config import get_settings
from buildshare.infrastructure.database import init_db
from buildshare.infrastructure.observability import setup_logging
from buildshare.infrastructure.ttl_policy import ensure_ttl_policy
from buildshare.services.build_store import BuildStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    try:
        await ensure_ttl_policy(db.engine)
    except Exception:
        logger.critical("TTL policy unavailable, refusing to start")
        await db.dispose()
        raise
    app.state.build_store = BuildStore.from_settings(settings, db)
    logger.info("Build Share API started")
    yield
    logger.info("Build Share API shutting down")
    await db.dispose()


app = FastAPI(
    title="Build Share API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(builds.router)

register_error_handlers(app)
