"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging setup, embedded schema creation, cleanup
  2. CORS middleware — allows the mobile/web client to call the API
  3. Exception handlers — maps integrity errors to HTTP responses
  4. Router registration — mounts the records API

Running locally:
    uvicorn budgeteer.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from budgeteer.config import settings
from budgeteer.database import engine, Base
from budgeteer.exceptions import register_exception_handlers
from budgeteer.logging_config import configure_logging
from budgeteer.routers import records
from budgeteer.storage_mode import StorageMode
from budgeteer.validation.factory import mode_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures logging and, in local mode, creates the embedded tables
      if they don't exist.

    Shutdown:
      Disposes of the embedded database engine.
    """
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting %s in %s mode", settings.APP_NAME, mode_manager.mode.value)

    if mode_manager.mode == StorageMode.LOCAL:
        import budgeteer.models  # noqa: F401  (register tables on Base.metadata)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Personal finance records with referential integrity enforced for every storage backend",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(records.router, prefix="/records", tags=["Records"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe; also reports the active storage mode."""
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "storage_mode": mode_manager.mode.value,
    }
