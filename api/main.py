"""Boardcamp API — FastAPI entry point.

Registers middleware, exception handlers, routers, and lifecycle hooks.
"""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import RequestContextMiddleware
from core.database import close_db, init_db
from core.observability.logging_setup import setup_logging

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
AUTO_CREATE_TABLES = os.getenv("DB_AUTO_CREATE", "false").lower() == "true"
VERSION = "0.1.0"

setup_logging()
logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    if AUTO_CREATE_TABLES:
        await init_db()
    logger.info("boardcamp_api_started", version=VERSION)
    yield
    await close_db()
    logger.info("boardcamp_api_stopped")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Boardcamp",
    description="Board game rental shop: catalog, customers, rentals and returns",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID for logs
app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from verticals.boardcamp.router import router as boardcamp_router  # noqa: E402

app.include_router(boardcamp_router, tags=["Boardcamp"])


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    return {
        "name": "Boardcamp",
        "version": VERSION,
        "docs": "/docs",
    }
