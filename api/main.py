"""Bike Shop API — FastAPI entry point.

Registers middleware, routers, exception handlers and lifecycle hooks.
Each vertical adds its own router under /api/{vertical}/.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import RequestIdMiddleware
from core.database import close_db
from core.observability.logging_setup import setup_logging
from verticals.bike_shop.errors import DataAccessError, NotFoundError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
).split(",")
VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    setup_logging()
    logger.info("Bike Shop API started")
    yield
    await close_db()
    logger.info("Bike Shop API shutting down")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Bike Shop",
    description="Product configurator: compatible options, live pricing and configuration validation",
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

# Request id for log correlation
app.add_middleware(RequestIdMiddleware)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc), "code": exc.code, "entity": exc.entity, "ids": exc.ids},
    )


@app.exception_handler(DataAccessError)
async def data_access_handler(request: Request, exc: DataAccessError):
    logger.error("Data access failure on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Catalog temporarily unavailable", "code": exc.code},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Routers, one per vertical
# ---------------------------------------------------------------------------

from verticals.bike_shop.router import router as bike_shop_router  # noqa: E402

app.include_router(bike_shop_router, prefix="/api/bike-shop", tags=["Bike Shop"])


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    return {
        "name": "Bike Shop",
        "version": VERSION,
        "docs": "/docs",
        "verticals": ["bike_shop"],
        "description": "Product configurator",
    }
