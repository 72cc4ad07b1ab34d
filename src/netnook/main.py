# src/netnook/main.py
"""Main entry point for the NetNook local API."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from netnook.api.v1 import feed_router, network_router, posts_router, session_router
from netnook.core.settings import settings
from netnook.db.session import create_tables
from netnook.services.runtime import get_runtime

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="NetNook API",
    description="Offline-first shared feed with a local private cache",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(feed_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(network_router, prefix="/api/v1")
app.include_router(session_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_tables()
    runtime = get_runtime()
    await runtime.start()
    logger.info("%s %s started (online=%s)", settings.app_name, settings.app_version, runtime.is_online)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_runtime().shutdown()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Offline-first shared feed with a local private cache",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("netnook.main:app", host="127.0.0.1", port=8000, reload=settings.debug)
