# src/whalebyte_moderation/main.py
"""Main entry point for the WhaleByte moderation application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from whalebyte_moderation.api.v1 import content_router, moderation_router
from whalebyte_moderation.core.settings import settings
from whalebyte_moderation.db.session import create_tables
from whalebyte_moderation.services.classifier import HttpClassifier
from whalebyte_moderation.services.expiry import ExpirySweepWorker
from whalebyte_moderation.services.moderation import (
    get_moderation_service,
    moderation_service_started,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Community moderation engine for WhaleByte",
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
app.include_router(content_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.create_tables_on_startup:
        create_tables()
    if settings.expiry_sweep_enabled:
        worker = ExpirySweepWorker(
            get_moderation_service(),
            interval_seconds=settings.expiry_sweep_interval_seconds,
        )
        await worker.start()
        app.state.expiry_worker = worker
        logger.info("Expiry sweep running every %.0fs", worker.interval)
    else:
        app.state.expiry_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: ExpirySweepWorker | None = getattr(app.state, "expiry_worker", None)
    if worker:
        await worker.stop()
    service = moderation_service_started()
    if service is not None:
        await service.drain_content_checks()
        if isinstance(service.classifier, HttpClassifier):
            await service.classifier.close()


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
        "description": "Community moderation engine for WhaleByte",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("whalebyte_moderation.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
