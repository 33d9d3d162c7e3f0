#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for the invoice PDF service.

Thin orchestration shell: app creation, middleware, error handlers,
router includes, startup/shutdown events.

Usage:
    uvicorn api.main:app --host 0.0.0.0 --port 8000
"""

import time
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from config.logging_config import get_logger, setup_logging
from config.settings import settings as _settings

logger = get_logger(__name__)

from api.deps import close_session, get_cleanup_service, get_session
from api.errors import register_exception_handlers
from api.routes.health import router as health_router
from api.routes.pdf import router as pdf_router

# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Invoice PDF Service",
    description="Renders invoices and account statements to PDF through headless Chromium",
    version="1.0.0"
)

# CORS middleware, origins from settings (env var)
ALLOWED_ORIGINS = _settings.get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"HTTP {request.method} {request.url.path} responded {response.status_code} in {elapsed_ms:.1f} ms"
        )
        return response


app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(pdf_router)

# =============================================================================
# Startup / Shutdown Events
# =============================================================================

@app.on_event("startup")
async def startup_logging():
    """Apply configured log level and file."""
    setup_logging(_settings.log_level, _settings.log_file)
    logger.info(f"Starting in {_settings.environment} environment")


@app.on_event("startup")
async def startup_cleanup_scheduler():
    """Start the periodic temp PDF sweep."""
    get_cleanup_service().start()


@app.on_event("startup")
async def startup_browser():
    """Pre-launch the browser so the first request does not pay for it."""
    if not _settings.prelaunch_browser:
        return
    try:
        await get_session().get_browser()
    except Exception as e:
        logger.error(f"Startup: Browser pre-launch failed, will retry on first request: {e}")


@app.on_event("shutdown")
async def shutdown_cleanup_scheduler():
    """Stop the sweep loop."""
    await get_cleanup_service().stop()


@app.on_event("shutdown")
async def shutdown_browser():
    """Close the shared browser."""
    try:
        await close_session()
    except Exception as e:
        logger.warning(f"Shutdown: Browser close failed: {e}")
