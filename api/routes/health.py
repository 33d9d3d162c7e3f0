"""
Health check and diagnostics endpoints.
"""

import time
from pathlib import Path

from fastapi import APIRouter, Depends

from api.deps import get_cleanup_service, get_session, start_time
from config.settings import settings
from core.pdf_pipeline import BrowserSession
from core.services.file_cleanup import PdfCleanupService

router = APIRouter(tags=["Health"])

SERVICE_NAME = "invoice-pdf-service"
VERSION = "1.0.0"


@router.get("/")
async def root():
    """Greeting"""
    return "Hello from the invoice PDF service!"


@router.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": time.time()
    }


def _temp_artifact_stats(temp_dir: Path, pattern: str) -> dict:
    count = 0
    total_bytes = 0
    if temp_dir.exists():
        for path in temp_dir.glob(pattern):
            try:
                total_bytes += path.stat().st_size
                count += 1
            except OSError:
                # Deleted between glob and stat
                continue
    return {"count": count, "bytes": total_bytes}


@router.get("/api/diagnostics/health")
async def diagnostics(
    session: BrowserSession = Depends(get_session),
    cleanup: PdfCleanupService = Depends(get_cleanup_service),
):
    """
    Service diagnostics.

    Returns:
        Browser session state, leftover temp PDFs, cleanup loop status
        and process uptime
    """
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": VERSION,
        "environment": settings.environment,
        "timestamp": time.time(),
        "uptime_seconds": time.time() - start_time,
        "browser": {
            "state": session.state.value,
            "launch_count": session.launch_count,
        },
        "temp_artifacts": _temp_artifact_stats(cleanup.temp_dir, cleanup.pattern),
        "cleanup": {
            "running": cleanup.running,
            "runs": cleanup.runs,
            "interval_minutes": cleanup.interval_minutes,
            "max_age_hours": cleanup.max_age_hours,
        },
    }
