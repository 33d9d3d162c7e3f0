"""
Shared state and dependency getters for API route modules.

One browser session, pipeline, cleanup service and notifier per process.
Routes receive them through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""

import time
from typing import Optional

from config.logging_config import get_logger
from config.settings import settings
from core.pdf_pipeline import BrowserSession, PdfPipeline, build_pipeline, chromium_launcher
from core.services.file_cleanup import PdfCleanupService
from core.services.notifications import FailureNotifier, build_default_notifier

logger = get_logger(__name__)

# --- Singletons ---

start_time = time.time()

_session: Optional[BrowserSession] = None
_pipeline: Optional[PdfPipeline] = None
_cleanup_service: Optional[PdfCleanupService] = None
_notifier: Optional[FailureNotifier] = None


def get_session() -> BrowserSession:
    global _session
    if _session is None:
        _session = BrowserSession(
            launcher=chromium_launcher(
                executable_path=settings.browser_executable_path,
                args=settings.browser_args,
                timeout_ms=settings.browser_launch_timeout_ms,
            )
        )
    return _session


def get_pipeline() -> PdfPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline(
            templates_dir=settings.templates_dir,
            fonts_dir=settings.fonts_dir,
            temp_dir=settings.temp_dir,
            session=get_session(),
            downloads_dir=settings.downloads_dir,
            keep_copies=settings.should_keep_download_copies(),
            render_timeout=settings.render_timeout_seconds,
        )
        logger.info(f"PDF pipeline ready (templates: {settings.templates_dir}, temp: {settings.temp_dir})")
    return _pipeline


def get_cleanup_service() -> PdfCleanupService:
    global _cleanup_service
    if _cleanup_service is None:
        _cleanup_service = PdfCleanupService()
    return _cleanup_service


def get_notifier() -> FailureNotifier:
    global _notifier
    if _notifier is None:
        _notifier = build_default_notifier(settings.slack_webhook_url)
    return _notifier


async def close_session() -> None:
    """Close the browser if it was ever created."""
    if _session is not None:
        await _session.close()
