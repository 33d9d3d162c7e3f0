"""
PDF Cleanup Service: keeps the temp directory from filling the disk.

Rendered PDFs are normally deleted as soon as their response stream closes.
This sweep removes whatever is left behind (aborted downloads, crashed
workers, abandoned renders): files matching the pattern whose last access
is older than the configured age.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Summary of a cleanup run."""
    files_scanned: int = 0
    files_removed: int = 0
    bytes_freed: int = 0
    errors: List[str] = field(default_factory=list)
    dry_run: bool = False

    def __str__(self) -> str:
        mb = self.bytes_freed / (1024 * 1024)
        mode = " (DRY RUN)" if self.dry_run else ""
        return (
            f"Cleanup{mode}: scanned={self.files_scanned}, "
            f"removed={self.files_removed}, "
            f"errors={len(self.errors)}, "
            f"freed={mb:.1f}MB"
        )


class PdfCleanupService:
    """Periodic sweep of stale PDFs in the temp directory."""

    def __init__(
        self,
        temp_dir: Path | None = None,
        max_age_hours: float | None = None,
        interval_minutes: float | None = None,
        pattern: str = "*.pdf",
    ):
        from config.settings import settings

        self.temp_dir = Path(temp_dir or settings.temp_dir)
        self.max_age_hours = max_age_hours if max_age_hours is not None else settings.cleanup_max_age_hours
        self.interval_minutes = (
            interval_minutes if interval_minutes is not None else settings.cleanup_interval_minutes
        )
        self.pattern = pattern

        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_cleanup(self, dry_run: bool = False) -> CleanupResult:
        """Execute one sweep of the temp directory."""
        result = CleanupResult(dry_run=dry_run)
        self.runs += 1

        if not self.temp_dir.exists():
            return result

        cutoff = time.time() - (self.max_age_hours * 3600)
        for path in self.temp_dir.glob(self.pattern):
            if self._stop_event.is_set():
                logger.info("Cleanup interrupted by shutdown")
                break
            if not path.is_file():
                continue
            result.files_scanned += 1
            try:
                stat = path.stat()
                if stat.st_atime < cutoff:
                    if not dry_run:
                        path.unlink()
                    result.bytes_freed += stat.st_size
                    result.files_removed += 1
                    logger.debug(f"Removed stale PDF: {path.name}")
            except OSError as e:
                result.errors.append(f"{path}: {e}")
                logger.warning(f"Failed to delete {path.name}: {e}")

        logger.info(str(result))
        return result

    async def run_forever(self) -> None:
        """Sweep every ``interval_minutes`` until stop() is called."""
        interval = self.interval_minutes * 60
        logger.info(
            f"PDF cleanup started: every {self.interval_minutes:g} min, "
            f"max age {self.max_age_hours:g} h, dir {self.temp_dir}"
        )
        while not self._stop_event.is_set():
            try:
                await asyncio.to_thread(self.run_cleanup)
            except Exception as e:
                logger.error(f"Cleanup pass failed: {e}", exc_info=True)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
        logger.info("PDF cleanup stopped")

    def start(self) -> asyncio.Task:
        """Schedule the sweep loop on the running event loop."""
        if not self.running:
            self._stop_event.clear()
            self._task = asyncio.create_task(self.run_forever())
        return self._task

    async def stop(self) -> None:
        """Signal the loop and wait for the current pass to finish."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
