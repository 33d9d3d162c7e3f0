"""
Temporary PDF artifacts: naming, writing, streaming and deletion.

PDFs are written straight to a uniquely named file in the temp directory
and streamed to the client from disk. The file is deleted when the stream
closes; anything left behind is removed by the cleanup sweep.
"""

import asyncio
import logging
import re
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from .browser_session import BrowserSession
from .exceptions import ArtifactWriteError
from .models import PdfOptions


logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = 64 * 1024

# Characters rejected by common filesystems, plus ASCII control characters
_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

DocumentSource = Union[str, Callable[[], Awaitable[str]]]


def default_artifact_name() -> str:
    return f"PDF_{datetime.now():%Y%m%d%H%M%S}"


def sanitize_filename(name: Optional[str]) -> str:
    """
    Replace characters that are invalid in file names with '_'.

    Blank input (or input that is nothing but invalid characters) yields a
    timestamped default name.
    """
    if not name or not name.strip():
        return default_artifact_name()
    sanitized = _INVALID_FILENAME_CHARS.sub("_", name.strip()).strip("_")
    return sanitized or default_artifact_name()


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete temp PDF {path.name}: {e}")


class ArtifactStore:
    """
    Renders documents into temp files and hands them out for streaming.

    Usage:
        store = ArtifactStore(session, Path("/tmp/rendered_pdfs"))
        path = await store.render_to_file(html, PdfOptions(), "INV-001")
        response = StreamingResponse(store.stream_artifact(path))
    """

    def __init__(
        self,
        session: BrowserSession,
        temp_dir: Path,
        downloads_dir: Optional[Path] = None,
        keep_copies: bool = False,
    ):
        self.session = session
        self.temp_dir = Path(temp_dir)
        self.downloads_dir = Path(downloads_dir) if downloads_dir else None
        self.keep_copies = keep_copies and self.downloads_dir is not None

    def allocate_path(self, name_hint: Optional[str] = None) -> Path:
        """Unique path under the temp dir; the random suffix prevents collisions."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return self.temp_dir / f"{sanitize_filename(name_hint)}_{uuid.uuid4().hex}.pdf"

    async def render_to_file(
        self,
        document: DocumentSource,
        options: PdfOptions,
        name_hint: Optional[str] = None,
    ) -> Path:
        """
        Render a document straight to a new temp file.

        Args:
            document: HTML string, or an async callable producing it. A
                callable runs after the page is acquired, so its failures
                also go through page cleanup.
            options: PDF layout options
            name_hint: Preferred file name (sanitised)

        Returns:
            Path to the written PDF
        """
        path = self.allocate_path(name_hint)

        try:
            async with self.session.page() as page:
                html = document if isinstance(document, str) else await document()
                try:
                    written = await page.render(html, options, path)
                except OSError as e:
                    raise ArtifactWriteError(path, e.strerror or str(e)) from e

            if written <= 0 or not path.is_file():
                raise ArtifactWriteError(path, "renderer produced an empty file")
        except BaseException:
            _unlink_quietly(path)
            raise

        logger.info(f"PDF written: {path.name} ({written} bytes)")

        if self.keep_copies:
            await asyncio.to_thread(self._keep_copy, path, name_hint)

        return path

    def _keep_copy(self, path: Path, name_hint: Optional[str]) -> Optional[Path]:
        """Copy the artifact into the downloads dir without overwriting."""
        base = sanitize_filename(name_hint) if name_hint else path.stem.rsplit("_", 1)[0]
        try:
            self.downloads_dir.mkdir(parents=True, exist_ok=True)
            target = self.downloads_dir / f"{base}.pdf"
            counter = 1
            while target.exists():
                target = self.downloads_dir / f"{base}_{counter}.pdf"
                counter += 1
            shutil.copyfile(path, target)
        except OSError as e:
            logger.warning(f"Could not save download copy of {path.name}: {e}")
            return None
        logger.info(f"PDF copy saved to: {target}")
        return target

    def discard(self, path: Path) -> None:
        """Delete an artifact that will not be streamed."""
        _unlink_quietly(Path(path))

    async def stream_artifact(self, path: Path, chunk_size: int = STREAM_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """
        Yield the file's bytes, deleting it once the stream is finished,
        fails, or is closed early by the consumer.
        """
        path = Path(path)
        try:
            fh = await asyncio.to_thread(open, path, "rb")
            try:
                while True:
                    chunk = await asyncio.to_thread(fh.read, chunk_size)
                    if not chunk:
                        break
                    yield chunk
            finally:
                await asyncio.to_thread(fh.close)
        finally:
            _unlink_quietly(path)
            logger.debug(f"Temp PDF removed after streaming: {path.name}")
