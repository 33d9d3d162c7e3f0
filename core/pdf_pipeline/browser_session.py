"""
Headless browser session and per-request render pages.

One Chromium process is shared by every request in the process. It is
launched lazily on first use, watched for disconnects, and relaunched on
the next request after it dies. Launch is serialised so concurrent first
requests wait on the same launch.

Usage:
    session = BrowserSession(launcher=chromium_launcher(args=["--no-sandbox"]))
    async with session.page() as page:
        await page.render(html, PdfOptions(), Path("out.pdf"))
    await session.close()
"""

import asyncio
import base64
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, BinaryIO, Callable, Optional, Sequence, Union

from .exceptions import RenderEngineUnavailableError
from .models import PdfOptions


logger = logging.getLogger(__name__)

# Bytes requested per IO.read call when streaming the PDF out of Chromium
PDF_READ_CHUNK = 256 * 1024


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LAUNCHING = "launching"
    READY = "ready"
    DISCONNECTED = "disconnected"


@dataclass
class EngineHandle:
    """A launched browser plus the Playwright driver that owns it."""
    browser: Any
    driver: Any = None

    async def close(self) -> None:
        try:
            if self.browser.is_connected():
                await self.browser.close()
        finally:
            if self.driver is not None:
                await self.driver.stop()


Launcher = Callable[[], Awaitable[EngineHandle]]


async def launch_chromium(
    executable_path: Optional[str] = None,
    args: Sequence[str] = (),
    timeout_ms: int = 30000,
) -> EngineHandle:
    """Start Playwright and launch headless Chromium."""
    from playwright.async_api import async_playwright

    driver = await async_playwright().start()
    try:
        browser = await driver.chromium.launch(
            headless=True,
            executable_path=executable_path or None,
            args=list(args),
            timeout=timeout_ms,
        )
    except BaseException:
        await driver.stop()
        raise
    return EngineHandle(browser=browser, driver=driver)


def chromium_launcher(
    executable_path: Optional[str] = None,
    args: Sequence[str] = (),
    timeout_ms: int = 30000,
) -> Launcher:
    """Bind launch options into a zero-argument launcher."""
    async def _launch() -> EngineHandle:
        return await launch_chromium(executable_path, args, timeout_ms)
    return _launch


class RenderPage:
    """
    A single browser tab used for one render.

    Obtained from BrowserSession.page(); closed by the session when the
    surrounding ``async with`` block exits.
    """

    def __init__(self, page: Any):
        self._page = page
        self.closed = False

    async def render(self, document: str, options: PdfOptions, sink: Union[Path, str, BinaryIO]) -> int:
        """
        Load an HTML document and stream the PDF into ``sink``.

        Args:
            document: Complete HTML document
            options: Paper and margin options
            sink: File path to create, or a binary stream to write to

        Returns:
            Number of PDF bytes written
        """
        await self._page.set_content(document, wait_until="load")
        await self._page.emulate_media(media="print")

        cdp = await self._page.context.new_cdp_session(self._page)
        try:
            result = await cdp.send("Page.printToPDF", options.to_print_params())
            stream = result["stream"]
            try:
                if isinstance(sink, (str, Path)):
                    with open(sink, "wb") as fh:
                        return await self._copy_stream(cdp, stream, fh)
                return await self._copy_stream(cdp, stream, sink)
            finally:
                await cdp.send("IO.close", {"handle": stream})
        finally:
            await cdp.detach()

    @staticmethod
    async def _copy_stream(cdp: Any, stream: str, fh: BinaryIO) -> int:
        written = 0
        while True:
            chunk = await cdp.send("IO.read", {"handle": stream, "size": PDF_READ_CHUNK})
            data = chunk.get("data", "")
            if data:
                payload = base64.b64decode(data) if chunk.get("base64Encoded") else data.encode("latin-1")
                fh.write(payload)
                written += len(payload)
            if chunk.get("eof"):
                return written

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._page.close()


class BrowserSession:
    """
    Owner of the shared browser connection.

    State machine:
        UNINITIALIZED -> LAUNCHING -> READY -> DISCONNECTED -> LAUNCHING ...

    A failed launch resets to UNINITIALIZED so a later request can retry.
    """

    def __init__(self, launcher: Optional[Launcher] = None):
        self._launcher = launcher or chromium_launcher()
        self._lock = asyncio.Lock()
        self._engine: Optional[EngineHandle] = None
        self._state = SessionState.UNINITIALIZED
        self.launch_count = 0

    @property
    def state(self) -> SessionState:
        if self._state is SessionState.READY and not self._engine.browser.is_connected():
            self._state = SessionState.DISCONNECTED
        return self._state

    def _on_disconnected(self, *_: Any) -> None:
        if self._state is SessionState.READY:
            logger.warning("Browser disconnected; it will be relaunched on next request")
            self._state = SessionState.DISCONNECTED

    async def get_browser(self) -> Any:
        """Return a connected browser, launching it if needed."""
        if self.state is SessionState.READY:
            return self._engine.browser

        async with self._lock:
            if self.state is SessionState.READY:
                return self._engine.browser

            if self._engine is not None:
                await self._dispose_engine()

            self._state = SessionState.LAUNCHING
            logger.info("Launching headless browser")
            self.launch_count += 1
            try:
                engine = await self._launcher()
            except asyncio.CancelledError:
                self._state = SessionState.UNINITIALIZED
                raise
            except Exception as e:
                self._state = SessionState.UNINITIALIZED
                logger.error(f"Browser launch failed: {e}")
                raise RenderEngineUnavailableError(f"Browser launch failed: {e}") from e

            self._engine = engine
            engine.browser.on("disconnected", self._on_disconnected)
            self._state = SessionState.READY
            logger.info("Headless browser ready")
            return engine.browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[RenderPage]:
        """Yield a fresh page; always closed on exit."""
        browser = await self.get_browser()
        try:
            raw_page = await browser.new_page()
        except Exception as e:
            # Only a dead browser is relaunched; other pages may still be rendering
            if not browser.is_connected():
                self._on_disconnected()
            raise RenderEngineUnavailableError(f"Could not open a browser page: {e}") from e

        page = RenderPage(raw_page)
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Failed to close browser page: {e}")

    async def _dispose_engine(self) -> None:
        engine, self._engine = self._engine, None
        try:
            await engine.close()
        except Exception as e:
            logger.warning(f"Error disposing browser: {e}")

    async def close(self) -> None:
        """Shut the browser down. Safe to call more than once."""
        async with self._lock:
            if self._engine is not None:
                await self._dispose_engine()
                logger.info("Headless browser closed")
            self._state = SessionState.UNINITIALIZED
