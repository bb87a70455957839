"""Certificate PDF generation from rendered HTML.

Pure utility: no FastAPI imports. The rendering technology is hidden behind
``PdfGenerator``; the default implementation prints the markup with headless
Chromium through Playwright.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from playwright.async_api import Browser, Error as PlaywrightError, async_playwright

from app.exceptions import RenderError

logger = logging.getLogger(__name__)

# Fixed certificate page box. Wider than tall, so the page is landscape as-is.
PAGE_WIDTH = "720px"
PAGE_HEIGHT = "385px"
ZERO_MARGIN = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


class PdfGenerator(Protocol):
    async def to_pdf(self, markup: str) -> bytes: ...


class PlaywrightPdfGenerator:
    """Prints HTML to a 720x385 PDF. One browser per call, never reused."""

    def __init__(self, executable_path: str | None = None, timeout_ms: int = 30_000) -> None:
        self.executable_path = executable_path or None
        self.timeout_ms = timeout_ms

    @asynccontextmanager
    async def _browser(self) -> AsyncIterator[Browser]:
        """Launch a headless browser and close it on every exit path."""
        async with async_playwright() as p:
            try:
                browser = await p.chromium.launch(
                    headless=True,
                    executable_path=self.executable_path,
                    args=["--no-sandbox", "--disable-dev-shm-usage"],
                )
            except PlaywrightError as exc:
                raise RenderError(f"Could not start the PDF renderer: {exc}") from exc
            try:
                yield browser
            finally:
                await browser.close()

    async def to_pdf(self, markup: str) -> bytes:
        try:
            async with self._browser() as browser:
                page = await browser.new_page()
                await page.set_content(markup, wait_until="networkidle", timeout=self.timeout_ms)
                pdf_bytes = await page.pdf(
                    width=PAGE_WIDTH,
                    height=PAGE_HEIGHT,
                    margin=ZERO_MARGIN,
                    print_background=True,
                )
        except RenderError:
            raise
        except PlaywrightError as exc:
            logger.error("PDF conversion failed: %s", exc)
            raise RenderError(f"PDF conversion failed: {exc}") from exc
        except Exception as exc:
            logger.error("PDF renderer raised %s: %s", type(exc).__name__, exc)
            raise RenderError(f"PDF renderer failed: {exc}") from exc

        if not pdf_bytes:
            raise RenderError("PDF renderer returned no output")
        return pdf_bytes
