"""
Page Renderer
=============
The narrow capability interface between the pipeline and the browser.

Architecture:
    - ``Renderer``           — owns the browser process; hands out sessions
    - ``PageSession``        — one isolated browser context + one page
    - ``PlaywrightRenderer`` — the production backend (headless Chromium)

Nothing outside this module touches Playwright objects, which is what lets
the test suite drive the whole pipeline with an in-memory double.

Usage::

    renderer = PlaywrightRenderer()
    await renderer.start()
    try:
        async with renderer.session() as session:
            await session.navigate(url, timeout_ms=60_000)
            html = await session.evaluate(scripts.SIDEBAR_HTML, selector)
    finally:
        await renderer.close()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    async_playwright,
)
from playwright.async_api import TimeoutError as PlaywrightTimeout

from . import scripts
from .errors import RendererLaunchError

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = [
    '--window-size=2560,1440',
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-web-security',
    '--disable-features=IsolateOrigins,site-per-process',
    '--disable-dev-shm-usage',
]

_VIEWPORT = {'width': 2560, 'height': 1440}


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass
class FetchedResource:
    """Raw bytes of a fetched resource plus its MIME type."""
    body: bytes = b""
    mime_type: str = ""


@dataclass
class PdfOptions:
    """Options for the final ``render_pdf`` call."""
    page_format: str = "A4"
    margin_mm: float = 10
    header_template: str = "<div></div>"
    footer_template: str = "<div></div>"
    print_background: bool = True

    @property
    def margin(self) -> Dict[str, str]:
        value = f"{self.margin_mm}mm"
        return {'top': value, 'bottom': value, 'left': value, 'right': value}


# ---------------------------------------------------------------------------
# Capability interface
# ---------------------------------------------------------------------------

class PageSession(ABC):
    """One isolated page.  All waits raise ``TimeoutError`` subclasses on expiry."""

    @property
    @abstractmethod
    def current_url(self) -> str:
        ...

    @abstractmethod
    async def navigate(self, url: str, *, timeout_ms: int,
                       wait_until: str = "networkidle") -> None:
        """Load *url* and wait until the network is quiet (or time out)."""
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, *, timeout_ms: int) -> None:
        ...

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run one of the ``scripts`` snippets in the page."""
        ...

    @abstractmethod
    async def add_style(self, css: str) -> None:
        ...

    @abstractmethod
    async def wait_for_network_idle(self, *, timeout_ms: int) -> None:
        """Wait until every image on the page has settled and the network is quiet."""
        ...

    @abstractmethod
    async def fetch_resource(self, url: str) -> FetchedResource:
        ...

    @abstractmethod
    async def render_pdf(self, path: str, options: PdfOptions) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class Renderer(ABC):
    """Owns the browser and creates isolated sessions."""

    @abstractmethod
    async def start(self) -> None:
        """Launch the browser.  Raises ``RendererLaunchError`` on failure."""
        ...

    @abstractmethod
    async def new_session(self) -> PageSession:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PageSession]:
        """Scoped session: always closed, even when the body raises."""
        page_session = await self.new_session()
        try:
            yield page_session
        finally:
            try:
                await page_session.close()
            except Exception as e:
                logger.debug(f"[RENDER] Session close failed: {e}")


# ---------------------------------------------------------------------------
# Playwright backend
# ---------------------------------------------------------------------------

class PlaywrightPageSession(PageSession):
    """``PageSession`` backed by a dedicated Playwright ``BrowserContext``."""

    def __init__(self, context: BrowserContext, page: Page):
        self._context = context
        self._page = page

    @property
    def current_url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, *, timeout_ms: int,
                       wait_until: str = "networkidle") -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def wait_for_selector(self, selector: str, *, timeout_ms: int) -> None:
        await self._page.wait_for_selector(selector, timeout=timeout_ms)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def add_style(self, css: str) -> None:
        await self._page.add_style_tag(content=css)

    async def wait_for_network_idle(self, *, timeout_ms: int) -> None:
        # the "networkidle" load state has usually fired already, before the
        # body was replaced, so image loads started since then are polled directly
        await self._page.wait_for_function(scripts.IMAGES_SETTLED, timeout=timeout_ms)
        await self._page.wait_for_load_state("networkidle", timeout=timeout_ms)

    async def fetch_resource(self, url: str) -> FetchedResource:
        response = await self._page.goto(url)
        if response is None:
            return FetchedResource()
        body = await response.body()
        mime_type = response.headers.get('content-type', '')
        return FetchedResource(body=body or b"", mime_type=mime_type)

    async def render_pdf(self, path: str, options: PdfOptions) -> None:
        await self._page.pdf(
            path=path,
            format=options.page_format,
            print_background=options.print_background,
            margin=options.margin,
            display_header_footer=True,
            header_template=options.header_template,
            footer_template=options.footer_template,
        )

    async def close(self) -> None:
        # closing the context also closes its page
        await self._context.close()


class PlaywrightRenderer(Renderer):
    """Headless Chromium via ``playwright.async_api``."""

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=_LAUNCH_ARGS,
            )
        except Exception as e:
            await self.close()
            raise RendererLaunchError(f"Could not launch Chromium: {e}") from e
        logger.info(f"[RENDER] Chromium launched (headless={self.headless})")

    async def new_session(self) -> PageSession:
        if self._browser is None:
            raise RuntimeError("Renderer not started")
        context = await self._browser.new_context(viewport=_VIEWPORT)
        try:
            page = await context.new_page()
        except BaseException:
            await context.close()
            raise
        return PlaywrightPageSession(context, page)

    async def close(self) -> None:
        if self._browser:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.debug(f"[RENDER] Browser close failed: {e}")
            self._browser = None
        if self._playwright:
            try:
                await self._playwright.stop()
            except PlaywrightError as e:
                logger.debug(f"[RENDER] Playwright stop failed: {e}")
            self._playwright = None


__all__ = [
    'FetchedResource',
    'PdfOptions',
    'PageSession',
    'Renderer',
    'PlaywrightPageSession',
    'PlaywrightRenderer',
    'PlaywrightTimeout',
    'PlaywrightError',
]
