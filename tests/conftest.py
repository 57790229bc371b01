"""
Shared test doubles.

``FakeRenderer`` / ``FakePageSession`` implement the renderer capability
against an in-memory ``FakeSite`` so the pipeline can be exercised without a
browser.  Pages can be given latency and forced failures.
"""

import asyncio
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir)))

from docs2pdf import scripts  # noqa: E402
from docs2pdf.renderer import (  # noqa: E402
    FetchedResource,
    PageSession,
    PdfOptions,
    PlaywrightError,
    PlaywrightTimeout,
    Renderer,
)
from docs2pdf.errors import RendererLaunchError  # noqa: E402


READY_SELECTOR = "#__docusaurus"


@dataclass
class FakePage:
    content: Optional[str] = None          # inner markup of the content region
    sidebar_html: str = ""
    latency: float = 0.0
    fail_navigation: bool = False           # raise a timeout on navigate()
    fail_evaluate: bool = False             # raise on the first evaluate()


@dataclass
class FakeSite:
    pages: Dict[str, FakePage] = field(default_factory=dict)
    resources: Dict[str, FetchedResource] = field(default_factory=dict)

    def add(self, url: str, **kwargs) -> FakePage:
        page = FakePage(**kwargs)
        self.pages[url] = page
        return page


class FakePageSession(PageSession):
    def __init__(self, renderer: "FakeRenderer"):
        self._renderer = renderer
        self._url = "about:blank"
        self._page: Optional[FakePage] = None
        self._stamped_id: Optional[str] = None
        self.body_html: Optional[str] = None
        self.styles: List[str] = []
        self.closed = False

    @property
    def current_url(self) -> str:
        return self._url

    async def navigate(self, url, *, timeout_ms, wait_until="networkidle"):
        page = self._renderer.site.pages.get(url)
        if page is None:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        if page.latency:
            await asyncio.sleep(page.latency)
        if page.fail_navigation:
            raise PlaywrightTimeout(f"Timeout {timeout_ms}ms exceeded navigating to {url}")
        self._url = url
        self._page = page
        self._renderer.navigations.append(url)

    async def wait_for_selector(self, selector, *, timeout_ms):
        if selector == READY_SELECTOR and self._page is not None:
            return
        if self._page is None or self._page.content is None:
            raise PlaywrightTimeout(f"Timeout {timeout_ms}ms exceeded waiting for {selector}")

    async def evaluate(self, script, arg=None):
        page = self._page
        if page is not None and page.fail_evaluate:
            raise PlaywrightError("Execution context was destroyed")
        if script == scripts.EXPAND_SIDEBAR:
            return 0 if page and page.sidebar_html else -1
        if script == scripts.SIDEBAR_HTML:
            return page.sidebar_html if page else ""
        if script == scripts.EXPAND_DETAILS:
            return 0
        if script == scripts.STAMP_ELEMENT_ID:
            if page is None or page.content is None:
                return False
            self._stamped_id = arg['id']
            return True
        if script == scripts.EXTRACT_OUTER_HTML:
            if self._stamped_id is None or arg != f"#{self._stamped_id}":
                return ""
            return (
                f'<div id="{self._stamped_id}" style="page-break-after: always;">'
                f'{page.content}</div>'
            )
        if script == scripts.REPLACE_BODY:
            self._renderer.events.append("replace_body")
            self.body_html = arg
            self._renderer.rendered_body = arg
            return None
        raise AssertionError(f"unexpected script: {script[:40]!r}")

    async def add_style(self, css):
        self.styles.append(css)
        self._renderer.styles.append(css)

    async def wait_for_network_idle(self, *, timeout_ms):
        self._renderer.events.append("idle")
        if self._renderer.fail_idle_wait:
            raise PlaywrightTimeout(f"Timeout {timeout_ms}ms exceeded waiting for images")

    async def fetch_resource(self, url):
        if url not in self._renderer.site.resources:
            raise PlaywrightError(f"net::ERR_FILE_NOT_FOUND at {url}")
        return self._renderer.site.resources[url]

    async def render_pdf(self, path, options: PdfOptions):
        self._renderer.events.append("pdf")
        self._renderer.pdf_options = options
        Path(path).write_bytes(b"%PDF-1.4\n" + (self.body_html or "").encode("utf-8"))

    async def close(self):
        self.closed = True
        self._renderer.open_sessions -= 1
        self._renderer.sessions_closed += 1


class FakeRenderer(Renderer):
    def __init__(self, site: Optional[FakeSite] = None, *, fail_launch: bool = False,
                 fail_idle_wait: bool = False):
        self.site = site or FakeSite()
        self.fail_launch = fail_launch
        self.fail_idle_wait = fail_idle_wait
        self.events: List[str] = []
        self.started = False
        self.closed = False
        self.open_sessions = 0
        self.peak_open_sessions = 0
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.navigations: List[str] = []
        self.styles: List[str] = []
        self.rendered_body: Optional[str] = None
        self.pdf_options: Optional[PdfOptions] = None

    async def start(self):
        if self.fail_launch:
            raise RendererLaunchError("Could not launch Chromium: executable missing")
        self.started = True

    async def new_session(self):
        self.sessions_opened += 1
        self.open_sessions += 1
        self.peak_open_sessions = max(self.peak_open_sessions, self.open_sessions)
        return FakePageSession(self)

    async def close(self):
        self.closed = True


SIDEBAR_HTML = """
<ul class="theme-doc-sidebar-menu menu__list">
  <li class="theme-doc-sidebar-item-link menu__list-item">
    <a class="menu__link" href="/docs/intro">Intro</a>
  </li>
  <li class="theme-doc-sidebar-item-category menu__list-item">
    <div class="menu__list-item-collapsible">
      <a class="menu__link menu__link--sublist" aria-expanded="true" href="#">Guides</a>
    </div>
    <ul class="menu__list">
      <li class="menu__list-item"><a class="menu__link" href="/docs/setup">Setup</a></li>
      <li class="menu__list-item"><a class="menu__link" href="/docs/deploy">Deploy</a></li>
    </ul>
  </li>
  <li class="menu__list-item"><span class="divider">Reference</span></li>
  <li class="theme-doc-sidebar-item-category menu__list-item">
    <div class="menu__list-item-collapsible">
      <a class="menu__link menu__link--sublist" aria-expanded="true" href="/docs/api">API</a>
    </div>
    <ul class="menu__list">
      <li class="menu__list-item"><a class="menu__link" href="/docs/api/client">Client</a></li>
      <li class="menu__list-item"><a class="menu__link" href="#">Coming soon</a></li>
    </ul>
  </li>
</ul>
"""


@pytest.fixture
def docs_site() -> FakeSite:
    """A small Docusaurus-like site rooted at https://x/docs/intro."""
    site = FakeSite()
    site.add(
        "https://x/docs/intro",
        sidebar_html=SIDEBAR_HTML,
        content=(
            '<h1>Intro</h1>'
            '<p>Start with <a href="/docs/setup">the setup guide</a> '
            'or <a href="/docs/setup/">this variant</a> '
            'or <a href="https://github.com/x">GitHub</a>.</p>'
            '<nav class="pagination-nav"><a href="/docs/setup">Next</a></nav>'
        ),
    )
    site.add("https://x/docs/setup", content='<h1>Setup</h1><img src="s.png" loading="lazy">', latency=0.03)
    site.add("https://x/docs/deploy", content="<h1>Deploy</h1>", fail_navigation=True)
    site.add("https://x/docs/api/client", content='<h1>Client</h1><a href="/docs/intro">Back</a>', latency=0.01)
    return site


@pytest.fixture
def fake_renderer(docs_site) -> FakeRenderer:
    return FakeRenderer(docs_site)
