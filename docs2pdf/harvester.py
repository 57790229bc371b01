"""
Content Harvester
=================
Fetches and extracts the primary content of one leaf page.

Per page:
    1. open an isolated session (own browser context)
    2. navigate, waiting for network quiescence (bounded)
    3. wait for the primary content region (bounded)
    4. open collapsed ``<details>`` blocks
    5. stamp the region with the page's anchor id
    6. take the region's outer HTML, marked with a trailing page break
    7. close the session, whatever happened

Any failure in steps 1-6 yields an empty ``PageFragment`` carrying the error
message.  ``harvest`` never raises (except on task cancellation).
"""

from __future__ import annotations

import logging
import time

from . import scripts
from .models import NavigationNode, PageFragment
from .renderer import PlaywrightTimeout, Renderer

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_SELECTOR = (
    'div[class^="docItemContainer"]>article>div[class*="theme-doc-markdown"]'
)


class ContentHarvester:
    """Turns a leaf ``NavigationNode`` into a ``PageFragment``."""

    def __init__(
        self,
        renderer: Renderer,
        *,
        content_selector: str = DEFAULT_CONTENT_SELECTOR,
        timeout_ms: int = 60_000,
    ):
        self.renderer = renderer
        self.content_selector = content_selector
        self.timeout_ms = timeout_ms

    async def harvest(self, node: NavigationNode, worker_id: int = 0) -> PageFragment:
        """Harvest *node*; failures are logged and returned as empty fragments."""
        logger.info(f"[WORKER-{worker_id}] Processing \"{node.title}\" ({node.url})")
        t_start = time.monotonic()
        try:
            html = await self._extract(node, worker_id)
        except PlaywrightTimeout as e:
            return self._failed(node, worker_id, f"timeout: {e}")
        except Exception as e:
            return self._failed(node, worker_id, f"{type(e).__name__}: {e}")

        elapsed_ms = (time.monotonic() - t_start) * 1000
        logger.info(
            f"[WORKER-{worker_id}] Done \"{node.title}\" "
            f"({len(html):,} chars, {elapsed_ms:.0f}ms)"
        )
        return PageFragment.from_node(node, html)

    async def _extract(self, node: NavigationNode, worker_id: int) -> str:
        async with self.renderer.session() as session:
            await session.navigate(node.url, timeout_ms=self.timeout_ms)
            await session.wait_for_selector(self.content_selector, timeout_ms=self.timeout_ms)
            logger.debug(f"[WORKER-{worker_id}] Content region ready on \"{node.title}\"")

            opened = await session.evaluate(scripts.EXPAND_DETAILS)
            if opened:
                logger.debug(f"[WORKER-{worker_id}] Opened {opened} <details> on \"{node.title}\"")

            stamped = await session.evaluate(scripts.STAMP_ELEMENT_ID, {
                'selector': self.content_selector,
                'id': node.id,
            })
            if not stamped:
                raise LookupError(f"content region '{self.content_selector}' disappeared")

            html = await session.evaluate(scripts.EXTRACT_OUTER_HTML, f"#{node.id}")
            if not html:
                raise LookupError(f"no markup extracted for #{node.id}")
            return html

    def _failed(self, node: NavigationNode, worker_id: int, error: str) -> PageFragment:
        logger.error(
            f"[WORKER-{worker_id}] ERROR processing \"{node.title}\" ({node.url}): {error}"
        )
        return PageFragment.failed(node, error)
