"""
Document Assembler
==================
Merges cover, table of contents and harvested fragments into one document
and hands it to the renderer for PDF output.

Order of the merged body:
    1. cover block (only when a cover image was retrieved)
    2. table of contents built from the full navigation tree
    3. every fragment, in the pool's output order

Before rendering the markup is post-processed on the Python side: internal
links rewritten to anchors, site chrome (breadcrumbs, footers, pager)
removed, lazy image loading disabled.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from . import scripts, templates
from .links import FRAGMENT_PARSER, rewrite_links
from .models import PAPER_FORMATS, CoverImage, NavigationNode, PageFragment
from .renderer import PageSession, PdfOptions, PlaywrightTimeout

logger = logging.getLogger(__name__)

DEFAULT_REMOVE_SELECTORS = [
    'nav.theme-doc-breadcrumbs',
    'footer.theme-doc-footer',
    'nav.pagination-nav',
]


@dataclass
class AssemblyStats:
    fragments: int = 0
    empty_fragments: int = 0
    links_rewritten: int = 0
    elements_removed: int = 0
    lazy_images: int = 0
    html_chars: int = 0

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class DocumentAssembler:
    """Builds the merged HTML and renders it to PDF."""
    toc_title: str = "Table of Contents"
    page_format: str = "A4"
    margin_mm: float = 10
    remove_selectors: List[str] = field(default_factory=lambda: list(DEFAULT_REMOVE_SELECTORS))
    network_idle_timeout_ms: int = 60_000

    # ------------------------------------------------------------------
    # Markup
    # ------------------------------------------------------------------

    def merge(
        self,
        nodes: Sequence[NavigationNode],
        fragments: Sequence[PageFragment],
        cover: Optional[CoverImage] = None,
    ) -> str:
        """Concatenate cover, TOC and fragment contents, in that order."""
        parts = []
        if cover is not None:
            parts.append(templates.render_cover_html(cover, PAPER_FORMATS[self.page_format]))
        parts.append(templates.render_toc_html(list(nodes), self.toc_title))
        parts.extend(fragment.content for fragment in fragments)
        return "".join(parts)

    def postprocess(self, html: str, anchor_map: Dict[str, str], stats: AssemblyStats) -> str:
        """Rewrite links, drop site chrome and lazy-loading hints."""
        soup = BeautifulSoup(html, FRAGMENT_PARSER)

        stats.links_rewritten = rewrite_links(soup, anchor_map)
        logger.info(f"[LINKS] Rewrote {stats.links_rewritten} internal links to anchors")

        for selector in self.remove_selectors:
            matches = soup.select(selector)
            for element in matches:
                element.decompose()
            stats.elements_removed += len(matches)
            if matches:
                logger.debug(f"[ASSEMBLE] Removed {len(matches)} elements for '{selector}'")

        for img in soup.find_all("img", attrs={"loading": "lazy"}):
            del img["loading"]
            stats.lazy_images += 1

        return str(soup)

    def assemble(
        self,
        nodes: Sequence[NavigationNode],
        fragments: Sequence[PageFragment],
        anchor_map: Dict[str, str],
        cover: Optional[CoverImage] = None,
    ) -> Tuple[str, AssemblyStats]:
        stats = AssemblyStats(
            fragments=len(fragments),
            empty_fragments=sum(1 for f in fragments if not f.content),
        )
        html = self.postprocess(self.merge(nodes, fragments, cover), anchor_map, stats)
        stats.html_chars = len(html)
        logger.info(
            f"[ASSEMBLE] Merged {stats.fragments} fragments "
            f"({stats.empty_fragments} empty) into {stats.html_chars:,} chars of HTML"
        )
        return html, stats

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def pdf_options(self) -> PdfOptions:
        return PdfOptions(
            page_format=self.page_format,
            margin_mm=self.margin_mm,
            header_template=templates.HEADER_TEMPLATE,
            footer_template=templates.FOOTER_TEMPLATE,
        )

    async def render(
        self,
        session: PageSession,
        html: str,
        output_path: str,
        *,
        has_cover: bool = False,
    ) -> None:
        """Inject *html* into *session*'s page and print it to *output_path*."""
        await session.evaluate(scripts.REPLACE_BODY, html)
        if has_cover:
            await session.add_style(templates.COVER_PAGE_CSS)
        await session.add_style(templates.page_margin_css(self.margin_mm))
        logger.info(f"[RENDER] Document injected, margins {self.margin_mm:g}mm")

        try:
            await session.wait_for_network_idle(timeout_ms=self.network_idle_timeout_ms)
        except PlaywrightTimeout:
            logger.warning("[RENDER] Network did not go idle; rendering with what has loaded")

        logger.info(f"[RENDER] Printing PDF to {output_path}...")
        t_start = time.monotonic()
        await session.render_pdf(output_path, self.pdf_options())
        logger.info(f"[RENDER] PDF written in {time.monotonic() - t_start:.2f}s")
