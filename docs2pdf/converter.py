"""
Docs-to-PDF Converter
=====================
Runs the whole pipeline for one documentation site.

Stages:
    1. Setup       — launch the renderer, fetch the optional cover image
    2. Collection  — extract the navigation tree, flatten it to leaf pages,
                     harvest every leaf through the bounded worker pool
    3. Assembly    — merge cover + TOC + fragments, rewrite internal links
    4. Output      — render the merged document to PDF

Fatal problems (renderer launch, unreadable entry page) raise
``Docs2PdfError`` subclasses.  Individual pages that fail are reported in
``ConversionResult.failures`` and leave an empty slot in the document.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from .harvester import ContentHarvester
from .links import build_anchor_map
from .models import ConversionResult
from .monitor import PerformanceMonitor
from .navigation import count_nodes, flatten_leaf_pages
from .pool import HarvestPool
from .renderer import PlaywrightRenderer, Renderer
from .resources import load_cover_image, resolve_output_path
from .run_config import ConverterRunConfig

logger = logging.getLogger(__name__)


class DocsToPdfConverter:
    """
    Converts a documentation site into a single navigable PDF.

    Usage::

        config = ConverterRunConfig(docs_url="https://docs.example.com/intro",
                                    pdf_path="out/docs.pdf")
        result = DocsToPdfConverter(config).run()

        # Or from async code:
        result = await DocsToPdfConverter(config).convert()
    """

    def __init__(self, config: ConverterRunConfig, renderer: Optional[Renderer] = None):
        self.config = config
        self.renderer = renderer or PlaywrightRenderer(headless=config.headless)

    def run(self) -> ConversionResult:
        """Run the async conversion from synchronous code."""
        return asyncio.run(self.convert())

    async def convert(self) -> ConversionResult:
        cfg = self.config
        t_start = time.monotonic()
        output_path = resolve_output_path(cfg.pdf_path)

        logger.info("[STAGE 1/4] Launching renderer...")
        await self.renderer.start()
        try:
            async with self.renderer.session() as session:
                cover = None
                if cfg.pdf_cover_image:
                    cover = await load_cover_image(session, cfg.pdf_cover_image)

                logger.info("[STAGE 2/4] Extracting navigation tree...")
                nodes = await cfg.to_navigation_extractor().extract(session, cfg.docs_url)
                pages = flatten_leaf_pages(nodes)
                logger.info(
                    f"[STAGE 2/4] {len(pages)} leaf pages to harvest "
                    f"out of {count_nodes(nodes)} navigation nodes"
                )

                harvester = ContentHarvester(
                    self.renderer,
                    content_selector=cfg.content_selector,
                    timeout_ms=cfg.timeout_ms,
                )
                workers = min(cfg.page_concurrency, len(pages)) or 1
                monitor = PerformanceMonitor(max_workers=workers, pages_total=len(pages))
                pool = HarvestPool(harvester.harvest, cfg.page_concurrency, monitor=monitor)
                harvest = await pool.run(pages)

                logger.info("[STAGE 3/4] Assembling merged document...")
                assembler = cfg.to_assembler()
                html, assembly_stats = assembler.assemble(
                    nodes, harvest.fragments, build_anchor_map(harvest.fragments), cover,
                )

                logger.info("[STAGE 4/4] Rendering PDF...")
                await assembler.render(session, html, output_path, has_cover=cover is not None)
        finally:
            logger.info("[CLEANUP] Closing renderer...")
            await self.renderer.close()

        elapsed = time.monotonic() - t_start
        if harvest.failures:
            logger.warning(f"[DONE] {len(harvest.failures)} of {len(pages)} pages failed and are blank:")
            for failure in harvest.failures:
                logger.warning(f"  - {failure.describe()}")
        logger.info(f"[DONE] {output_path} written in {elapsed:.1f}s")

        stats = dict(harvest.stats)
        stats['harvest_elapsed_sec'] = stats.pop('elapsed_sec', 0.0)
        stats.update(assembly_stats.to_dict())
        stats.update({
            'navigation_nodes': count_nodes(nodes),
            'pages_total': len(pages),
            'pages_failed': len(harvest.failures),
            'elapsed_sec': round(elapsed, 2),
        })
        return ConversionResult(
            output_path=output_path,
            navigation=nodes,
            fragments=harvest.fragments,
            failures=harvest.failures,
            cover_included=cover is not None,
            stats=stats,
        )
