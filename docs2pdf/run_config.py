"""
Unified Run Configuration
=========================
Single source of truth for every converter default.

The CLI builds a ``ConverterRunConfig`` from its flags; the converter builds
its components (extractor, harvester, pool, assembler) *from* it via the
factory methods below.  No other module carries its own magic numbers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .assembler import DEFAULT_REMOVE_SELECTORS, DocumentAssembler
from .harvester import DEFAULT_CONTENT_SELECTOR
from .models import PAPER_FORMATS
from .navigation import NavigationExtractor, SidebarSelectors

logger = logging.getLogger(__name__)


def default_page_concurrency() -> int:
    """Twice the number of CPUs, as browser work is mostly I/O bound."""
    return (os.cpu_count() or 1) * 2


# ---------------------------------------------------------------------------
# Canonical defaults: every other module takes its numbers from here
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "pdf_margin_mm": 10,
    "pdf_format": "A4",
    "toc_title": "Table of Contents",
    "page_timeout_seconds": 60,
    "headless": True,
    "sidebar_selector": "ul.theme-doc-sidebar-menu",
    "ready_selector": "#__docusaurus",
    "content_selector": DEFAULT_CONTENT_SELECTOR,
    "expand_settle_ms": 100,           # pause after each sidebar toggle click
    "expand_wait_ms": 2000,            # max wait for a category's sub-list
}


@dataclass
class ConverterRunConfig:
    """
    Configuration consumed by every pipeline stage.

    Populate via:
      - ``ConverterRunConfig(docs_url=..., pdf_path=...)``
      - ``ConverterRunConfig.from_cli_args(ns)`` → from argparse Namespace
    """

    # ---- Input / output ----
    docs_url: str = ""
    pdf_path: str = ""
    pdf_cover_image: Optional[str] = None

    # ---- Layout ----
    pdf_margin_mm: float = _DEFAULTS["pdf_margin_mm"]
    pdf_format: str = _DEFAULTS["pdf_format"]
    toc_title: str = _DEFAULTS["toc_title"]

    # ---- Harvesting ----
    page_concurrency: int = field(default_factory=default_page_concurrency)
    page_timeout_seconds: float = _DEFAULTS["page_timeout_seconds"]
    headless: bool = _DEFAULTS["headless"]

    # ---- Site profile (Docusaurus defaults) ----
    sidebar_selector: str = _DEFAULTS["sidebar_selector"]
    ready_selector: str = _DEFAULTS["ready_selector"]
    content_selector: str = _DEFAULTS["content_selector"]
    remove_selectors: List[str] = field(default_factory=lambda: list(DEFAULT_REMOVE_SELECTORS))
    expand_settle_ms: int = _DEFAULTS["expand_settle_ms"]
    expand_wait_ms: int = _DEFAULTS["expand_wait_ms"]

    @property
    def timeout_ms(self) -> int:
        return int(self.page_timeout_seconds * 1000)

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_cli_args(cls, args) -> "ConverterRunConfig":
        """Build config from an argparse Namespace (``__main__.py``)."""
        margin = _parse_margin(getattr(args, "pdf_margin_mm", None))
        concurrency = getattr(args, "page_concurrency", None)
        if concurrency is None:
            concurrency = default_page_concurrency()
        timeout = getattr(args, "page_timeout", None)
        if timeout is None:
            timeout = _DEFAULTS["page_timeout_seconds"]
        cfg = cls(
            docs_url=getattr(args, "docs_url", None) or "",
            pdf_path=getattr(args, "pdf_path", None) or "",
            pdf_cover_image=getattr(args, "pdf_cover_image", None) or None,
            pdf_margin_mm=margin,
            pdf_format=getattr(args, "pdf_format", None) or _DEFAULTS["pdf_format"],
            toc_title=getattr(args, "toc_title", None) or _DEFAULTS["toc_title"],
            page_concurrency=int(concurrency),
            page_timeout_seconds=float(timeout),
            headless=not getattr(args, "no_headless", False),
        )
        extra = getattr(args, "remove_selector", None) or []
        cfg.remove_selectors.extend(s for s in extra if s not in cfg.remove_selectors)
        return cfg

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        problems = []
        if not self.docs_url:
            problems.append("Missing required option: --docs-url <url>")
        if not self.pdf_path:
            problems.append("Missing required option: --pdf-path <path>")
        if self.page_concurrency < 1:
            problems.append(f"--page-concurrency must be at least 1 (got {self.page_concurrency})")
        if self.pdf_format not in PAPER_FORMATS:
            problems.append(
                f"Unknown paper format '{self.pdf_format}' "
                f"(choose from {', '.join(PAPER_FORMATS)})"
            )
        if self.pdf_margin_mm < 0:
            problems.append(f"--pdf-margin-mm must not be negative (got {self.pdf_margin_mm:g})")
        if self.page_timeout_seconds <= 0:
            problems.append(f"--page-timeout must be positive (got {self.page_timeout_seconds})")
        return problems

    # -----------------------------------------------------------------------
    # Component builders
    # -----------------------------------------------------------------------
    def to_navigation_extractor(self) -> NavigationExtractor:
        return NavigationExtractor(
            selectors=SidebarSelectors(root=self.sidebar_selector),
            ready_selector=self.ready_selector,
            timeout_ms=self.timeout_ms,
            settle_ms=self.expand_settle_ms,
            expand_wait_ms=self.expand_wait_ms,
        )

    def to_assembler(self) -> DocumentAssembler:
        return DocumentAssembler(
            toc_title=self.toc_title,
            page_format=self.pdf_format,
            margin_mm=self.pdf_margin_mm,
            remove_selectors=list(self.remove_selectors),
            network_idle_timeout_ms=self.timeout_ms,
        )

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("CONVERSION RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  Docs URL:         {self.docs_url}")
        logger.info(f"  PDF Path:         {self.pdf_path}")
        logger.info(f"  Cover Image:      {self.pdf_cover_image or '(none)'}")
        logger.info(f"  Paper / Margin:   {self.pdf_format}, {self.pdf_margin_mm:g}mm")
        logger.info(f"  Concurrency:      {self.page_concurrency} pages")
        logger.info(f"  Timeout:          {self.page_timeout_seconds:g}s per wait")
        logger.info(f"  Headless:         {self.headless}")
        logger.info(f"  Content Selector: {self.content_selector}")
        logger.info("=" * 60)


def _parse_margin(value) -> float:
    if value is None or value == "":
        return _DEFAULTS["pdf_margin_mm"]
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(
            f"[CONFIG] --pdf-margin-mm '{value}' is not a number; "
            f"using default of {_DEFAULTS['pdf_margin_mm']}mm"
        )
        return _DEFAULTS["pdf_margin_mm"]
