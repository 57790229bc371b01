"""
Docs-to-PDF Package
Converts a tree-structured documentation site into one internally linked PDF.

CLI Usage:
    python -m docs2pdf --docs-url <url> --pdf-path <path> [options]

    Options:
        --pdf-cover-image   Cover image (URL, file:/// URL or local path)
        --pdf-margin-mm     Page margin in mm (default: 10)
        --page-concurrency  Pages harvested at once (default: 2x CPU cores)
        --pdf-format        A4 or Letter (default: A4)
        --toc-title         Table of contents heading
        --page-timeout      Per-page wait timeout in seconds (default: 60)
        --remove-selector   Extra CSS selector to strip (repeatable)
"""

__version__ = '0.1.0'

from .models import NavigationNode, PageFragment, HarvestFailure, HarvestResult, ConversionResult
from .anchor_ids import generate_anchor_id, is_valid_anchor_id
from .navigation import NavigationExtractor, parse_sidebar_html, flatten_leaf_pages
from .harvester import ContentHarvester
from .pool import HarvestPool
from .links import build_anchor_map, rewrite_links, rewrite_links_in_html
from .assembler import DocumentAssembler
from .renderer import PageSession, Renderer, PlaywrightRenderer
from .run_config import ConverterRunConfig
from .converter import DocsToPdfConverter
from .errors import (
    Docs2PdfError,
    RendererLaunchError,
    NavigationError,
    OutputPathError,
    ResourceResolutionError,
)

__all__ = [
    'NavigationNode',
    'PageFragment',
    'HarvestFailure',
    'HarvestResult',
    'ConversionResult',
    'generate_anchor_id',
    'is_valid_anchor_id',
    'NavigationExtractor',
    'parse_sidebar_html',
    'flatten_leaf_pages',
    'ContentHarvester',
    'HarvestPool',
    'build_anchor_map',
    'rewrite_links',
    'rewrite_links_in_html',
    'DocumentAssembler',
    'PageSession',
    'Renderer',
    'PlaywrightRenderer',
    'ConverterRunConfig',
    'DocsToPdfConverter',
    'Docs2PdfError',
    'RendererLaunchError',
    'NavigationError',
    'OutputPathError',
    'ResourceResolutionError',
]
