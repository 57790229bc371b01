#!/usr/bin/env python3
"""
Command-Line Interface
======================
Converts a Docusaurus-style documentation site into one PDF.

Run with: python -m docs2pdf --docs-url <url> --pdf-path <path> [options]

Flags fall back to environment variables (``DOCS2PDF_*``), which may be kept
in a ``.env`` file next to the project or in the working directory.

Exit codes: 0 when a PDF was produced (even if some pages failed),
1 on a fatal error (missing flag, browser launch failure, unreadable entry
page, unwritable output directory).
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from . import __version__
from .converter import DocsToPdfConverter
from .errors import Docs2PdfError
from .models import PAPER_FORMATS, ConversionResult
from .run_config import ConverterRunConfig, default_page_concurrency

logger = logging.getLogger(__name__)

_ENV_PATH = Path(__file__).resolve().parent.parent / '.env'


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring {name}={value!r} (not an integer)")
        return None


def build_parser() -> argparse.ArgumentParser:
    env_concurrency = _env_int('DOCS2PDF_PAGE_CONCURRENCY')
    parser = argparse.ArgumentParser(
        prog='docs2pdf',
        description='Converts Docusaurus documentation to a single PDF file.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m docs2pdf -u http://localhost:3000/docs/intro -o out/docs.pdf
  python -m docs2pdf -u https://docs.example.com/docs/intro -o docs.pdf -c cover.png -m 15
  python -m docs2pdf -u https://docs.example.com/docs/intro -o docs.pdf -p 4 --page-timeout 90
        """
    )
    parser.add_argument(
        '-u', '--docs-url', type=str, default=os.environ.get('DOCS2PDF_DOCS_URL'),
        help='Entry URL of the documentation (e.g. "http://localhost:3000/docs/introduction")',
    )
    parser.add_argument(
        '-o', '--pdf-path', type=str, default=os.environ.get('DOCS2PDF_PDF_PATH'),
        help='Output PDF path (".pdf" is appended if missing, directories are created)',
    )
    parser.add_argument(
        '-c', '--pdf-cover-image', type=str, default=os.environ.get('DOCS2PDF_COVER_IMAGE'),
        metavar='PATH_OR_URL',
        help='Optional cover image: URL, file:/// URL or local path',
    )
    parser.add_argument(
        '-m', '--pdf-margin-mm', type=str, default='10',
        help='Page margin in millimetres on all sides (default: 10)',
    )
    parser.add_argument(
        '-p', '--page-concurrency', type=int,
        default=env_concurrency if env_concurrency is not None else default_page_concurrency(),
        help=f'Max pages harvested at once (default: 2x CPU cores = {default_page_concurrency()})',
    )
    parser.add_argument(
        '--pdf-format', type=str, default='A4', choices=sorted(PAPER_FORMATS),
        help='Paper format (default: A4)',
    )
    parser.add_argument(
        '--toc-title', type=str, default='Table of Contents',
        help='Heading of the table of contents page',
    )
    parser.add_argument(
        '--page-timeout', type=float, default=60,
        help='Timeout in seconds for each page load / content wait (default: 60)',
    )
    parser.add_argument(
        '--remove-selector', type=str, action='append', default=[],
        help='Extra CSS selector to strip from the merged document (repeatable)',
    )
    parser.add_argument(
        '--no-headless', action='store_true',
        help='Show the browser window while converting',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def print_summary(result: ConversionResult) -> None:
    """Print conversion summary."""
    stats = result.stats
    print("\n" + "=" * 65)
    print("CONVERSION COMPLETE")
    print("=" * 65)
    print(f"  Output:              {result.output_path}")
    print(f"  Navigation nodes:    {stats.get('navigation_nodes', 0)}")
    print(f"  Pages harvested:     {stats.get('pages_harvested', 0)} / {stats.get('pages_total', 0)}")
    print(f"  Failed pages:        {stats.get('pages_failed', 0)}")
    for failure in result.failures:
        print(f"    - {failure.title} ({failure.url})")
    print(f"  Links rewritten:     {stats.get('links_rewritten', 0)}")
    print(f"  Cover page:          {'yes' if result.cover_included else 'no'}")
    print(f"  Total time:          {stats.get('elapsed_sec', 0):.1f}s")
    print("=" * 65)


def main(argv: Optional[List[str]] = None) -> int:
    """Parse argv, build the run config, convert.  Returns the exit code."""
    if _ENV_PATH.exists():
        load_dotenv(_ENV_PATH)
    else:
        load_dotenv()  # tries CWD

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    cfg = ConverterRunConfig.from_cli_args(args)
    problems = cfg.validate()
    if problems:
        parser.print_usage(sys.stderr)
        for problem in problems:
            logger.error(f"[CONFIG] {problem}")
        return 1

    cfg.log_summary()
    start = time.time()
    try:
        result = DocsToPdfConverter(cfg).run()
    except Docs2PdfError as e:
        logger.error(f"[FATAL] {e}", exc_info=True)
        return 1
    except KeyboardInterrupt:
        logger.error(f"[FATAL] Interrupted after {time.time() - start:.1f}s")
        return 1

    print_summary(result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
