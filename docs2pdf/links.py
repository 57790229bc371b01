"""
Link Rewriter
=============
Turns the site's internal hrefs into anchors inside the merged document.

Matching is exact string equality between an ``<a href>`` value and a leaf
page's original sidebar ``path``.  No normalisation is applied, so
``/docs/setup/`` does NOT match ``/docs/setup`` and mixed-case variants are
left alone.  This is a known limitation: some valid internal links may stay
pointing at the live site.

Rewriting is idempotent: a rewritten href (``#<anchor>``) never equals an
original path, so a second pass changes nothing.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Tuple

from bs4 import BeautifulSoup

from .models import PageFragment

logger = logging.getLogger(__name__)

FRAGMENT_PARSER = "html.parser"


def build_anchor_map(fragments: Iterable[PageFragment]) -> Dict[str, str]:
    """Map each page's original path to its anchor id.

    Built from every fragment, harvested or not; pages without a path are
    skipped.  If two pages share a path, the first one in document order wins.
    """
    anchor_map: Dict[str, str] = {}
    for fragment in fragments:
        if fragment.path and fragment.path not in anchor_map:
            anchor_map[fragment.path] = fragment.id
    return anchor_map


def rewrite_links(soup: BeautifulSoup, anchor_map: Dict[str, str]) -> int:
    """Rewrite matching ``<a href>`` elements of *soup* in place.

    Returns the number of links rewritten.
    """
    rewritten = 0
    for link in soup.find_all("a", href=True):
        anchor = anchor_map.get(link["href"])
        if anchor is not None:
            link["href"] = f"#{anchor}"
            rewritten += 1
    return rewritten


def rewrite_links_in_html(html: str, anchor_map: Dict[str, str]) -> Tuple[str, int]:
    """String-in/string-out variant of ``rewrite_links``."""
    soup = BeautifulSoup(html, FRAGMENT_PARSER)
    rewritten = rewrite_links(soup, anchor_map)
    logger.debug(f"[LINKS] Rewrote {rewritten} links against {len(anchor_map)} paths")
    return str(soup), rewritten
