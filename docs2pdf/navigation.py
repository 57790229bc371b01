"""
Navigation Tree
===============
Discovers the documentation site's sidebar hierarchy and linearises it.

Responsibilities:
  1. **NavigationExtractor** — load the entry page, open every collapsed
     sidebar category, pull the sidebar markup out of the page
  2. **parse_sidebar_html**  — pure recursive parse of that markup into
     ``NavigationNode`` trees (BeautifulSoup, no browser needed)
  3. **flatten_leaf_pages**  — pre-order list of the pages to harvest

Leaf policy: a node is harvested iff it has no children and a fetchable url.
Category nodes are descended into but never harvested themselves, so a
category that also has its own landing page does NOT get that page in the
merged document.  This is deliberate: it keeps the harvested set exactly the
set of sidebar leaves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from . import scripts
from .anchor_ids import generate_anchor_id
from .errors import NavigationError
from .models import NavigationNode, iter_nodes
from .renderer import PageSession, PlaywrightError

logger = logging.getLogger(__name__)

_BS_PARSER = "lxml"


@dataclass
class SidebarSelectors:
    """CSS selectors describing a Docusaurus-style sidebar."""
    root: str = "ul.theme-doc-sidebar-menu"
    item_link: str = ":scope > .menu__list-item-collapsible > a, :scope > a.menu__link"
    sub_list: str = ":scope > ul.menu__list"


# ---------------------------------------------------------------------------
# Pure tree parsing
# ---------------------------------------------------------------------------

def parse_sidebar_html(
    html: str,
    base_url: str,
    *,
    selectors: Optional[SidebarSelectors] = None,
    id_factory: Callable[[], str] = generate_anchor_id,
) -> List[NavigationNode]:
    """Parse sidebar markup into root-level navigation nodes.

    *html* is the outer HTML of the sidebar root list (or any fragment
    containing it).  Relative hrefs are resolved against *base_url*.
    """
    selectors = selectors or SidebarSelectors()
    soup = BeautifulSoup(html or "", _BS_PARSER)
    root = soup.select_one(selectors.root)
    if root is None:
        return []
    return _parse_items(_direct_items(root), base_url, selectors, id_factory)


def _direct_items(ul: Tag) -> List[Tag]:
    return ul.find_all("li", recursive=False)


def _parse_items(
    items: List[Tag],
    base_url: str,
    selectors: SidebarSelectors,
    id_factory: Callable[[], str],
) -> List[NavigationNode]:
    nodes = []
    for li in items:
        link = li.select_one(selectors.item_link)
        if link is None:
            logger.warning(f"[NAV] Skipped sidebar entry without a link: {_snippet(li)}")
            continue

        node_id = id_factory()
        sub_list = li.select_one(selectors.sub_list)
        children = []
        if sub_list is not None:
            children = _parse_items(_direct_items(sub_list), base_url, selectors, id_factory)

        path = link.get("href") or ""
        nodes.append(NavigationNode(
            id=node_id,
            title=_title_of(link, path),
            path=path,
            url=resolve_href(path, base_url),
            children=tuple(children),
        ))
    return nodes


def resolve_href(href: str, base_url: str) -> str:
    """Absolute fetch url for *href*; fragment-only hrefs are kept as-is.

    A trailing empty fragment (``/docs/x/#``) marks a placeholder entry and
    is kept, although ``urljoin`` would drop it.
    """
    if not href:
        return ""
    if href.startswith("#"):
        return href
    url = urljoin(base_url, href)
    if href.endswith("#") and not url.endswith("#"):
        url += "#"
    return url


def _title_of(link: Tag, path: str) -> str:
    title = " ".join(link.get_text(" ", strip=True).split())
    return title or path or "Untitled"


def _snippet(tag: Tag, limit: int = 120) -> str:
    text = str(tag)
    return text if len(text) <= limit else text[:limit] + "..."


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------

def is_leaf_page(node: NavigationNode) -> bool:
    """No children and a url that is neither empty, ``#``-only nor ``.../#``."""
    return node.is_leaf_page


def flatten_leaf_pages(nodes: List[NavigationNode]) -> List[NavigationNode]:
    """Leaf pages in document (pre-order, depth-first) order."""
    return [node for node in iter_nodes(nodes) if is_leaf_page(node)]


def count_nodes(nodes: List[NavigationNode]) -> int:
    return sum(1 for _ in iter_nodes(nodes))


# ---------------------------------------------------------------------------
# Live extraction
# ---------------------------------------------------------------------------

class NavigationExtractor:
    """Builds the navigation tree from a live entry page."""

    def __init__(
        self,
        *,
        selectors: Optional[SidebarSelectors] = None,
        ready_selector: str = "#__docusaurus",
        timeout_ms: int = 60_000,
        settle_ms: int = 100,
        expand_wait_ms: int = 2_000,
    ):
        self.selectors = selectors or SidebarSelectors()
        self.ready_selector = ready_selector
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self.expand_wait_ms = expand_wait_ms

    async def extract(self, session: PageSession, entry_url: str) -> List[NavigationNode]:
        """Load *entry_url* in *session* and return the root-level nodes.

        Raises ``NavigationError`` when the page cannot be loaded or has no
        sidebar; without a tree there is nothing to convert.
        """
        logger.info(f"[NAV] Loading entry page {entry_url}")
        try:
            await session.navigate(entry_url, timeout_ms=self.timeout_ms)
            await session.wait_for_selector(self.ready_selector, timeout_ms=self.timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Entry page {entry_url} did not load: {e}") from e

        try:
            opened = await session.evaluate(scripts.EXPAND_SIDEBAR, {
                'rootSelector': self.selectors.root,
                'settleMs': self.settle_ms,
                'maxWaitMs': self.expand_wait_ms,
            })
            html = await session.evaluate(scripts.SIDEBAR_HTML, self.selectors.root)
        except PlaywrightError as e:
            raise NavigationError(f"Sidebar extraction failed on {entry_url}: {e}") from e

        if (opened is not None and opened < 0) or not html:
            raise NavigationError(
                f"No sidebar matching '{self.selectors.root}' on {entry_url}"
            )
        logger.info(f"[NAV] Expanded {opened} collapsed sidebar categories")

        nodes = parse_sidebar_html(html, session.current_url or entry_url,
                                   selectors=self.selectors)
        logger.info(
            f"[NAV] Sidebar parsed: {len(nodes)} top-level items, "
            f"{count_nodes(nodes)} nodes in total"
        )
        return nodes
