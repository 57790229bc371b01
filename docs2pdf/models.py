"""
Document Data Model
===================
Plain data containers shared by every stage of the pipeline.

- ``NavigationNode`` — one sidebar entry; the tree is built once and never
  mutated afterwards.
- ``PageFragment``   — harvested markup of one leaf page (or an empty
  fragment paired with an error message).
- ``HarvestFailure`` — page-level failure record for reporting.
- ``PaperFormat``    — physical page size used for the cover page and PDF.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class NavigationNode:
    """
    One entry in the site's navigation hierarchy.

    ``path`` is the raw ``href`` attribute as written in the sidebar (the key
    used for link rewriting); ``url`` is the absolute address used for
    fetching.  Fragment-only urls (``#``, ``#section``) and urls ending in
    ``/#`` mark the node as non-fetchable.
    """
    id: str
    title: str
    path: str = ""
    url: str = ""
    children: Tuple["NavigationNode", ...] = ()

    def __post_init__(self):
        # stored as a tuple so the tree stays read-only
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def is_category(self) -> bool:
        return bool(self.children)

    @property
    def is_fetchable(self) -> bool:
        url = self.url
        return bool(url) and not url.startswith("#") and not url.endswith("/#")

    @property
    def is_leaf_page(self) -> bool:
        """Leaf pages are the only nodes whose content is harvested."""
        return not self.children and self.is_fetchable

    def walk(self) -> Iterator["NavigationNode"]:
        """Yield this node and its descendants in document (pre-)order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "path": self.path,
            "url": self.url,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(frozen=True)
class PageFragment:
    """Result of harvesting one leaf page."""
    id: str
    title: str
    url: str
    path: str
    content: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_node(cls, node: NavigationNode, content: str) -> "PageFragment":
        return cls(id=node.id, title=node.title, url=node.url,
                   path=node.path, content=content)

    @classmethod
    def failed(cls, node: NavigationNode, error: str) -> "PageFragment":
        return cls(id=node.id, title=node.title, url=node.url,
                   path=node.path, content="", error=error)


@dataclass(frozen=True)
class HarvestFailure:
    """A page that could not be harvested; the run carried on without it."""
    index: int
    title: str
    url: str
    worker_id: int
    error: str

    def describe(self) -> str:
        return f"#{self.index} \"{self.title}\" ({self.url}) [worker {self.worker_id}]: {self.error}"


@dataclass(frozen=True)
class PaperFormat:
    width_mm: float
    height_mm: float


PAPER_FORMATS: Dict[str, PaperFormat] = {
    "A4": PaperFormat(width_mm=210, height_mm=297),
    "Letter": PaperFormat(width_mm=216, height_mm=279),
}


@dataclass(frozen=True)
class CoverImage:
    """Cover image bytes as retrieved by the renderer."""
    data: bytes
    mime_type: str


def iter_nodes(nodes: List[NavigationNode]) -> Iterator[NavigationNode]:
    """Pre-order traversal over a forest of navigation nodes."""
    for node in nodes:
        yield from node.walk()


@dataclass
class HarvestResult:
    """Output of the worker pool: one fragment per leaf page, in order."""
    fragments: List[PageFragment] = field(default_factory=list)
    failures: List[HarvestFailure] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Everything a finished run produced."""
    output_path: str = ""
    navigation: List[NavigationNode] = field(default_factory=list)
    fragments: List[PageFragment] = field(default_factory=list)
    failures: List[HarvestFailure] = field(default_factory=list)
    cover_included: bool = False
    stats: Dict[str, Any] = field(default_factory=dict)
