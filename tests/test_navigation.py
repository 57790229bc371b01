"""
Tests for navigation.py.

Covers:
  1. Sidebar markup parsing: hierarchy, titles, href resolution
  2. Entries without a link are skipped, not fatal
  3. Leaf policy (categories and fragment-only urls are not pages)
  4. Pre-order flattening
  5. Live extraction through a fake renderer session
"""

import asyncio
import itertools

import pytest

from docs2pdf.errors import NavigationError
from docs2pdf.models import NavigationNode
from docs2pdf.navigation import (
    NavigationExtractor,
    SidebarSelectors,
    count_nodes,
    flatten_leaf_pages,
    is_leaf_page,
    parse_sidebar_html,
    resolve_href,
)

from conftest import SIDEBAR_HTML, FakeRenderer, FakeSite

BASE = "https://x/docs/intro"


def _sequential_ids():
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"


# ---------------------------------------------------------------------------
# 1 + 2. Parsing
# ---------------------------------------------------------------------------

class TestParseSidebarHtml:

    def setup_method(self):
        self.nodes = parse_sidebar_html(SIDEBAR_HTML, BASE, id_factory=_sequential_ids())

    def test_top_level_entries(self):
        # the divider <li> has no link and is skipped
        assert [n.title for n in self.nodes] == ["Intro", "Guides", "API"]

    def test_children_in_document_order(self):
        guides = self.nodes[1]
        assert [c.title for c in guides.children] == ["Setup", "Deploy"]
        assert guides.is_category

    def test_path_is_raw_href_and_url_is_absolute(self):
        setup = self.nodes[1].children[0]
        assert setup.path == "/docs/setup"
        assert setup.url == "https://x/docs/setup"

    def test_fragment_only_href_is_kept(self):
        guides = self.nodes[1]
        assert guides.path == "#"
        assert guides.url == "#"

    def test_ids_assigned_in_pre_order(self):
        walked = [n.id for n in self.nodes[0].walk()] + [n.id for n in self.nodes[1].walk()]
        assert walked == ["n1", "n2", "n3", "n4"]

    def test_default_ids_are_unique(self):
        nodes = parse_sidebar_html(SIDEBAR_HTML, BASE)
        ids = [n.id for root in nodes for n in root.walk()]
        assert len(ids) == len(set(ids)) == count_nodes(nodes)

    def test_missing_root_gives_empty_tree(self):
        assert parse_sidebar_html("<div>no sidebar</div>", BASE) == []

    def test_empty_markup(self):
        assert parse_sidebar_html("", BASE) == []

    def test_custom_root_selector(self):
        html = SIDEBAR_HTML.replace("theme-doc-sidebar-menu", "my-sidebar")
        nodes = parse_sidebar_html(html, BASE, selectors=SidebarSelectors(root="ul.my-sidebar"))
        assert len(nodes) == 3

    def test_whitespace_in_titles_is_collapsed(self):
        html = (
            '<ul class="theme-doc-sidebar-menu">'
            '<li><a class="menu__link" href="/a">  Getting\n   started </a></li>'
            '<li><a class="menu__link" href="/b"></a></li>'
            '</ul>'
        )
        nodes = parse_sidebar_html(html, BASE)
        assert nodes[0].title == "Getting started"
        # no text: the href stands in for the title
        assert nodes[1].title == "/b"


class TestResolveHref:

    @pytest.mark.parametrize("href, expected", [
        ("", ""),
        ("#", "#"),
        ("#section", "#section"),
        ("/docs/setup", "https://x/docs/setup"),
        ("setup", "https://x/docs/setup"),
        ("https://other/page", "https://other/page"),
        ("/docs/x/#", "https://x/docs/x/#"),
        ("https://other/y/#", "https://other/y/#"),
    ])
    def test_resolution(self, href, expected):
        assert resolve_href(href, BASE) == expected


# ---------------------------------------------------------------------------
# 3 + 4. Leaf policy and flattening
# ---------------------------------------------------------------------------

class TestLeafPolicy:

    @pytest.mark.parametrize("url, expected", [
        ("https://x/docs/a", True),
        ("", False),
        ("#", False),
        ("#anchor", False),
        ("https://x/docs/#", False),
    ])
    def test_childless_nodes(self, url, expected):
        assert is_leaf_page(NavigationNode(id="a", title="A", url=url)) is expected

    def test_category_with_own_page_is_not_a_leaf(self):
        child = NavigationNode(id="c", title="C", url="https://x/c")
        category = NavigationNode(id="b", title="B", url="https://x/b", children=[child])
        assert not is_leaf_page(category)
        assert isinstance(category.children, tuple)

    def test_to_dict_is_nested(self):
        child = NavigationNode(id="c", title="C", path="/c", url="https://x/c")
        category = NavigationNode(id="b", title="B", children=[child])
        assert category.to_dict() == {
            "id": "b", "title": "B", "path": "", "url": "",
            "children": [{"id": "c", "title": "C", "path": "/c", "url": "https://x/c", "children": []}],
        }


class TestFlattenLeafPages:

    def test_pre_order_with_nested_category(self):
        # a, B{ c } -> [a, c]
        a = NavigationNode(id="a", title="A", path="/docs/intro", url="https://x/docs/intro")
        c = NavigationNode(id="c", title="C", path="/docs/setup", url="https://x/docs/setup")
        b = NavigationNode(id="b", title="B", path="#", url="#", children=[c])
        assert flatten_leaf_pages([a, b]) == [a, c]

    def test_sidebar_fixture(self):
        nodes = parse_sidebar_html(SIDEBAR_HTML, BASE)
        pages = flatten_leaf_pages(nodes)
        assert [p.title for p in pages] == ["Intro", "Setup", "Deploy", "Client"]

    def test_empty_tree(self):
        assert flatten_leaf_pages([]) == []

    def test_placeholder_entries_from_markup_are_skipped(self):
        html = (
            '<ul class="theme-doc-sidebar-menu">'
            '<li><a class="menu__link" href="/docs/x/#">X</a></li>'
            '<li><a class="menu__link" href="/docs/y">Y</a></li>'
            '<li><a class="menu__link" href="#">Z</a></li>'
            '</ul>'
        )
        nodes = parse_sidebar_html(html, BASE)
        assert nodes[0].url == "https://x/docs/x/#"
        assert [p.title for p in flatten_leaf_pages(nodes)] == ["Y"]


# ---------------------------------------------------------------------------
# 5. Live extraction
# ---------------------------------------------------------------------------

class TestNavigationExtractor:

    def _extract(self, renderer, url):
        async def go():
            async with renderer.session() as session:
                return await NavigationExtractor(timeout_ms=1000).extract(session, url)
        return asyncio.run(go())

    def test_extracts_tree(self, fake_renderer):
        nodes = self._extract(fake_renderer, BASE)
        assert [n.title for n in nodes] == ["Intro", "Guides", "API"]
        assert fake_renderer.navigations == [BASE]

    def test_unreachable_entry_page(self):
        with pytest.raises(NavigationError, match="did not load"):
            self._extract(FakeRenderer(FakeSite()), BASE)

    def test_page_without_sidebar(self):
        site = FakeSite()
        site.add(BASE, content="<p>hello</p>")
        with pytest.raises(NavigationError, match="No sidebar"):
            self._extract(FakeRenderer(site), BASE)
