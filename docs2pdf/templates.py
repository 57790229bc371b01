"""
HTML Templates
==============
Cover page and table-of-contents blocks for the merged document.
"""

from __future__ import annotations

import base64
from html import escape
from typing import List

from .models import CoverImage, NavigationNode, PaperFormat

TOC_CSS = """
.docs2pdf-toc {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", sans-serif;
    color: #2e353b;
    line-height: 1.5;
    padding: 20px;
    box-sizing: border-box;
    max-width: 100%;
}
.docs2pdf-toc h1.toc-title {
    font-size: 2em;
    font-weight: 700;
    margin-bottom: 25px;
    padding-bottom: 12px;
    border-bottom: 1px solid #eee;
}
.docs2pdf-toc ul {
    list-style: none;
    margin: 0;
    padding: 0;
}
.docs2pdf-toc li {
    margin-bottom: 0.4rem;
    line-height: 1.4;
    font-size: 1rem;
}
.docs2pdf-toc li a {
    text-decoration: none;
    padding: 0.1rem 0.2rem;
}
.docs2pdf-toc li.toc-directory > a {
    color: #2e353b;
    font-weight: 600;
    display: inline-block;
    padding-left: 0;
}
.docs2pdf-toc li.toc-directory::before {
    content: '\\27A4  ';
    color: #999;
    font-size: 0.7em;
    margin-right: 0.4rem;
    display: inline-block;
    width: 0.8rem;
}
.docs2pdf-toc li.toc-document > a {
    color: #25c2a0;
    display: block;
    padding-left: 1.2rem;
}
"""


def render_toc_html(nodes: List[NavigationNode], title: str) -> str:
    """Table of contents: one nested entry per node, linking to its anchor."""
    heading = f'<h1 class="toc-title">{escape(title)}</h1>'
    if not nodes:
        return (
            '<div class="docs2pdf-toc" style="page-break-after: always;">'
            f'<style>{TOC_CSS}</style>{heading}'
            '<p>No table of contents available.</p>'
            '</div>'
        )
    return (
        '<div class="docs2pdf-toc" style="page-break-after: always;">'
        f'<style>{TOC_CSS}</style>{heading}{_render_toc_items(nodes, 0)}'
        '</div>'
    )


def _render_toc_items(nodes: List[NavigationNode], level: int) -> str:
    parts = ['<ul>']
    for node in nodes:
        css_class = 'toc-directory' if node.children else 'toc-document'
        parts.append(
            f'<li class="{css_class}" style="padding-left: {level * 0.8:g}rem;">'
            f'<a href="#{escape(node.id)}">{escape(node.title)}</a>'
        )
        if node.children:
            parts.append(_render_toc_items(list(node.children), level + 1))
        parts.append('</li>')
    parts.append('</ul>')
    return ''.join(parts)


def render_cover_html(cover: CoverImage, paper: PaperFormat, alt_text: str = "Cover Image") -> str:
    """Full-page cover holding the image, centred, with a page break after it."""
    data = base64.b64encode(cover.data).decode("ascii")
    data_url = f"data:{cover.mime_type};base64,{data}"
    return (
        f'<div class="docs2pdf-cover" style="width: {paper.width_mm:g}mm; height: {paper.height_mm:g}mm; '
        'display: flex; justify-content: center; align-items: center; '
        'background-color: #ffffff; overflow: hidden; margin: 0; padding: 0; '
        'box-sizing: border-box; page-break-after: always;">'
        f'<img src="{data_url}" alt="{escape(alt_text)}" '
        'style="max-width: 100%; max-height: 100%; object-fit: contain; display: block;"/>'
        '</div>'
    )


HEADER_TEMPLATE = '<div style="font-size: 10px; width: 100%; text-align: center; margin: 0; padding: 0;"></div>'

FOOTER_TEMPLATE = (
    '<div style="font-size: 10px; width: 100%; text-align: center; margin: 0; padding: 0;">'
    '<span class="pageNumber"></span> / <span class="totalPages"></span>'
    '</div>'
)


def page_margin_css(margin_mm: float) -> str:
    return f"@page {{ margin: {margin_mm:g}mm !important; }}"


COVER_PAGE_CSS = "@page:first { margin: 0 !important; padding: 0 !important; }"
