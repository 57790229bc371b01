"""
Resource Resolution
===================
Turns user-supplied locations into something the browser or filesystem can use.

- ``resolve_browser_url`` — cover image argument -> URL the renderer can load
- ``resolve_output_path`` — ``--pdf-path`` argument -> absolute ``.pdf`` path
- ``load_cover_image``    — fetch a cover through a ``PageSession``
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .errors import OutputPathError, ResourceResolutionError
from .models import CoverImage
from .renderer import PageSession

logger = logging.getLogger(__name__)


def resolve_browser_url(value: str, *, cwd: Optional[str] = None) -> str:
    """Resolve *value* to an ``http(s)://`` or ``file:///`` URL.

    Accepts absolute web URLs, ``file:///`` URLs, ``classpath:<relative>``,
    ``file:<path>`` and plain filesystem paths (relative ones against *cwd*).
    Raises ``ResourceResolutionError`` when a local file does not exist.
    """
    if not value:
        raise ResourceResolutionError("empty resource location")

    if value.startswith(('http://', 'https://')):
        return value

    base = Path(cwd or os.getcwd())

    if value.startswith('file:///'):
        local = Path(url2pathname(unquote(urlparse(value).path)))
        if not local.exists():
            raise ResourceResolutionError(f"File not found: {local} (from URL: {value})")
        return value

    if value.startswith('classpath:'):
        local = base / value[len('classpath:'):]
    elif value.startswith('file:'):
        local = base / value[len('file:'):]
    else:
        local = base / value

    local = local.resolve()
    if not local.exists():
        raise ResourceResolutionError(
            f"Local file not found at resolved path: {local} (from input: {value})"
        )
    logger.debug(f"[RESOLVE] \"{value}\" -> {local}")
    return local.as_uri()


def resolve_output_path(value: str, *, cwd: Optional[str] = None) -> str:
    """Absolute output path ending in ``.pdf``, with its directory created.

    Raises ``OutputPathError`` when the parent directory cannot be created.
    """
    if not value:
        raise OutputPathError("no output path given")

    if not value.lower().endswith('.pdf'):
        logger.warning(f"[CONFIG] --pdf-path \"{value}\" does not end with .pdf; appending it")
        value += '.pdf'

    path = Path(value).expanduser()
    if not path.is_absolute():
        path = Path(cwd or os.getcwd()) / path

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputPathError(f"Cannot create output directory {path.parent}: {e}") from e
    return str(path)


async def load_cover_image(session: PageSession, value: str) -> Optional[CoverImage]:
    """Fetch the cover image, or return ``None`` (with a warning) on any failure."""
    try:
        url = resolve_browser_url(value)
    except ResourceResolutionError as e:
        logger.warning(f"[COVER] Could not resolve cover image \"{value}\": {e}. Skipping cover page.")
        return None

    logger.info(f"[COVER] Fetching cover image {url}")
    try:
        resource = await session.fetch_resource(url)
    except Exception as e:
        logger.warning(f"[COVER] Could not fetch cover image {url}: {e}. Skipping cover page.")
        return None

    if not resource.body or not resource.mime_type:
        logger.warning(f"[COVER] Cover image {url} returned no data. Skipping cover page.")
        return None

    mime_type = resource.mime_type.split(';')[0].strip()
    logger.info(f"[COVER] Cover image loaded ({len(resource.body):,} bytes, {mime_type})")
    return CoverImage(data=resource.body, mime_type=mime_type)
