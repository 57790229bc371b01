"""
Error Types
===========
Fatal errors raised by the conversion pipeline.

Only subclasses of ``Docs2PdfError`` ever reach the CLI; page-level
problems are recorded as ``models.HarvestFailure`` and never raised past
the harvester.
"""

from __future__ import annotations


class Docs2PdfError(Exception):
    """Base class for errors that abort a conversion run."""


class RendererLaunchError(Docs2PdfError):
    """The headless browser could not be started."""


class NavigationError(Docs2PdfError):
    """The entry page could not be loaded or has no navigation tree."""


class OutputPathError(Docs2PdfError):
    """The output location could not be prepared."""


class ResourceResolutionError(Docs2PdfError):
    """A cover image path or URL could not be resolved.

    ``resources.load_cover_image`` catches this and the run continues
    without a cover page.
    """
