"""
Folio - content pipeline for a personal blog and project portfolio.

Folio reads Markdown posts and projects with YAML front matter, decides
which of them are published, aggregates tags, sorts and paginates
listings, and renders Open Graph preview images for every entry that
does not bring its own.
"""

__version__ = "1.0.0"
__author__ = "Georgios Piskas"

from .core import Folio
from .og_image import OgImageRenderer, OgKind
from .fonts import FontBook

__all__ = ['Folio', 'OgImageRenderer', 'OgKind', 'FontBook']
