"""
Font data shared by every OG image render.

A ``FontBook`` is built once when the rendering subsystem starts, either by
downloading the font files or by reading local copies, and is only read
afterwards. Renderers receive it by reference.
"""

import io
import logging
from typing import Dict, Optional

from PIL import ImageFont

from .url_validator import SafeRequestor

FONT_FAMILY = 'IBM Plex Mono'
REGULAR = 400
BOLD = 600

DEFAULT_FONT_URLS = {
    REGULAR: 'https://www.1001fonts.com/download/font/ibm-plex-mono.regular.ttf',
    BOLD: 'https://www.1001fonts.com/download/font/ibm-plex-mono.bold.ttf',
}


class FontFetchError(RuntimeError):
    """The font data could not be loaded; no OG image can be rendered."""


class FontBook:
    """Read-only collection of font files of one family, keyed by weight."""

    def __init__(self, fonts: Dict[int, bytes], family: str = FONT_FAMILY):
        if not fonts:
            raise ValueError("A FontBook needs at least one font weight")
        self.family = family
        self._fonts = dict(fonts)

    @property
    def weights(self):
        return sorted(self._fonts)

    def data(self, weight: int) -> bytes:
        return self._fonts[self._nearest(weight)]

    def truetype(self, weight: int, size: int) -> ImageFont.FreeTypeFont:
        """Pillow font for the closest loaded weight at ``size`` pixels."""
        return ImageFont.truetype(io.BytesIO(self.data(weight)), size)

    def _nearest(self, weight: int) -> int:
        return min(self._fonts, key=lambda w: (abs(w - weight), w))

    @classmethod
    def fetch(cls, requestor: SafeRequestor, urls: Optional[Dict[int, str]] = None,
              family: str = FONT_FAMILY) -> 'FontBook':
        """
        Download every weight. Any failure aborts the whole font book.

        Raises:
            FontFetchError: a URL was rejected, the request failed or the
                body was empty
        """
        logger = logging.getLogger('Folio.FontBook')
        fonts = {}
        for weight, url in sorted((urls or DEFAULT_FONT_URLS).items()):
            success, result = requestor.safe_font_get(url)
            if not success:
                raise FontFetchError(f"Failed to fetch {family} {weight} from {url}: {result}")
            if not result.content:
                raise FontFetchError(f"Empty font file for {family} {weight} from {url}")
            fonts[weight] = result.content
            logger.debug(f"Fetched {family} {weight} ({len(result.content)} bytes)")
        return cls(fonts, family)

    @classmethod
    def from_files(cls, paths: Dict[int, str], family: str = FONT_FAMILY) -> 'FontBook':
        """Load font files from disk, for offline builds."""
        fonts = {}
        for weight, path in paths.items():
            try:
                with open(path, 'rb') as f:
                    fonts[weight] = f.read()
            except (IOError, OSError) as e:
                raise FontFetchError(f"Failed to read font file {path}: {e}") from e
        return cls(fonts, family)
