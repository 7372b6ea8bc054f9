"""
Open Graph preview images for posts and projects.

Rendering happens in two steps. A layout template turns a publication into
a ``Canvas``, a small declarative tree of boxes and text blocks sized to
the 1200x630 OG frame. The renderer then rasterizes that tree with Pillow,
using the shared ``FontBook``, and encodes it as PNG.
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import urlparse

from PIL import Image, ImageDraw

from .fonts import BOLD, REGULAR, FontBook
from .settings import SiteInfo

WIDTH, HEIGHT = 1200, 630
PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

# Light theme of the site
BACKGROUND = '#fefbfb'
FOREGROUND = '#282728'
ACCENT = '#006cac'
CARD_SHADOW = '#ecebeb'
ELLIPSIS = '…'


class OgImageError(Exception):
    """A single OG image could not be produced."""


class OgKind(Enum):
    POST = 'post'
    PROJECT = 'project'


@dataclass(frozen=True)
class Box:
    x: int
    y: int
    width: int
    height: int
    fill: Optional[str] = None
    outline: Optional[str] = None
    border: int = 0
    radius: int = 0


@dataclass(frozen=True)
class TextBlock:
    x: int
    y: int
    width: int
    text: str
    size: int
    weight: int = REGULAR
    color: str = FOREGROUND
    max_lines: int = 1
    line_height: float = 1.25
    align: str = 'left'


@dataclass(frozen=True)
class Canvas:
    width: int
    height: int
    background: str
    nodes: Tuple[Union[Box, TextBlock], ...]


# Card frame shared by both templates
CARD_X, CARD_Y = 72, 63
CARD_W, CARD_H = 1056, 504
PADDING = 40
INNER_X = CARD_X + PADDING
INNER_W = CARD_W - 2 * PADDING
FOOTER_Y = CARD_Y + CARD_H - PADDING - 36


def _frame() -> List[Union[Box, TextBlock]]:
    return [
        Box(CARD_X + 14, CARD_Y - 14, CARD_W, CARD_H, fill=CARD_SHADOW,
            outline=FOREGROUND, border=4, radius=4),
        Box(CARD_X, CARD_Y, CARD_W, CARD_H, fill=BACKGROUND,
            outline=FOREGROUND, border=4, radius=4),
    ]


def _footer(left: str, site: SiteInfo) -> List[TextBlock]:
    half = INNER_W // 2
    return [
        TextBlock(INNER_X, FOOTER_Y, half, left, 28),
        TextBlock(INNER_X + half, FOOTER_Y, INNER_W - half, site.title, 28,
                  weight=BOLD, align='right'),
    ]


def post_layout(post, site: SiteInfo) -> Canvas:
    nodes = _frame()
    nodes.append(TextBlock(INNER_X, CARD_Y + PADDING + 8, INNER_W, post.title, 72,
                           weight=BOLD, max_lines=3, line_height=1.15))
    nodes.extend(_footer(f"by {site.author}", site))
    return Canvas(WIDTH, HEIGHT, BACKGROUND, tuple(nodes))


def project_layout(project, site: SiteInfo) -> Canvas:
    nodes = _frame()
    top = CARD_Y + PADDING
    nodes.append(TextBlock(INNER_X, top, INNER_W, 'Project', 28, weight=BOLD, color=ACCENT))
    nodes.append(TextBlock(INNER_X, top + 52, INNER_W, project.title, 64,
                           weight=BOLD, max_lines=2, line_height=1.15))
    if project.description:
        nodes.append(TextBlock(INNER_X, top + 210, INNER_W, project.description, 30,
                               max_lines=2, line_height=1.3))
    link = getattr(project, 'link', None)
    if link:
        left = urlparse(link).netloc or link
    else:
        left = f"by {site.author}"
    nodes.extend(_footer(left, site))
    return Canvas(WIDTH, HEIGHT, BACKGROUND, tuple(nodes))


TEMPLATES: Dict[OgKind, Callable[..., Canvas]] = {
    OgKind.POST: post_layout,
    OgKind.PROJECT: project_layout,
}


def _break_word(word: str, fits: Callable[[str], bool]) -> List[str]:
    pieces, current = [], ''
    for char in word:
        if current and not fits(current + char):
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, font, max_width: int, max_lines: int) -> List[str]:
    """
    Greedy word wrap to ``max_width`` pixels.

    Words wider than a line are broken between characters. When the text
    needs more than ``max_lines`` lines the last kept line ends with an
    ellipsis.
    """
    def fits(candidate):
        return font.getlength(candidate) <= max_width

    lines: List[str] = []
    current = ''
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if fits(candidate):
            current = candidate
            continue
        if current:
            lines.append(current)
        pieces = _break_word(word, fits) if not fits(word) else [word]
        lines.extend(pieces[:-1])
        current = pieces[-1]
    if current:
        lines.append(current)

    if len(lines) > max_lines:
        lines = lines[:max_lines]
        last = lines[-1]
        while last and not fits(last + ELLIPSIS):
            last = last[:-1]
        lines[-1] = last.rstrip() + ELLIPSIS
    return lines


class OgImageRenderer:
    """Render OG images from publications. Holds no per-image state."""

    def __init__(self, fonts: FontBook, site: SiteInfo):
        self.fonts = fonts
        self.site = site
        self.logger = logging.getLogger('Folio.OgImageRenderer')

    def layout(self, post, kind: Union[OgKind, str]) -> Canvas:
        return TEMPLATES[OgKind(kind)](post, self.site)

    def rasterize(self, canvas: Canvas) -> Image.Image:
        image = Image.new('RGB', (canvas.width, canvas.height), canvas.background)
        draw = ImageDraw.Draw(image)
        for node in canvas.nodes:
            if isinstance(node, Box):
                draw.rounded_rectangle(
                    [node.x, node.y, node.x + node.width - 1, node.y + node.height - 1],
                    radius=node.radius, fill=node.fill, outline=node.outline, width=node.border,
                )
            elif isinstance(node, TextBlock):
                self._draw_text(draw, node)
            else:
                raise TypeError(f"Unknown layout node: {node!r}")
        return image

    def _draw_text(self, draw: ImageDraw.ImageDraw, node: TextBlock):
        font = self.fonts.truetype(node.weight, node.size)
        y = node.y
        for line in wrap_text(node.text, font, node.width, node.max_lines):
            x = node.x
            if node.align == 'right':
                x = node.x + node.width - font.getlength(line)
            draw.text((x, y), line, font=font, fill=node.color)
            y += int(node.size * node.line_height)

    def render(self, post, kind: Union[OgKind, str] = OgKind.POST) -> bytes:
        """
        Render one publication to PNG bytes.

        Raises:
            OgImageError: the layout could not be built, drawn or encoded
        """
        try:
            canvas = self.layout(post, kind)
            image = self.rasterize(canvas)
            buffer = io.BytesIO()
            image.save(buffer, 'PNG')
        except (OSError, ValueError, TypeError, AttributeError, KeyError) as e:
            raise OgImageError(f"Failed to render OG image for '{post.title}': {e}") from e
        self.logger.debug(f"Rendered OG image for '{post.title}' ({OgKind(kind).value})")
        return buffer.getvalue()
