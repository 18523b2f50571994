"""
Cursor Glyph Module
Loads or draws cursor images and shares them across render workers
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw

from .cursor_shapes import GLYPH_BOX, CursorShape, GlyphFamily
from .errors import CursorAssetError

logger = logging.getLogger(__name__)

# Built-in glyphs are drawn at this multiple of GLYPH_BOX, then downscaled
_SUPERSAMPLE = 4
_OUTLINE = (255, 255, 255, 255)


def _scaled(points, s):
    return [(x * s, y * s) for x, y in points]


def _draw_arrow(draw: ImageDraw.ImageDraw, fill, s: int):
    outline = [(10, 7), (10, 27), (15, 22), (19, 30), (22, 29), (18, 21), (25, 21)]
    draw.polygon(_scaled(outline, s), fill=fill, outline=_OUTLINE, width=s)


def _draw_pointer(draw: ImageDraw.ImageDraw, fill, s: int):
    # Index finger pointing up with its tip at the hotspot
    draw.rounded_rectangle([7 * s, 7 * s, 12 * s, 20 * s], radius=2 * s,
                           fill=fill, outline=_OUTLINE, width=s)
    draw.rounded_rectangle([7 * s, 16 * s, 22 * s, 29 * s], radius=4 * s,
                           fill=fill, outline=_OUTLINE, width=s)


def _draw_hand(draw: ImageDraw.ImageDraw, fill, s: int):
    for left in (6, 11, 16, 21):
        draw.rounded_rectangle([left * s, 6 * s, (left + 4) * s, 18 * s], radius=2 * s,
                               fill=fill, outline=_OUTLINE, width=s)
    draw.rounded_rectangle([6 * s, 13 * s, 25 * s, 28 * s], radius=5 * s,
                           fill=fill, outline=_OUTLINE, width=s)


def _draw_crosshair(draw: ImageDraw.ImageDraw, fill, s: int):
    c = 16 * s
    for a, b in (((16, 3), (16, 12)), ((16, 20), (16, 29)), ((3, 16), (12, 16)), ((20, 16), (29, 16))):
        draw.line(_scaled([a, b], s), fill=_OUTLINE, width=4 * s)
        draw.line(_scaled([a, b], s), fill=fill, width=2 * s)
    r = 2 * s
    draw.ellipse([c - r, c - r, c + r, c + r], fill=fill, outline=_OUTLINE, width=s // 2 or 1)


def _draw_ibeam(draw: ImageDraw.ImageDraw, fill, s: int):
    for a, b in (((13, 4), (13, 28)), ((9, 4), (17, 4)), ((9, 28), (17, 28))):
        draw.line(_scaled([a, b], s), fill=_OUTLINE, width=4 * s)
        draw.line(_scaled([a, b], s), fill=fill, width=2 * s)


_DRAWERS = {
    GlyphFamily.ARROW: _draw_arrow,
    GlyphFamily.POINTER: _draw_pointer,
    GlyphFamily.HAND: _draw_hand,
    GlyphFamily.CROSSHAIR: _draw_crosshair,
    GlyphFamily.IBEAM: _draw_ibeam,
}


def draw_glyph(family: GlyphFamily, color: str = '#000000') -> Image.Image:
    """Draw a built-in glyph on a transparent GLYPH_BOX-proportioned canvas."""
    s = _SUPERSAMPLE
    image = Image.new('RGBA', (GLYPH_BOX * s, GLYPH_BOX * s), (0, 0, 0, 0))
    fill = ImageColor.getcolor(color, 'RGBA')
    _DRAWERS[family](ImageDraw.Draw(image), fill, s)
    return image


class GlyphLibrary:
    """
    Cursor images keyed by shape and pixel size.

    Glyphs come from PNG files in ``assets_dir`` when one is configured,
    otherwise they are drawn. Returned images are shared between worker
    threads and must not be modified.
    """

    def __init__(self, assets_dir: Optional[str] = None, color: str = '#000000'):
        """
        Args:
            assets_dir: Directory holding one PNG per shape (see CursorShape.asset_name)
            color: Fill color for drawn glyphs
        """
        self._assets_dir = Path(assets_dir) if assets_dir else None
        self._color = color
        self._base: Dict[CursorShape, Image.Image] = {}
        self._sized: Dict[Tuple[CursorShape, int], Image.Image] = {}
        self._lock = threading.Lock()

    def _load_base(self, shape: CursorShape) -> Image.Image:
        if self._assets_dir is None:
            return draw_glyph(shape.family, self._color)

        path = self._assets_dir / shape.asset_name
        if not path.is_file():
            raise CursorAssetError(f"No cursor glyph for shape '{shape.value}': {path} not found")
        with Image.open(path) as im:
            logger.debug("Loaded cursor glyph %s for %s", path, shape.value)
            return im.convert('RGBA')

    def base(self, shape: CursorShape) -> Image.Image:
        """Full-resolution glyph for a shape."""
        with self._lock:
            if shape not in self._base:
                self._base[shape] = self._load_base(shape)
            return self._base[shape]

    def prepare(self, shapes: Iterable[CursorShape]):
        """
        Load every shape a run needs before rendering starts.

        Raises:
            CursorAssetError: If any glyph is missing
        """
        for shape in set(shapes):
            self.base(shape)

    def glyph(self, shape: CursorShape, size: int) -> Image.Image:
        """Glyph resized to size x size pixels."""
        size = max(1, int(size))
        key = (shape, size)
        with self._lock:
            cached = self._sized.get(key)
        if cached is not None:
            return cached

        image = self.base(shape).resize((size, size), Image.LANCZOS)
        with self._lock:
            return self._sized.setdefault(key, image)

    @staticmethod
    def hotspot(shape: CursorShape, size: float) -> Tuple[float, float]:
        """Hotspot offset in pixels for a glyph drawn at size."""
        hx, hy = shape.hotspot
        return (hx * size / GLYPH_BOX, hy * size / GLYPH_BOX)
