"""
Cursor Shapes Module
Closed set of cursor glyphs with hotspots and asset mapping
"""

from enum import Enum
from typing import Dict, Optional, Tuple

# Glyphs are authored in a square box of this many units
GLYPH_BOX = 32


class CursorShape(str, Enum):
    """Cursor shapes reported by the telemetry helper."""
    ARROW = 'arrow'
    POINTER = 'pointer'
    HAND = 'hand'
    OPENHAND = 'openhand'
    CLOSEDHAND = 'closedhand'
    CROSSHAIR = 'crosshair'
    IBEAM = 'ibeam'
    IBEAM_VERTICAL = 'ibeamvertical'
    MOVE = 'move'
    RESIZE_LEFT = 'resizeleft'
    RESIZE_RIGHT = 'resizeright'
    RESIZE_LEFT_RIGHT = 'resizeleftright'
    RESIZE_UP = 'resizeup'
    RESIZE_DOWN = 'resizedown'
    RESIZE_UP_DOWN = 'resizeupdown'
    RESIZE = 'resize'
    COPY = 'copy'
    DRAG_COPY = 'dragcopy'
    DRAG_LINK = 'draglink'
    HELP = 'help'
    NOT_ALLOWED = 'notallowed'
    CONTEXT_MENU = 'contextmenu'
    POOF = 'poof'
    SCREENSHOT = 'screenshot'
    ZOOM_IN = 'zoomin'
    ZOOM_OUT = 'zoomout'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'CursorShape':
        """Map a raw telemetry shape string to a shape, defaulting to arrow."""
        if isinstance(value, CursorShape):
            return value
        if not value:
            return cls.ARROW
        try:
            return cls(value.lower())
        except ValueError:
            return cls.ARROW

    @property
    def hotspot(self) -> Tuple[int, int]:
        """Click point within the GLYPH_BOX square."""
        return HOTSPOTS[self]

    @property
    def asset_name(self) -> str:
        """File name of this shape's glyph in an assets directory."""
        return ASSET_FILES[self]

    @property
    def family(self) -> 'GlyphFamily':
        """Built-in drawing used when no assets directory is configured."""
        return GLYPH_FAMILIES[self]


class GlyphFamily(Enum):
    """Built-in glyph drawings."""
    ARROW = 'arrow'
    POINTER = 'pointer'
    HAND = 'hand'
    CROSSHAIR = 'crosshair'
    IBEAM = 'ibeam'


_CENTER = (16, 16)

HOTSPOTS: Dict[CursorShape, Tuple[int, int]] = {
    CursorShape.ARROW: (10, 7),
    CursorShape.POINTER: (9, 8),
    CursorShape.HAND: (10, 10),
    CursorShape.OPENHAND: (10, 10),
    CursorShape.CLOSEDHAND: (10, 10),
    CursorShape.CROSSHAIR: _CENTER,
    CursorShape.IBEAM: (13, 8),
    CursorShape.IBEAM_VERTICAL: (8, 16),
    CursorShape.MOVE: _CENTER,
    CursorShape.RESIZE_LEFT: _CENTER,
    CursorShape.RESIZE_RIGHT: _CENTER,
    CursorShape.RESIZE_LEFT_RIGHT: _CENTER,
    CursorShape.RESIZE_UP: _CENTER,
    CursorShape.RESIZE_DOWN: _CENTER,
    CursorShape.RESIZE_UP_DOWN: _CENTER,
    CursorShape.RESIZE: _CENTER,
    CursorShape.COPY: (10, 7),
    CursorShape.DRAG_COPY: (10, 7),
    CursorShape.DRAG_LINK: (10, 7),
    CursorShape.HELP: (10, 7),
    CursorShape.NOT_ALLOWED: _CENTER,
    CursorShape.CONTEXT_MENU: (10, 7),
    CursorShape.POOF: _CENTER,
    CursorShape.SCREENSHOT: _CENTER,
    CursorShape.ZOOM_IN: (10, 10),
    CursorShape.ZOOM_OUT: (10, 10),
}

ASSET_FILES: Dict[CursorShape, str] = {
    CursorShape.ARROW: 'cursor.png',
    CursorShape.POINTER: 'pointinghand.png',
    CursorShape.HAND: 'openhand.png',
    CursorShape.OPENHAND: 'openhand.png',
    CursorShape.CLOSEDHAND: 'closedhand.png',
    CursorShape.CROSSHAIR: 'crosshair.png',
    CursorShape.IBEAM: 'ibeam.png',
    CursorShape.IBEAM_VERTICAL: 'ibeamvertical.png',
    CursorShape.MOVE: 'move.png',
    CursorShape.RESIZE_LEFT: 'resizeleft.png',
    CursorShape.RESIZE_RIGHT: 'resizeright.png',
    CursorShape.RESIZE_LEFT_RIGHT: 'resizeleftright.png',
    CursorShape.RESIZE_UP: 'resizeup.png',
    CursorShape.RESIZE_DOWN: 'resizedown.png',
    CursorShape.RESIZE_UP_DOWN: 'resizeupdown.png',
    CursorShape.RESIZE: 'resizenortheastsouthwest.png',
    CursorShape.COPY: 'copy.png',
    CursorShape.DRAG_COPY: 'copy.png',
    CursorShape.DRAG_LINK: 'draglink.png',
    CursorShape.HELP: 'help.png',
    CursorShape.NOT_ALLOWED: 'notallowed.png',
    CursorShape.CONTEXT_MENU: 'contextualmenu.png',
    CursorShape.POOF: 'poof.png',
    CursorShape.SCREENSHOT: 'screenshotselection.png',
    CursorShape.ZOOM_IN: 'zoomin.png',
    CursorShape.ZOOM_OUT: 'zoomout.png',
}

# Shapes clicked at the glyph centre draw as a crosshair
GLYPH_FAMILIES: Dict[CursorShape, GlyphFamily] = {
    shape: GlyphFamily.CROSSHAIR if HOTSPOTS[shape] == _CENTER else GlyphFamily.ARROW
    for shape in CursorShape
}
GLYPH_FAMILIES.update({
    CursorShape.POINTER: GlyphFamily.POINTER,
    CursorShape.HAND: GlyphFamily.HAND,
    CursorShape.OPENHAND: GlyphFamily.HAND,
    CursorShape.CLOSEDHAND: GlyphFamily.HAND,
    CursorShape.CROSSHAIR: GlyphFamily.CROSSHAIR,
    CursorShape.MOVE: GlyphFamily.CROSSHAIR,
    CursorShape.SCREENSHOT: GlyphFamily.CROSSHAIR,
    CursorShape.IBEAM: GlyphFamily.IBEAM,
    CursorShape.IBEAM_VERTICAL: GlyphFamily.IBEAM,
})
