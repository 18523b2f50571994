"""
Display Manager Module
Display detection for logical screen dimensions
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from screeninfo import ScreenInfoError, get_monitors

from .coordinates import Dimensions

logger = logging.getLogger(__name__)


@dataclass
class DisplayInfo:
    """Information about a display/monitor."""

    id: str = ""
    name: str = ""

    # Position (top-left corner in virtual screen coordinates)
    x: int = 0
    y: int = 0

    # Size in logical pixels (points on macOS)
    width: int = 0
    height: int = 0

    is_primary: bool = False

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    def __repr__(self):
        return (f"DisplayInfo(name='{self.name}', "
                f"pos=({self.x}, {self.y}), "
                f"size={self.width}x{self.height})")


class DisplayManager:
    """
    Enumerates connected displays with screeninfo.

    Used to fill in the logical screen size when telemetry comes without
    one. Results are cached until ``refresh()``.
    """

    def __init__(self):
        self._displays: List[DisplayInfo] = []
        self._cached = False

    def refresh(self):
        """Refresh display information."""
        self._displays = self._detect_displays()
        self._cached = True

    def _detect_displays(self) -> List[DisplayInfo]:
        try:
            monitors = get_monitors()
        except ScreenInfoError as e:
            logger.warning("Display detection failed: %s", e)
            return []

        displays = []
        for i, mon in enumerate(monitors):
            displays.append(DisplayInfo(
                id=str(i),
                name=mon.name or f"Display {i + 1}",
                x=mon.x,
                y=mon.y,
                width=mon.width,
                height=mon.height,
                is_primary=bool(mon.is_primary) if mon.is_primary is not None else i == 0,
            ))
        logger.debug("Detected displays: %s", displays)
        return displays

    @property
    def displays(self) -> List[DisplayInfo]:
        """Get list of all displays."""
        if not self._cached:
            self.refresh()
        return self._displays

    @property
    def primary_display(self) -> Optional[DisplayInfo]:
        """Get the primary display."""
        for display in self.displays:
            if display.is_primary:
                return display
        return self.displays[0] if self.displays else None

    def screen_dimensions(self) -> Optional[Dimensions]:
        """Logical size of the primary display, or None when no display is found."""
        display = self.primary_display
        return display.dimensions if display is not None else None
