"""
Coordinate Transform Module
Maps logical screen points into output-video pixel space
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .easing import clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dimensions:
    """Width and height of a screen, region or video."""
    width: float
    height: float

    def to_dict(self) -> dict:
        return {'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: dict) -> 'Dimensions':
        return cls(width=data['width'], height=data['height'])


@dataclass(frozen=True)
class RecordingRegion:
    """Sub-rectangle of the screen that was recorded, in logical points."""
    x: float
    y: float
    width: float
    height: float

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: dict) -> 'RecordingRegion':
        return cls(x=data['x'], y=data['y'], width=data['width'], height=data['height'])


def scale_factors(screen: Dimensions, video: Dimensions,
                  region: Optional[RecordingRegion] = None) -> Tuple[float, float]:
    """
    Calculate the logical-to-video scale factors.

    When a region was recorded the video covers only that region, so the
    region size is the reference. A full-screen recording on a Retina
    display typically yields (2.0, 2.0).
    """
    reference = region.dimensions if region is not None else screen
    if reference.width <= 0 or reference.height <= 0:
        return (1.0, 1.0)
    return (video.width / reference.width, video.height / reference.height)


def to_video_space(screen_x: float, screen_y: float,
                   screen: Dimensions, video: Dimensions,
                   region: Optional[RecordingRegion] = None) -> Tuple[float, float]:
    """
    Transform a logical screen coordinate into video pixel coordinates.

    Handles:
    - Recording region offset
    - Retina/HiDPI scaling
    - Clamping into the video frame

    Args:
        screen_x: X in logical screen points
        screen_y: Y in logical screen points
        screen: Logical screen size
        video: Video size in pixels
        region: Recorded sub-region, if any

    Returns:
        Tuple of (x, y) in video pixels, inside [0, video]
    """
    x = screen_x
    y = screen_y
    if region is not None:
        x -= region.x
        y -= region.y

    scale_x, scale_y = scale_factors(screen, video, region)
    x *= scale_x
    y *= scale_y

    return (clamp(x, 0.0, video.width), clamp(y, 0.0, video.height))


class CoordinateTransform:
    """
    Screen-to-video transform bound to one recording's geometry.

    The keyframe builder and metadata exporter take an instance of this
    class rather than deriving scale factors themselves.
    """

    def __init__(self, screen: Dimensions, video: Dimensions,
                 region: Optional[RecordingRegion] = None):
        self.screen = screen
        self.video = video
        self.region = region
        self.scale_x, self.scale_y = scale_factors(screen, video, region)
        if self.scale_x != 1.0 or self.scale_y != 1.0:
            logger.debug("Coordinate scale %.3fx%.3f (screen %sx%s, video %sx%s, region %s)",
                         self.scale_x, self.scale_y, screen.width, screen.height,
                         video.width, video.height, region)

    @classmethod
    def identity(cls, video: Dimensions) -> 'CoordinateTransform':
        """Transform for telemetry already expressed in video pixels."""
        return cls(screen=video, video=video)

    def __call__(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        return to_video_space(screen_x, screen_y, self.screen, self.video, self.region)

    def __repr__(self):
        return (f"CoordinateTransform(screen={self.screen.width}x{self.screen.height}, "
                f"video={self.video.width}x{self.video.height}, "
                f"scale={self.scale_x:.2f}x{self.scale_y:.2f})")
