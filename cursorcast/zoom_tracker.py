"""
Zoom Tracker Module
Sequential camera state machine producing per-frame zoom regions
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .config_manager import ZoomConfig
from .coordinates import Dimensions
from .easing import clamp, get_easing, lerp
from .interpolation import CursorTrack

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class CropRect:
    """Rectangle for crop/zoom region."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    def to_int_tuple(self) -> Tuple[int, int, int, int]:
        return (int(round(self.x)), int(round(self.y)),
                int(round(self.width)), int(round(self.height)))

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}

    @classmethod
    def full_frame(cls, video: Dimensions) -> 'CropRect':
        return cls(0.0, 0.0, float(video.width), float(video.height))


@dataclass(frozen=True)
class ZoomRegion:
    """Camera state at one instant."""
    timestamp: float
    center_x: float
    center_y: float
    crop_width: float
    crop_height: float
    scale: float = 1.0

    @property
    def center(self) -> Point:
        return (self.center_x, self.center_y)

    def crop_rect(self, video: Dimensions) -> CropRect:
        """Crop rectangle derived from the center, clamped inside the video."""
        width = clamp(self.crop_width, 1.0, video.width)
        height = clamp(self.crop_height, 1.0, video.height)
        x = clamp(self.center_x - width / 2, 0.0, video.width - width)
        y = clamp(self.center_y - height / 2, 0.0, video.height - height)
        return CropRect(x, y, width, height)

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'centerX': self.center_x,
            'centerY': self.center_y,
            'cropWidth': self.crop_width,
            'cropHeight': self.crop_height,
            'scale': self.scale,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ZoomRegion':
        return cls(
            timestamp=data['timestamp'],
            center_x=data['centerX'],
            center_y=data['centerY'],
            crop_width=data['cropWidth'],
            crop_height=data['cropHeight'],
            scale=data.get('scale', 1.0),
        )


def full_frame_region(video: Dimensions, timestamp: float = 0.0) -> ZoomRegion:
    """Region showing the whole video (no zoom)."""
    return ZoomRegion(timestamp, video.width / 2, video.height / 2,
                      float(video.width), float(video.height), 1.0)


def clamp_center(center_x: float, center_y: float, crop_width: float, crop_height: float,
                 video: Dimensions) -> Point:
    """Clamp a crop center so the crop never leaves the video."""
    return (clamp(center_x, crop_width / 2, video.width - crop_width / 2),
            clamp(center_y, crop_height / 2, video.height - crop_height / 2))


def calculate_zoom_region(x: float, y: float, video: Dimensions, level: float,
                          timestamp: float = 0.0) -> ZoomRegion:
    """
    Calculate a zoom region centered on a point.

    Args:
        x: Focus X in video pixels
        y: Focus Y in video pixels
        video: Video size
        level: Zoom factor (>= 1)
        timestamp: Region timestamp

    Returns:
        Region whose crop stays inside the video
    """
    level = max(1.0, level)
    crop_width = video.width / level
    crop_height = video.height / level
    center_x, center_y = clamp_center(x, y, crop_width, crop_height, video)
    return ZoomRegion(timestamp, center_x, center_y, crop_width, crop_height, level)


class ArcLengthPath:
    """
    Polyline parameterized by traveled distance.

    ``point_at(0.5)`` is the point halfway along the path's length, so
    motion along it has constant speed regardless of direction.
    """

    def __init__(self, points: Sequence[Point]):
        if not points:
            raise ValueError("ArcLengthPath needs at least one point")
        self._points = list(points)
        self._cumulative = [0.0]
        for (x0, y0), (x1, y1) in zip(self._points, self._points[1:]):
            self._cumulative.append(self._cumulative[-1] + math.hypot(x1 - x0, y1 - y0))

    @property
    def length(self) -> float:
        return self._cumulative[-1]

    def point_at(self, fraction: float) -> Point:
        """Point at fraction (0-1) of the total path length."""
        if self.length == 0 or fraction <= 0:
            return self._points[0]
        if fraction >= 1:
            return self._points[-1]

        distance = fraction * self.length
        for i in range(1, len(self._cumulative)):
            if self._cumulative[i] >= distance:
                segment = self._cumulative[i] - self._cumulative[i - 1]
                if segment == 0:
                    continue
                t = (distance - self._cumulative[i - 1]) / segment
                (x0, y0), (x1, y1) = self._points[i - 1], self._points[i]
                return (lerp(x0, x1, t), lerp(y0, y1, t))
        return self._points[-1]


def arc_length_lerp(start: Point, end: Point, t: float, easing: str = 'linear') -> Point:
    """Point at eased fraction t of the straight path from start to end."""
    return ArcLengthPath([start, end]).point_at(get_easing(easing)(t))


@dataclass
class ZoomTrackerState:
    """Running state carried from one frame to the next."""
    current: Optional[ZoomRegion] = None
    target: Optional[ZoomRegion] = None
    transition_start: float = 0.0
    last_timestamp: Optional[float] = None


class ZoomTracker:
    """
    Computes the zoom region for each output frame.

    The tracker carries the current region forward between calls, so
    ``step()`` must be called with strictly increasing timestamps. Use
    ``track()`` to run the whole sequential pass and get an immutable
    region list that render workers can read in any order.
    """

    def __init__(self, config: ZoomConfig, video: Dimensions):
        """
        Args:
            config: Zoom settings
            video: Video size in pixels
        """
        self._config = config
        self._video = video
        self._easing = get_easing(config.easing)
        self._state = ZoomTrackerState()

    @property
    def state(self) -> ZoomTrackerState:
        return self._state

    def reset(self):
        """Return to the initial state before a new pass."""
        self._state = ZoomTrackerState()

    def zoom_level_for_speed(self, speed: float) -> float:
        """Reduce the configured zoom while the cursor moves fast."""
        cfg = self._config
        if speed > cfg.speed_threshold:
            return max(1.0, cfg.level - (speed - cfg.speed_threshold) * cfg.speed_zoom_reduction)
        return cfg.level

    def _target_for(self, t: float, cursor_x: float, cursor_y: float, speed: float) -> ZoomRegion:
        level = self.zoom_level_for_speed(speed)
        previous = self._state.target
        if previous is not None and self._config.padding > 0:
            if math.hypot(cursor_x - previous.center_x, cursor_y - previous.center_y) < self._config.padding:
                cursor_x, cursor_y = previous.center
        return calculate_zoom_region(cursor_x, cursor_y, self._video, level, t)

    def step(self, t: float, cursor_x: float, cursor_y: float, speed: float = 0.0) -> ZoomRegion:
        """
        Advance the camera to time t.

        Args:
            t: Frame timestamp in ms (greater than the previous call's)
            cursor_x: Cursor X in video pixels
            cursor_y: Cursor Y in video pixels
            speed: Cursor speed in pixels/ms

        Returns:
            Region to show at time t
        """
        state = self._state
        if state.last_timestamp is not None and t <= state.last_timestamp:
            raise ValueError(f"ZoomTracker.step() called out of order: {t} after {state.last_timestamp}")
        state.last_timestamp = t

        if not self._config.enabled:
            state.current = full_frame_region(self._video, t)
            return state.current

        target = self._target_for(t, cursor_x, cursor_y, speed)
        state.target = target

        if state.current is None:
            state.current = target
            state.transition_start = t
            return target

        current = state.current
        progress = min(1.0, (t - state.transition_start) / self._config.transition_speed_ms)
        eased = self._easing(progress)

        if progress >= 1.0:
            state.current = target
            state.transition_start = t
            return target

        path = ArcLengthPath([current.center, target.center])
        center_x, center_y = path.point_at(eased * self._config.follow_speed)
        crop_width = lerp(current.crop_width, target.crop_width, eased)
        crop_height = lerp(current.crop_height, target.crop_height, eased)
        center_x, center_y = clamp_center(center_x, center_y, crop_width, crop_height, self._video)

        state.current = ZoomRegion(
            timestamp=t,
            center_x=center_x,
            center_y=center_y,
            crop_width=crop_width,
            crop_height=crop_height,
            scale=lerp(current.scale, target.scale, eased),
        )
        return state.current

    def track(self, cursor: CursorTrack, timestamps: Iterable[float]) -> List[ZoomRegion]:
        """
        Run the sequential pass from the initial state.

        Args:
            cursor: Cursor track (may be empty)
            timestamps: Frame timestamps in increasing order

        Returns:
            One region per timestamp
        """
        self.reset()
        regions = []
        for t in timestamps:
            pose = cursor.position_at(t)
            if pose is None:
                x, y = self._video.width / 2, self._video.height / 2
            else:
                x, y = pose.x, pose.y
            regions.append(self.step(t, x, y, cursor.speed_at(t)))
        logger.debug("Computed %d zoom regions (enabled=%s)", len(regions), self._config.enabled)
        return regions


def region_at(regions: Sequence[ZoomRegion], t: float, tolerance: float = 16.0) -> Optional[ZoomRegion]:
    """
    Zoom region for an arbitrary timestamp.

    Returns the closest region within tolerance, otherwise interpolates
    between the bracketing regions, otherwise the first or last region.
    """
    if not regions:
        return None

    closest = min(regions, key=lambda r: abs(r.timestamp - t))
    if abs(closest.timestamp - t) <= tolerance:
        return closest

    for r1, r2 in zip(regions, regions[1:]):
        if r1.timestamp <= t <= r2.timestamp:
            u = (t - r1.timestamp) / (r2.timestamp - r1.timestamp)
            return ZoomRegion(
                timestamp=t,
                center_x=lerp(r1.center_x, r2.center_x, u),
                center_y=lerp(r1.center_y, r2.center_y, u),
                crop_width=lerp(r1.crop_width, r2.crop_width, u),
                crop_height=lerp(r1.crop_height, r2.crop_height, u),
                scale=lerp(r1.scale, r2.scale, u),
            )

    if t < regions[0].timestamp:
        return regions[0]
    return regions[-1]
