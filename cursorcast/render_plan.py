"""
Render Plan Module
Resolves cursor, zoom and effects into one instruction set per output frame
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config_manager import CursorConfig, MouseEffectsConfig, ZoomConfig
from .coordinates import Dimensions
from .cursor_shapes import CursorShape
from .effects import EffectFrame, EffectTimeline, MoveSample, generate_all_effects
from .interpolation import CursorTrack, click_scale_at
from .models import ClickEvent, CursorKeyframe
from .zoom_tracker import CropRect, ZoomRegion, ZoomTracker

logger = logging.getLogger(__name__)


def frame_count(duration_ms: float, frame_rate: float) -> int:
    """Number of output frames: ceil(duration / frame interval)."""
    if duration_ms <= 0:
        return 0
    # Rounding keeps 1000 ms at 30 fps from becoming 30.000000000000004 frames
    return math.ceil(round(duration_ms * frame_rate / 1000.0, 6))


def frame_timestamp(frame_index: int, frame_rate: float) -> float:
    return frame_index * (1000.0 / frame_rate)


def move_samples(keyframes: Sequence[CursorKeyframe]) -> List[MoveSample]:
    """
    Telemetry positions for the trail and ring generators.

    The boundary keyframes that only extend the first and last sample to
    the edges of the video are skipped.
    """
    samples = list(keyframes)
    if len(samples) > 1 and samples[0] == samples[1].at(samples[0].timestamp):
        samples = samples[1:]
    if len(samples) > 1 and samples[-1] == samples[-2].at(samples[-1].timestamp):
        samples = samples[:-1]
    return [MoveSample(k.timestamp, k.x, k.y) for k in samples]


@dataclass(frozen=True)
class FrameRenderSpec:
    """Everything the compositor needs to draw one output frame."""
    frame_index: int
    timestamp: float
    crop_rect: CropRect
    cursor_pos: Optional[Tuple[float, float]]
    cursor_shape: CursorShape
    cursor_size: float
    active_effects: Tuple[EffectFrame, ...] = field(default_factory=tuple)
    zoom_scale: float = 1.0
    cursor_velocity: Tuple[float, float] = (0.0, 0.0)

    @property
    def has_cursor(self) -> bool:
        return self.cursor_pos is not None

    def to_dict(self) -> dict:
        return {
            'frameIndex': self.frame_index,
            'timestamp': self.timestamp,
            'cropRect': self.crop_rect.to_dict(),
            'cursorPos': list(self.cursor_pos) if self.cursor_pos is not None else None,
            'cursorShape': self.cursor_shape.value,
            'cursorSize': self.cursor_size,
            'zoomScale': self.zoom_scale,
            'cursorVelocity': list(self.cursor_velocity),
            'activeEffects': [e.to_dict() for e in self.active_effects],
        }


class RenderPlan:
    """
    Precomputed inputs for resolving frames.

    Holds the zoom region timeline from the sequential pre-pass plus the
    stateless cursor track and effect timeline. ``frame()`` is a pure
    function of its index, so frames can be resolved in any order.
    """

    def __init__(self, video: Dimensions, frame_rate: float, total_frames: int,
                 cursor: CursorTrack, clicks: Sequence[ClickEvent],
                 regions: Sequence[ZoomRegion], effects: EffectTimeline,
                 cursor_config: CursorConfig):
        self.video = video
        self.frame_rate = frame_rate
        self.total_frames = total_frames
        self.cursor = cursor
        self.clicks = tuple(clicks)
        self.regions = tuple(regions)
        self.effects = effects
        self._cursor_config = cursor_config

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.frame_rate

    def __len__(self):
        return self.total_frames

    def _velocity(self, t: float) -> Tuple[float, float]:
        if t <= 0:
            return (0.0, 0.0)
        dt = min(self.frame_interval_ms, t)
        now = self.cursor.position_at(t)
        before = self.cursor.position_at(t - dt)
        return ((now.x - before.x) / dt, (now.y - before.y) / dt)

    def frame(self, frame_index: int) -> FrameRenderSpec:
        """Resolve one frame."""
        if not 0 <= frame_index < self.total_frames:
            raise IndexError(f"frame {frame_index} outside 0..{self.total_frames - 1}")

        t = frame_timestamp(frame_index, self.frame_rate)
        region = self.regions[frame_index]
        cfg = self._cursor_config

        pose = self.cursor.position_at(t)
        if pose is None:
            cursor_pos = None
            shape = cfg.cursor_shape
            size = float(cfg.size)
            velocity = (0.0, 0.0)
        else:
            cursor_pos = (pose.x, pose.y)
            shape = pose.shape
            base_size = pose.size if pose.size is not None else cfg.size
            size = base_size * click_scale_at(t, self.clicks, cfg.click_animation_ms, cfg.click_scale)
            velocity = self._velocity(t)

        return FrameRenderSpec(
            frame_index=frame_index,
            timestamp=t,
            crop_rect=region.crop_rect(self.video),
            cursor_pos=cursor_pos,
            cursor_shape=shape,
            cursor_size=size,
            active_effects=tuple(self.effects.active_at(t, self.frame_interval_ms)),
            zoom_scale=region.scale,
            cursor_velocity=velocity,
        )

    def frames(self) -> List[FrameRenderSpec]:
        return [self.frame(i) for i in range(self.total_frames)]


class RenderPlanBuilder:
    """
    Compiles keyframes, clicks and configuration into a RenderPlan.

    The zoom tracker runs here, sequentially and from its initial state,
    before any frame is resolved.
    """

    def __init__(self, video: Dimensions, frame_rate: float,
                 cursor_config: Optional[CursorConfig] = None,
                 zoom_config: Optional[ZoomConfig] = None,
                 effects_config: Optional[MouseEffectsConfig] = None):
        self._video = video
        self._frame_rate = frame_rate
        self._cursor_config = cursor_config or CursorConfig()
        self._zoom_config = zoom_config or ZoomConfig()
        self._effects_config = effects_config or MouseEffectsConfig()

    def build(self, keyframes: Sequence[CursorKeyframe], clicks: Sequence[ClickEvent],
              duration_ms: float) -> RenderPlan:
        """
        Args:
            keyframes: Cursor keyframes in video pixels
            clicks: Click events in video pixels
            duration_ms: Video duration

        Returns:
            Plan covering ceil(duration / frame interval) frames
        """
        total = frame_count(duration_ms, self._frame_rate)
        timestamps = [frame_timestamp(i, self._frame_rate) for i in range(total)]
        cursor = CursorTrack(keyframes)

        tracker = ZoomTracker(self._zoom_config, self._video)
        regions = tracker.track(cursor, timestamps)

        effects = generate_all_effects(clicks, move_samples(keyframes), self._effects_config, self._frame_rate)

        logger.info("Render plan: %d frames at %.2f fps, %d keyframes, %d effect instances",
                    total, self._frame_rate, len(cursor), len(effects))
        return RenderPlan(self._video, self._frame_rate, total, cursor, clicks,
                          regions, effects, self._cursor_config)

    def build_frames(self, keyframes: Sequence[CursorKeyframe], clicks: Sequence[ClickEvent],
                     duration_ms: float) -> List[FrameRenderSpec]:
        """Build the plan and resolve every frame in order."""
        return self.build(keyframes, clicks, duration_ms).frames()
