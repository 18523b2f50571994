"""
Interpolation Module
Cursor pose and click pulse at arbitrary timestamps
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .cursor_shapes import CursorShape
from .easing import ease_in, ease_out, get_easing, lerp
from .models import Action, ClickEvent, CursorKeyframe

CLICK_ANIMATION_MS = 300.0
CLICK_SCALE = 0.8


@dataclass(frozen=True)
class CursorPose:
    """Interpolated cursor state."""
    x: float
    y: float
    shape: CursorShape
    size: Optional[float] = None


def _pose(keyframe: CursorKeyframe) -> CursorPose:
    return CursorPose(x=keyframe.x, y=keyframe.y, shape=keyframe.shape, size=keyframe.size)


class CursorTrack:
    """
    Keyframe sequence indexed for repeated lookups.

    Stateless after construction, so one instance can serve render
    workers in any order.
    """

    def __init__(self, keyframes: Sequence[CursorKeyframe]):
        self._keyframes: List[CursorKeyframe] = list(keyframes)
        self._timestamps = [k.timestamp for k in self._keyframes]

    def __len__(self):
        return len(self._keyframes)

    @property
    def keyframes(self) -> List[CursorKeyframe]:
        return self._keyframes

    def index_at(self, t: float) -> int:
        """Index of the last keyframe at or before t, or -1."""
        return bisect_right(self._timestamps, t) - 1

    def position_at(self, t: float) -> Optional[CursorPose]:
        """
        Cursor pose at time t.

        Position and size blend with the easing named on the earlier
        keyframe; the shape never blends.

        Returns:
            The pose, or None for an empty track
        """
        if not self._keyframes:
            return None

        index = self.index_at(t)
        if index < 0 or len(self._keyframes) == 1:
            return _pose(self._keyframes[0])
        if index >= len(self._keyframes) - 1:
            return _pose(self._keyframes[-1])

        prev = self._keyframes[index]
        next_ = self._keyframes[index + 1]
        span = next_.timestamp - prev.timestamp
        if span <= 0:
            return _pose(prev)

        u = get_easing(prev.easing)((t - prev.timestamp) / span)

        if prev.size is not None and next_.size is not None:
            size = lerp(prev.size, next_.size, u)
        else:
            size = prev.size if prev.size is not None else next_.size

        return CursorPose(
            x=lerp(prev.x, next_.x, u),
            y=lerp(prev.y, next_.y, u),
            shape=prev.shape or next_.shape,
            size=size,
        )

    def speed_at(self, t: float) -> float:
        """
        Pointer speed in pixels/ms from the two samples nearest t.

        Returns 0 before the second sample or when the samples share a
        timestamp.
        """
        index = self.index_at(t)
        if index < 1:
            return 0.0
        prev = self._keyframes[index - 1]
        curr = self._keyframes[index]
        dt = curr.timestamp - prev.timestamp
        if dt <= 0:
            return 0.0
        return ((curr.x - prev.x) ** 2 + (curr.y - prev.y) ** 2) ** 0.5 / dt


def position_at(keyframes: Sequence[CursorKeyframe], t: float) -> Optional[CursorPose]:
    """Cursor pose at time t; see CursorTrack.position_at()."""
    return CursorTrack(keyframes).position_at(t)


def click_scale_at(t: float, clicks: Iterable[ClickEvent],
                   duration_ms: float = CLICK_ANIMATION_MS,
                   min_scale: float = CLICK_SCALE) -> float:
    """
    Cursor scale pulse caused by the most recent button press.

    The scale eases out from 1.0 down to min_scale over the first half of
    the animation and eases back in to 1.0 over the second half.

    Args:
        t: Timestamp in ms
        clicks: Click events (only ``down`` events pulse)
        duration_ms: Animation length
        min_scale: Scale reached at the midpoint

    Returns:
        Scale factor, 1.0 when no animation is active
    """
    latest = None
    for click in clicks:
        if click.action != Action.DOWN:
            continue
        elapsed = t - click.timestamp
        if 0 <= elapsed <= duration_ms and (latest is None or click.timestamp > latest.timestamp):
            latest = click

    if latest is None:
        return 1.0

    progress = (t - latest.timestamp) / duration_ms
    if progress < 0.5:
        return 1.0 - (1.0 - min_scale) * ease_out(progress * 2)
    return min_scale + (1.0 - min_scale) * ease_in((progress - 0.5) * 2)
