"""
Keyframe Builder Module
Turns raw pointer telemetry into cursor keyframes and click events
"""

import logging
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .cursor_shapes import CursorShape
from .easing import Easing, lerp
from .models import Action, ClickEvent, CursorKeyframe, RawEvent

logger = logging.getLogger(__name__)

# Look-ahead window (ms) used to decide whether a shape change is sustained
SHAPE_LOOKAHEAD_MS = 100.0

Transform = Callable[[float, float], Tuple[float, float]]


def _identity(x: float, y: float) -> Tuple[float, float]:
    return (x, y)


def stabilize_shapes(keyframes: Sequence[CursorKeyframe],
                     lookahead_ms: float = SHAPE_LOOKAHEAD_MS) -> List[CursorKeyframe]:
    """
    Suppress cursor shapes that flicker for less than the look-ahead window.

    Walks the keyframes once. The committed shape only changes at a sample
    whose shape differs from it when no sample within ``lookahead_ms``
    reverts to the committed shape; the last shape seen in that window is
    adopted. Committed samples are never revisited.

    Args:
        keyframes: Keyframes sorted by timestamp
        lookahead_ms: Window a new shape must survive

    Returns:
        New keyframe list with stabilized shapes
    """
    if not keyframes:
        return []

    current = keyframes[0].shape
    result = [keyframes[0]]

    for i in range(1, len(keyframes)):
        keyframe = keyframes[i]
        if keyframe.shape != current:
            window_end = keyframe.timestamp + lookahead_ms
            candidate = keyframe.shape
            reverted = False
            for future in keyframes[i + 1:]:
                if future.timestamp > window_end:
                    break
                if future.shape == current:
                    reverted = True
                    break
                candidate = future.shape
            if not reverted:
                current = candidate
        result.append(keyframe if keyframe.shape == current else replace(keyframe, shape=current))

    return result


def smooth_positions(keyframes: Sequence[CursorKeyframe], smoothing: float) -> List[CursorKeyframe]:
    """
    Exponential moving average over keyframe positions.

    Args:
        keyframes: Keyframes sorted by timestamp
        smoothing: 0 keeps raw positions; values towards 1 glide more

    Returns:
        Smoothed keyframes; the first and last keep their positions
    """
    if smoothing <= 0 or len(keyframes) < 3:
        return list(keyframes)

    alpha = 1.0 - smoothing
    x, y = keyframes[0].x, keyframes[0].y
    result = [keyframes[0]]
    for keyframe in keyframes[1:-1]:
        x = lerp(x, keyframe.x, alpha)
        y = lerp(y, keyframe.y, alpha)
        result.append(replace(keyframe, x=x, y=y))
    result.append(keyframes[-1])
    return result


class KeyframeBuilder:
    """
    Builds the cursor keyframe track and click list for one recording.

    Every move sample becomes a keyframe (no downsampling) with linear
    easing. Boundary keyframes are cloned from the nearest real sample so
    the track covers [0, duration].
    """

    def __init__(self, transform: Optional[Transform] = None,
                 lookahead_ms: float = SHAPE_LOOKAHEAD_MS,
                 smoothing: float = 0.0,
                 default_shape: CursorShape = CursorShape.ARROW):
        """
        Args:
            transform: Screen-to-video coordinate transform
            lookahead_ms: Shape stabilization window
            smoothing: Position smoothing factor, see smooth_positions()
            default_shape: Shape for samples that report none
        """
        self._transform = transform or _identity
        self._lookahead_ms = lookahead_ms
        self._smoothing = smoothing
        self._default_shape = default_shape

    def _keyframe(self, event: RawEvent, timestamp: Optional[float] = None) -> CursorKeyframe:
        x, y = self._transform(event.x, event.y)
        return CursorKeyframe(
            timestamp=event.timestamp if timestamp is None else timestamp,
            x=x,
            y=y,
            shape=CursorShape.parse(event.cursor_shape) if event.cursor_shape else self._default_shape,
            easing=Easing.LINEAR,
        )

    def build_clicks(self, events: Iterable[RawEvent]) -> List[ClickEvent]:
        """Convert down/up samples into click events sorted by timestamp."""
        clicks = []
        for event in events:
            if not event.is_click:
                continue
            x, y = self._transform(event.x, event.y)
            clicks.append(ClickEvent(
                timestamp=event.timestamp,
                x=x,
                y=y,
                button=event.button,
                action=event.action,
            ))
        # sorted() is stable so equal timestamps keep arrival order
        return sorted(clicks, key=lambda c: c.timestamp)

    def build_keyframes(self, events: Sequence[RawEvent], duration_ms: float) -> List[CursorKeyframe]:
        """
        Convert move samples into an ordered keyframe track.

        Args:
            events: Raw telemetry in arrival order
            duration_ms: Video duration

        Returns:
            Keyframes sorted by timestamp, empty when there is no telemetry
        """
        if not events:
            return []

        ordered = sorted(events, key=lambda e: e.timestamp)
        moves = [e for e in ordered if e.action == Action.MOVE]

        if not moves:
            # Only clicks were recorded: hold the first position, end at the last
            first, last = ordered[0], ordered[-1]
            keyframes = [self._keyframe(first, timestamp=0)]
            if duration_ms > 0:
                keyframes.append(self._keyframe(last, timestamp=duration_ms))
            return keyframes

        # Samples sharing a timestamp all stay; position_at() resolves to the last
        keyframes = stabilize_shapes([self._keyframe(e) for e in moves], self._lookahead_ms)
        keyframes = smooth_positions(keyframes, self._smoothing)

        if keyframes[0].timestamp > 0:
            keyframes.insert(0, keyframes[0].at(0))
        if duration_ms > 0 and keyframes[-1].timestamp < duration_ms:
            keyframes.append(keyframes[-1].at(duration_ms))
        return keyframes

    def build(self, events: Sequence[RawEvent], duration_ms: float) -> Tuple[List[CursorKeyframe], List[ClickEvent]]:
        """
        Build keyframes and clicks from raw telemetry.

        Returns:
            Tuple of (keyframes, clicks)
        """
        keyframes = self.build_keyframes(events, duration_ms)
        clicks = self.build_clicks(events)
        logger.info("Converted %d telemetry samples to %d cursor keyframes and %d click events",
                    len(events), len(keyframes), len(clicks))
        return keyframes, clicks
