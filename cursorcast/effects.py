"""
Mouse Effects Module
Click ripples, cursor trail and highlight ring overlays
"""

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

from .config_manager import ClickCirclesConfig, HighlightRingConfig, MouseEffectsConfig, TrailConfig
from .easing import ease_out
from .models import Action, ClickEvent


class EffectKind(str, Enum):
    CLICK_CIRCLE = 'clickCircle'
    TRAIL = 'trail'
    HIGHLIGHT_RING = 'highlightRing'


@dataclass(frozen=True)
class EffectFrame:
    """One overlay instance, active for the frame at its timestamp."""
    timestamp: float
    kind: EffectKind
    x: float
    y: float
    opacity: float
    size: float
    color: str

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'type': self.kind.value,
            'x': self.x,
            'y': self.y,
            'opacity': self.opacity,
            'size': self.size,
            'color': self.color,
        }


@dataclass(frozen=True)
class MoveSample:
    """Cursor position fed to the trail and ring generators."""
    timestamp: float
    x: float
    y: float


def generate_click_circles(clicks: Iterable[ClickEvent], config: ClickCirclesConfig,
                           frame_rate: float) -> List[EffectFrame]:
    """
    Expanding, fading circle for every button press.

    Emits one instance per output frame for the configured duration; the
    size eases out from 0 to the configured size while opacity fades
    linearly from 1 to 0.
    """
    if not config.enabled:
        return []

    frame_interval = 1000.0 / frame_rate
    duration_frames = max(1, math.ceil(config.duration_ms / frame_interval))
    frames = []

    for click in clicks:
        if click.action != Action.DOWN:
            continue
        for frame in range(duration_frames):
            progress = frame / duration_frames
            frames.append(EffectFrame(
                timestamp=click.timestamp + frame * frame_interval,
                kind=EffectKind.CLICK_CIRCLE,
                x=click.x,
                y=click.y,
                opacity=max(0.0, 1.0 - progress),
                size=config.size * ease_out(progress),
                color=config.color,
            ))

    return frames


def generate_trail(samples: Sequence[MoveSample], config: TrailConfig) -> List[EffectFrame]:
    """
    Fading dots at the positions preceding each move sample.

    Index 0 is the sample itself; opacity drops linearly with the index
    and is scaled by (1 - fade_speed).
    """
    if not config.enabled or config.length == 0:
        return []

    frames = []
    for i, sample in enumerate(samples):
        for trail_index in range(min(config.length, i + 1)):
            previous = samples[i - trail_index]
            opacity = (1 - trail_index / config.length) * (1 - config.fade_speed)
            frames.append(EffectFrame(
                timestamp=sample.timestamp,
                kind=EffectKind.TRAIL,
                x=previous.x,
                y=previous.y,
                opacity=max(0.0, opacity),
                size=config.size,
                color=config.color,
            ))
    return frames


def ring_pulse(timestamp_ms: float, pulse_speed: float) -> float:
    """Sinusoidal pulse in [0, 1]."""
    return math.sin(timestamp_ms / 1000.0 * pulse_speed * 10) * 0.5 + 0.5


def generate_highlight_ring(samples: Sequence[MoveSample], config: HighlightRingConfig) -> List[EffectFrame]:
    """
    Pulsing ring around the cursor.

    The pulse grows the ring up to 20% above its configured size and
    moves opacity between 0.7 and 1.0.
    """
    if not config.enabled:
        return []

    frames = []
    for sample in samples:
        pulse = ring_pulse(sample.timestamp, config.pulse_speed)
        frames.append(EffectFrame(
            timestamp=sample.timestamp,
            kind=EffectKind.HIGHLIGHT_RING,
            x=sample.x,
            y=sample.y,
            opacity=0.7 + pulse * 0.3,
            size=config.size * (1 + pulse * 0.2),
            color=config.color,
        ))
    return frames


class EffectTimeline:
    """
    All effect instances of a run, sorted for time-window queries.

    Trail and ring instances are produced per cursor sample; when several
    samples fall in one frame window only the latest sample's instances
    are active. Click circles from different clicks overlap freely.
    """

    # Float slack when matching instance timestamps to frame timestamps
    EPSILON = 1e-6

    def __init__(self, effects: Iterable[EffectFrame]):
        # sorted() is stable, so instances of one sample keep their order
        self._effects = sorted(effects, key=lambda e: e.timestamp)
        self._timestamps = [e.timestamp for e in self._effects]

    def __len__(self):
        return len(self._effects)

    @property
    def effects(self) -> List[EffectFrame]:
        return self._effects

    def active_at(self, t: float, window_ms: float) -> List[EffectFrame]:
        """
        Instances active for the frame at time t.

        Args:
            t: Frame timestamp
            window_ms: Frame interval; instances in (t - window, t] are candidates

        Returns:
            Active instances in render order
        """
        lo = bisect_right(self._timestamps, t - window_ms + self.EPSILON)
        hi = bisect_right(self._timestamps, t + self.EPSILON)
        candidates = self._effects[lo:hi]

        latest = {}
        for effect in candidates:
            if effect.kind != EffectKind.CLICK_CIRCLE:
                latest[effect.kind] = effect.timestamp

        return [
            e for e in candidates
            if e.kind == EffectKind.CLICK_CIRCLE or e.timestamp == latest[e.kind]
        ]

    def between(self, start: float, end: float) -> List[EffectFrame]:
        """Instances with start <= timestamp <= end."""
        lo = bisect_left(self._timestamps, start)
        hi = bisect_right(self._timestamps, end)
        return self._effects[lo:hi]


def generate_all_effects(clicks: Iterable[ClickEvent], samples: Sequence[MoveSample],
                         config: MouseEffectsConfig, frame_rate: float) -> EffectTimeline:
    """Generate every enabled effect into one timeline."""
    effects: List[EffectFrame] = []
    effects.extend(generate_click_circles(clicks, config.click_circles, frame_rate))
    effects.extend(generate_trail(samples, config.trail))
    effects.extend(generate_highlight_ring(samples, config.highlight_ring))
    return EffectTimeline(effects)
