"""
Config Manager Module
JSON-based render configuration
"""

import json
import logging
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .cursor_shapes import CursorShape
from .easing import Easing, parse_easing
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_VERSION = "1.0.0"


def _known(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Filter a dict to the dataclass fields of cls, ignoring unknown keys."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def _require(condition: bool, field_name: str, message: str):
    if not condition:
        raise ConfigError(field_name, message)


@dataclass(frozen=True)
class CursorConfig:
    """Appearance and animation of the synthetic cursor."""

    size: int = 32
    shape: str = "arrow"
    smoothing: float = 0.0
    color: str = "#000000"
    click_animation_ms: float = 300.0
    click_scale: float = 0.8
    motion_blur: float = 0.0
    shape_lookahead_ms: float = 100.0

    def __post_init__(self):
        self.validate()

    def validate(self):
        _require(self.size > 0, 'cursor.size', 'must be positive')
        _require(0.0 <= self.smoothing < 1.0, 'cursor.smoothing', 'must be in [0, 1)')
        _require(self.click_animation_ms > 0, 'cursor.click_animation_ms', 'must be positive')
        _require(0.0 < self.click_scale <= 1.0, 'cursor.click_scale', 'must be in (0, 1]')
        _require(0.0 <= self.motion_blur <= 1.0, 'cursor.motion_blur', 'must be in [0, 1]')
        _require(self.shape_lookahead_ms >= 0, 'cursor.shape_lookahead_ms', 'must not be negative')

    @property
    def cursor_shape(self) -> CursorShape:
        return CursorShape.parse(self.shape)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CursorConfig':
        return cls(**_known(cls, data))


@dataclass(frozen=True)
class ZoomConfig:
    """
    Zoom-follow behaviour.

    speed_threshold (pixels/ms) and speed_zoom_reduction control how much
    the zoom level drops while the cursor moves fast.
    """

    enabled: bool = False
    level: float = 2.0
    transition_speed_ms: float = 300.0
    padding: float = 0.0
    follow_speed: float = 1.0
    easing: str = "ease_in_out"
    speed_threshold: float = 2.0
    speed_zoom_reduction: float = 0.1

    def __post_init__(self):
        self.validate()

    def validate(self):
        _require(self.level >= 1.0, 'zoom.level', 'must be at least 1.0')
        _require(self.transition_speed_ms > 0, 'zoom.transition_speed_ms', 'must be positive')
        _require(self.padding >= 0, 'zoom.padding', 'must not be negative')
        _require(0.0 < self.follow_speed <= 1.0, 'zoom.follow_speed', 'must be in (0, 1]')
        _require(self.speed_threshold >= 0, 'zoom.speed_threshold', 'must not be negative')
        _require(self.speed_zoom_reduction >= 0, 'zoom.speed_zoom_reduction', 'must not be negative')

    @property
    def easing_type(self) -> Easing:
        return parse_easing(self.easing)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ZoomConfig':
        data = dict(data)
        # Older metadata files name this field transitionSpeed
        if 'transitionSpeed' in data:
            data.setdefault('transition_speed_ms', data['transitionSpeed'])
        if 'followSpeed' in data:
            data.setdefault('follow_speed', data['followSpeed'])
        return cls(**_known(cls, data))


@dataclass(frozen=True)
class ClickCirclesConfig:
    enabled: bool = False
    size: float = 40.0
    color: str = "#3b82f6"
    duration_ms: float = 400.0

    def __post_init__(self):
        _require(self.size >= 0, 'effects.click_circles.size', 'must not be negative')
        _require(self.duration_ms > 0, 'effects.click_circles.duration_ms', 'must be positive')


@dataclass(frozen=True)
class TrailConfig:
    enabled: bool = False
    length: int = 8
    fade_speed: float = 0.3
    color: str = "#3b82f6"
    size: float = 10.0

    def __post_init__(self):
        _require(self.length >= 0, 'effects.trail.length', 'must not be negative')
        _require(0.0 <= self.fade_speed <= 1.0, 'effects.trail.fade_speed', 'must be in [0, 1]')


@dataclass(frozen=True)
class HighlightRingConfig:
    enabled: bool = False
    size: float = 48.0
    color: str = "#facc15"
    pulse_speed: float = 0.5

    def __post_init__(self):
        _require(self.size >= 0, 'effects.highlight_ring.size', 'must not be negative')
        _require(self.pulse_speed >= 0, 'effects.highlight_ring.pulse_speed', 'must not be negative')


@dataclass(frozen=True)
class MouseEffectsConfig:
    """Overlay effects drawn around the cursor."""

    click_circles: ClickCirclesConfig = field(default_factory=ClickCirclesConfig)
    trail: TrailConfig = field(default_factory=TrailConfig)
    highlight_ring: HighlightRingConfig = field(default_factory=HighlightRingConfig)

    @property
    def any_enabled(self) -> bool:
        return self.click_circles.enabled or self.trail.enabled or self.highlight_ring.enabled

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MouseEffectsConfig':
        return cls(
            click_circles=ClickCirclesConfig(**_known(ClickCirclesConfig, data.get('click_circles', {}))),
            trail=TrailConfig(**_known(TrailConfig, data.get('trail', {}))),
            highlight_ring=HighlightRingConfig(**_known(HighlightRingConfig, data.get('highlight_ring', {}))),
        )


@dataclass(frozen=True)
class RenderConfig:
    """Frame rate, batching, external tools and logging for one run."""

    frame_rate: float = 30.0
    batch_size: int = 10
    max_workers: Optional[int] = None
    output_width: Optional[int] = None
    output_height: Optional[int] = None
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    codec_timeout_s: float = 600.0
    work_dir: Optional[str] = None
    assets_dir: Optional[str] = None
    export_metadata: bool = True
    debug_logging: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        _require(self.frame_rate > 0, 'render.frame_rate', 'must be positive')
        _require(self.batch_size > 0, 'render.batch_size', 'must be positive')
        _require(self.max_workers is None or self.max_workers > 0,
                 'render.max_workers', 'must be positive')
        _require(self.output_width is None or self.output_width > 0,
                 'render.output_width', 'must be positive')
        _require(self.output_height is None or self.output_height > 0,
                 'render.output_height', 'must be positive')
        _require(self.codec_timeout_s > 0, 'render.codec_timeout_s', 'must be positive')

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.frame_rate

    @property
    def workers(self) -> int:
        """Render tasks in flight at once; never more than one batch."""
        if self.max_workers is None:
            return self.batch_size
        return min(self.max_workers, self.batch_size)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderConfig':
        return cls(**_known(cls, data))


@dataclass(frozen=True)
class Config:
    """Main configuration object."""

    version: str = CONFIG_VERSION
    cursor: CursorConfig = field(default_factory=CursorConfig)
    zoom: ZoomConfig = field(default_factory=ZoomConfig)
    effects: MouseEffectsConfig = field(default_factory=MouseEffectsConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'version': self.version,
            'cursor': self.cursor.to_dict(),
            'zoom': self.zoom.to_dict(),
            'effects': self.effects.to_dict(),
            'render': self.render.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        return cls(
            version=data.get('version', CONFIG_VERSION),
            cursor=CursorConfig.from_dict(data.get('cursor', {})),
            zoom=ZoomConfig.from_dict(data.get('zoom', {})),
            effects=MouseEffectsConfig.from_dict(data.get('effects', {})),
            render=RenderConfig.from_dict(data.get('render', {})),
        )


class ConfigManager:
    """
    Loads and saves the render configuration.

    The configuration is stored in a JSON file that can be:
    - Specified explicitly
    - In the current directory
    """

    DEFAULT_FILENAME = "cursorcast.json"

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config manager.

        Args:
            config_path: Explicit path to config file
        """
        self._config: Optional[Config] = None
        self._config_path = Path(config_path) if config_path else Path.cwd() / self.DEFAULT_FILENAME

    @property
    def path(self) -> Path:
        return self._config_path

    def load(self) -> Config:
        """
        Load configuration from file.

        Returns:
            Config object (default config if the file doesn't exist)

        Raises:
            ConfigError: If the file is not valid JSON or holds invalid values
        """
        if not self._config_path.exists():
            logger.debug("No config at %s, using defaults", self._config_path)
            self._config = Config()
            return self._config

        try:
            with open(self._config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(str(self._config_path), f"cannot read config: {e}") from e

        self._config = Config.from_dict(data)
        logger.debug("Loaded config from %s", self._config_path)
        return self._config

    def save(self, config: Optional[Config] = None) -> Path:
        """
        Save configuration to file.

        Returns:
            Path the configuration was written to
        """
        if config is not None:
            self._config = config
        if self._config is None:
            self._config = Config()

        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, 'w', encoding='utf-8') as f:
            json.dump(self._config.to_dict(), f, indent=2)
        return self._config_path

    @property
    def config(self) -> Config:
        """Get current configuration (loads if not already loaded)."""
        if self._config is None:
            self.load()
        return self._config
