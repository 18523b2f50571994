"""
Cursorcast - Core Module
Cursor telemetry to per-frame cursor, effect and zoom rendering
"""

from .coordinates import Dimensions, RecordingRegion, CoordinateTransform, to_video_space
from .easing import Easing, EASING_FUNCTIONS, lerp, get_easing, clamp
from .cursor_shapes import CursorShape
from .models import Action, Button, RawEvent, CursorKeyframe, ClickEvent
from .config_manager import (
    Config,
    ConfigManager,
    CursorConfig,
    ZoomConfig,
    MouseEffectsConfig,
    ClickCirclesConfig,
    TrailConfig,
    HighlightRingConfig,
    RenderConfig,
)
from .keyframes import KeyframeBuilder, stabilize_shapes
from .interpolation import CursorTrack, CursorPose, position_at, click_scale_at
from .zoom_tracker import ZoomTracker, ZoomRegion, CropRect, region_at
from .effects import EffectKind, EffectFrame, EffectTimeline, generate_all_effects
from .render_plan import FrameRenderSpec, RenderPlan, RenderPlanBuilder
from .glyphs import GlyphLibrary
from .compositor import FrameCompositor
from .codec import FfmpegCodec
from .metadata import RecordingMetadata, VideoInfo, export_metadata, load_metadata
from .telemetry import TelemetryRecorder, load_events, save_events
from .pipeline import RenderPipeline, RenderResult, render_video
from .errors import (
    CursorcastError,
    ConfigError,
    InputError,
    CursorAssetError,
    CodecError,
    CancelledError,
)

__all__ = [
    # Geometry
    'Dimensions',
    'RecordingRegion',
    'CoordinateTransform',
    'to_video_space',

    # Easing/Animation
    'Easing',
    'EASING_FUNCTIONS',
    'lerp',
    'get_easing',
    'clamp',

    # Telemetry and keyframes
    'CursorShape',
    'Action',
    'Button',
    'RawEvent',
    'CursorKeyframe',
    'ClickEvent',
    'KeyframeBuilder',
    'stabilize_shapes',
    'TelemetryRecorder',
    'load_events',
    'save_events',

    # Configuration
    'Config',
    'ConfigManager',
    'CursorConfig',
    'ZoomConfig',
    'MouseEffectsConfig',
    'ClickCirclesConfig',
    'TrailConfig',
    'HighlightRingConfig',
    'RenderConfig',

    # Planning
    'CursorTrack',
    'CursorPose',
    'position_at',
    'click_scale_at',
    'ZoomTracker',
    'ZoomRegion',
    'CropRect',
    'region_at',
    'EffectKind',
    'EffectFrame',
    'EffectTimeline',
    'generate_all_effects',
    'FrameRenderSpec',
    'RenderPlan',
    'RenderPlanBuilder',

    # Rendering
    'GlyphLibrary',
    'FrameCompositor',
    'FfmpegCodec',
    'RenderPipeline',
    'RenderResult',
    'render_video',

    # Metadata
    'RecordingMetadata',
    'VideoInfo',
    'export_metadata',
    'load_metadata',

    # Errors
    'CursorcastError',
    'ConfigError',
    'InputError',
    'CursorAssetError',
    'CodecError',
    'CancelledError',
]

__version__ = '1.0.0'
