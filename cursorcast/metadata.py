"""
Metadata Module
Versioned JSON snapshot of one render's inputs, written next to the output video
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config_manager import CursorConfig, MouseEffectsConfig, ZoomConfig
from .coordinates import Dimensions
from .errors import InputError
from .models import ClickEvent, CursorKeyframe
from .zoom_tracker import ZoomRegion

logger = logging.getLogger(__name__)

METADATA_VERSION = "1.0.0"


@dataclass(frozen=True)
class VideoInfo:
    """Source video described by a metadata document."""
    path: str
    width: int
    height: int
    frame_rate: float
    duration_ms: float

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'width': self.width,
            'height': self.height,
            'frameRate': self.frame_rate,
            'duration': self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VideoInfo':
        return cls(
            path=data.get('path', ''),
            width=int(data['width']),
            height=int(data['height']),
            frame_rate=float(data.get('frameRate', 30.0)),
            duration_ms=float(data.get('duration', 0.0)),
        )


@dataclass(frozen=True)
class RecordingMetadata:
    """Everything needed to reproduce a render without the raw telemetry."""
    video: VideoInfo
    keyframes: List[CursorKeyframe] = field(default_factory=list)
    clicks: List[ClickEvent] = field(default_factory=list)
    zoom_sections: List[ZoomRegion] = field(default_factory=list)
    cursor_config: CursorConfig = field(default_factory=CursorConfig)
    zoom_config: ZoomConfig = field(default_factory=ZoomConfig)
    effects_config: MouseEffectsConfig = field(default_factory=MouseEffectsConfig)
    version: str = METADATA_VERSION
    created_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'video': self.video.to_dict(),
            'cursor': {
                'keyframes': [k.to_dict() for k in self.keyframes],
                'config': self.cursor_config.to_dict(),
            },
            'zoom': {
                'sections': [r.to_dict() for r in self.zoom_sections],
                'config': self.zoom_config.to_dict(),
            },
            'clicks': [c.to_dict() for c in self.clicks],
            'effects': self.effects_config.to_dict(),
            'createdAt': self.created_at if self.created_at is not None else int(time.time() * 1000),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordingMetadata':
        cursor = data.get('cursor', {})
        zoom = data.get('zoom', {})
        return cls(
            version=data.get('version', METADATA_VERSION),
            video=VideoInfo.from_dict(data['video']),
            keyframes=[CursorKeyframe.from_dict(k) for k in cursor.get('keyframes', [])],
            clicks=[ClickEvent.from_dict(c) for c in data.get('clicks', [])],
            zoom_sections=[ZoomRegion.from_dict(r) for r in zoom.get('sections', [])],
            cursor_config=CursorConfig.from_dict(cursor.get('config', {})),
            zoom_config=ZoomConfig.from_dict(zoom.get('config', {})),
            effects_config=MouseEffectsConfig.from_dict(data.get('effects') or {}),
            created_at=data.get('createdAt'),
        )


def metadata_path_for(video_path: Union[str, Path]) -> Path:
    """The metadata file belonging to a video: same directory and stem, .json suffix."""
    return Path(video_path).with_suffix('.json')


def export_metadata(metadata: RecordingMetadata, video_path: Union[str, Path]) -> Path:
    """
    Write metadata next to a video.

    Args:
        metadata: Snapshot to write
        video_path: Video the snapshot belongs to

    Returns:
        Path of the written JSON file
    """
    path = metadata_path_for(video_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(metadata.to_dict(), f, indent=2)
    logger.info("Metadata exported to %s", path)
    return path


def load_metadata(path: Union[str, Path]) -> RecordingMetadata:
    """
    Read a metadata document.

    Raises:
        InputError: If the file is missing or not a valid document
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        metadata = RecordingMetadata.from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise InputError(f"Cannot load metadata from {path}: {e}") from e

    if metadata.version != METADATA_VERSION:
        logger.warning("Metadata %s has version %s, expected %s", path, metadata.version, METADATA_VERSION)
    logger.info("Metadata loaded from %s", path)
    return metadata
