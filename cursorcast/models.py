"""
Data Models Module
Telemetry samples, cursor keyframes and click events

All models are immutable and serialize to plain dicts via ``to_dict()`` /
``from_dict()`` for the metadata document and telemetry files.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from .cursor_shapes import CursorShape
from .easing import Easing, parse_easing


class Action(str, Enum):
    """Pointer action carried by a telemetry sample."""
    MOVE = 'move'
    DOWN = 'down'
    UP = 'up'


class Button(str, Enum):
    """Mouse button of a down/up sample."""
    LEFT = 'left'
    RIGHT = 'right'
    MIDDLE = 'middle'


@dataclass(frozen=True)
class RawEvent:
    """
    One pointer telemetry sample.

    Coordinates are in **logical screen points**; timestamps are integer
    milliseconds since recording start.
    """
    timestamp: int
    x: float
    y: float
    action: Action = Action.MOVE
    button: Optional[Button] = None
    cursor_shape: Optional[str] = None

    @property
    def is_click(self) -> bool:
        return self.action in (Action.DOWN, Action.UP) and self.button is not None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            'timestamp': self.timestamp,
            'x': self.x,
            'y': self.y,
            'action': self.action.value,
        }
        if self.button is not None:
            d['button'] = self.button.value
        if self.cursor_shape:
            d['cursorType'] = self.cursor_shape
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawEvent':
        """Create from a dict; accepts ``cursorType`` or ``cursorShape``."""
        button = data.get('button')
        return cls(
            timestamp=int(data['timestamp']),
            x=float(data['x']),
            y=float(data['y']),
            action=Action(data.get('action') or 'move'),
            button=Button(button) if button else None,
            cursor_shape=data.get('cursorType', data.get('cursorShape')),
        )


@dataclass(frozen=True)
class CursorKeyframe:
    """Cursor state anchor in video pixel coordinates."""
    timestamp: float
    x: float
    y: float
    shape: CursorShape = CursorShape.ARROW
    easing: Easing = Easing.LINEAR
    size: Optional[float] = None

    def at(self, timestamp: float) -> 'CursorKeyframe':
        """Clone this keyframe at another timestamp."""
        return replace(self, timestamp=timestamp)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            'timestamp': self.timestamp,
            'x': self.x,
            'y': self.y,
            'shape': self.shape.value,
            'easing': self.easing.value,
        }
        if self.size is not None:
            d['size'] = self.size
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CursorKeyframe':
        return cls(
            timestamp=data['timestamp'],
            x=data['x'],
            y=data['y'],
            shape=CursorShape.parse(data.get('shape')),
            easing=parse_easing(data.get('easing')),
            size=data.get('size'),
        )


@dataclass(frozen=True)
class ClickEvent:
    """A button transition in video pixel coordinates."""
    timestamp: float
    x: float
    y: float
    button: Button
    action: Action

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'x': self.x,
            'y': self.y,
            'button': self.button.value,
            'action': self.action.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClickEvent':
        return cls(
            timestamp=data['timestamp'],
            x=data['x'],
            y=data['y'],
            button=Button(data['button']),
            action=Action(data['action']),
        )
