"""
Telemetry Module
Pointer telemetry capture using pynput, plus JSON load/save of raw events
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .errors import InputError
from .models import Action, Button, RawEvent

logger = logging.getLogger(__name__)

SAMPLE_RATE_HZ = 250


class TelemetryRecorder:
    """
    Samples pointer position and button state at a fixed rate.

    A pynput listener tracks the latest position and reports button
    transitions as they happen; a sampling thread emits one ``move``
    event per tick. Timestamps are milliseconds since ``start()``.
    """

    def __init__(self, sample_rate_hz: float = SAMPLE_RATE_HZ,
                 on_event: Optional[Callable[[RawEvent], None]] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            sample_rate_hz: Move samples per second
            on_event: Called for every event as it is recorded
            clock: Seconds source, monotonic by default
        """
        if sample_rate_hz <= 0:
            raise ValueError("sample_rate_hz must be positive")
        self._interval = 1.0 / sample_rate_hz
        self._on_event = on_event
        self._clock = clock

        self._lock = threading.Lock()
        self._events: List[RawEvent] = []
        self._position: Tuple[float, float] = (0.0, 0.0)
        self._started_at = 0.0
        self._listener = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    @property
    def events(self) -> List[RawEvent]:
        """Snapshot of the events recorded so far."""
        with self._lock:
            return list(self._events)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _now_ms(self) -> int:
        return int(round((self._clock() - self._started_at) * 1000))

    def _record(self, event: RawEvent):
        with self._lock:
            self._events.append(event)
        if self._on_event:
            self._on_event(event)

    def _on_move(self, x: float, y: float):
        with self._lock:
            self._position = (float(x), float(y))

    def _on_click(self, x: float, y: float, button, pressed: bool):
        """pynput click callback; ``button`` is a pynput Button."""
        try:
            which = Button(getattr(button, 'name', str(button)))
        except ValueError:
            logger.debug("Ignoring unsupported button %s", button)
            return
        self._on_move(x, y)
        self._record(RawEvent(
            timestamp=self._now_ms(),
            x=float(x),
            y=float(y),
            action=Action.DOWN if pressed else Action.UP,
            button=which,
        ))

    def sample(self):
        """Emit one move event at the latest known position."""
        with self._lock:
            x, y = self._position
        self._record(RawEvent(timestamp=self._now_ms(), x=x, y=y, action=Action.MOVE))

    def _run(self):
        next_tick = self._clock()
        while not self._stop.is_set():
            self.sample()
            next_tick += self._interval
            self._stop.wait(max(0.0, next_tick - self._clock()))

    def start(self):
        """Start the listener and the sampling thread."""
        if self.is_running():
            return

        from pynput import mouse

        with self._lock:
            self._events = []
            self._position = tuple(float(v) for v in mouse.Controller().position)
        self._started_at = self._clock()
        self._stop.clear()

        self._listener = mouse.Listener(on_move=self._on_move, on_click=self._on_click)
        self._listener.start()
        self._thread = threading.Thread(target=self._run, name='telemetry-sampler', daemon=True)
        self._thread.start()
        logger.info("Recording pointer telemetry at %.0f Hz", 1.0 / self._interval)

    def stop(self) -> List[RawEvent]:
        """
        Stop recording.

        Returns:
            All recorded events in arrival order
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._listener is not None:
            self._listener.stop()
            self._listener = None

        events = self.events
        logger.info("Recorded %d telemetry events", len(events))
        return events


def load_events(path: Union[str, Path]) -> List[RawEvent]:
    """
    Read raw events from a JSON file.

    The file holds either a list of events or an object with an
    ``events`` list.

    Raises:
        InputError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get('events', [])
        events = [RawEvent.from_dict(item) for item in data]
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise InputError(f"Cannot load telemetry from {path}: {e}") from e

    logger.debug("Loaded %d telemetry events from %s", len(events), path)
    return events


def save_events(events: List[RawEvent], path: Union[str, Path]) -> Path:
    """Write raw events to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump([e.to_dict() for e in events], f)
    return path
