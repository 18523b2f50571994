import pytest

from cursorcast.coordinates import CoordinateTransform, Dimensions
from cursorcast.cursor_shapes import CursorShape
from cursorcast.easing import Easing
from cursorcast.interpolation import position_at
from cursorcast.keyframes import KeyframeBuilder, smooth_positions, stabilize_shapes
from cursorcast.models import Action, Button, CursorKeyframe, RawEvent

A = CursorShape.ARROW
B = CursorShape.IBEAM


def keyframes_with_shapes(shapes, step=20):
    return [CursorKeyframe(i * step, float(i), 0.0, shape) for i, shape in enumerate(shapes)]


def move(t, x, y, shape=None):
    return RawEvent(timestamp=t, x=x, y=y, action=Action.MOVE, cursor_shape=shape)


class TestStabilizeShapes:

    def test_short_flicker_suppressed(self):
        result = stabilize_shapes(keyframes_with_shapes([A, A, B, A, A]), lookahead_ms=100)
        assert [k.shape for k in result] == [A, A, A, A, A]

    def test_sustained_change_adopted_at_first_sample(self):
        result = stabilize_shapes(keyframes_with_shapes([A, A, B, B, B]), lookahead_ms=50)
        assert [k.shape for k in result] == [A, A, B, B, B]

    def test_revert_beyond_window_does_not_suppress(self):
        result = stabilize_shapes(keyframes_with_shapes([A, B, B, B, A], step=40), lookahead_ms=50)
        assert [k.shape for k in result][:4] == [A, B, B, B]

    def test_positions_untouched(self):
        source = keyframes_with_shapes([A, B, A])
        result = stabilize_shapes(source, lookahead_ms=100)
        assert [(k.timestamp, k.x) for k in result] == [(k.timestamp, k.x) for k in source]

    def test_empty(self):
        assert stabilize_shapes([]) == []


class TestKeyframeBuilder:

    def test_boundary_keyframes_cloned(self):
        builder = KeyframeBuilder()
        keyframes = builder.build_keyframes([move(100, 5, 6), move(200, 7, 8)], duration_ms=1000)
        assert [k.timestamp for k in keyframes] == [0, 100, 200, 1000]
        assert (keyframes[0].x, keyframes[0].y) == (5, 6)
        assert (keyframes[-1].x, keyframes[-1].y) == (7, 8)
        assert all(k.easing is Easing.LINEAR for k in keyframes)

    def test_unsorted_input_sorted(self):
        events = [move(300, 3, 0), move(0, 0, 0), move(100, 1, 0), move(200, 2, 0)]
        keyframes = KeyframeBuilder().build_keyframes(events, duration_ms=300)
        assert [k.timestamp for k in keyframes] == [0, 100, 200, 300]
        assert [k.x for k in keyframes] == [0, 1, 2, 3]

    def test_duplicate_timestamps_kept_in_arrival_order(self):
        events = [move(0, 0, 0), move(50, 1, 0), move(50, 2, 0), move(100, 3, 0)]
        keyframes = KeyframeBuilder().build_keyframes(events, duration_ms=100)
        assert [(k.timestamp, k.x) for k in keyframes] == [(0, 0), (50, 1), (50, 2), (100, 3)]
        assert position_at(keyframes, 50).x == 2
        assert position_at(keyframes, 75).x == pytest.approx(2.5)

    def test_smoothed_track_boundaries_copy_nearest_sample(self):
        events = [move(100, 0, 0), move(200, 100, 0), move(300, 0, 0), move(400, 100, 0)]
        keyframes = KeyframeBuilder(smoothing=0.5).build_keyframes(events, duration_ms=500)
        assert keyframes[0] == keyframes[1].at(0)
        assert keyframes[-1] == keyframes[-2].at(500)

    def test_default_shape_fills_unreported_shapes(self):
        events = [move(0, 0, 0), move(10, 1, 0, 'pointer'), move(20, 2, 0, 'no-such-shape')]
        keyframes = KeyframeBuilder(default_shape=B, lookahead_ms=0).build_keyframes(events, duration_ms=20)
        assert [k.shape for k in keyframes] == [B, CursorShape.POINTER, A]

    def test_transform_applied(self):
        transform = CoordinateTransform(Dimensions(100, 100), Dimensions(200, 200))
        keyframes, clicks = KeyframeBuilder(transform).build(
            [move(0, 10, 20), RawEvent(5, 30, 40, Action.DOWN, Button.LEFT)], duration_ms=0)
        assert (keyframes[0].x, keyframes[0].y) == (20, 40)
        assert (clicks[0].x, clicks[0].y) == (60, 80)

    def test_clicks_sorted_stably(self):
        events = [
            RawEvent(20, 0, 0, Action.UP, Button.LEFT),
            RawEvent(10, 0, 0, Action.DOWN, Button.LEFT),
            RawEvent(20, 0, 0, Action.DOWN, Button.RIGHT),
            RawEvent(15, 0, 0, Action.DOWN),
        ]
        clicks = KeyframeBuilder().build_clicks(events)
        assert [(c.timestamp, c.action, c.button) for c in clicks] == [
            (10, Action.DOWN, Button.LEFT),
            (20, Action.UP, Button.LEFT),
            (20, Action.DOWN, Button.RIGHT),
        ]

    def test_unknown_shape_maps_to_arrow(self):
        keyframes = KeyframeBuilder().build_keyframes([move(0, 0, 0, 'sparkles')], duration_ms=0)
        assert keyframes[0].shape is CursorShape.ARROW

    def test_shape_debounced_during_build(self):
        events = [move(0, 0, 0, 'arrow'), move(10, 0, 0, 'ibeam'), move(20, 0, 0, 'arrow')]
        keyframes = KeyframeBuilder(lookahead_ms=100).build_keyframes(events, duration_ms=20)
        assert {k.shape for k in keyframes} == {CursorShape.ARROW}

    def test_clicks_only_hold_first_position(self):
        events = [RawEvent(100, 1, 2, Action.DOWN, Button.LEFT), RawEvent(200, 3, 4, Action.UP, Button.LEFT)]
        keyframes, clicks = KeyframeBuilder().build(events, duration_ms=500)
        assert [(k.timestamp, k.x, k.y) for k in keyframes] == [(0, 1, 2), (500, 3, 4)]
        assert len(clicks) == 2

    def test_empty_telemetry(self):
        assert KeyframeBuilder().build([], duration_ms=1000) == ([], [])


def test_smoothing_moves_interior_only():
    keyframes = [CursorKeyframe(t, x, 0.0) for t, x in [(0, 0.0), (10, 100.0), (20, 100.0), (30, 100.0)]]
    smoothed = smooth_positions(keyframes, 0.5)
    assert smoothed[0].x == 0.0
    assert smoothed[1].x == pytest.approx(50.0)
    assert smoothed[2].x == pytest.approx(75.0)
    assert smoothed[-1].x == 100.0
    assert smooth_positions(keyframes, 0.0) == keyframes
