import json
import threading

import pytest

from cursorcast.config_manager import (
    ClickCirclesConfig,
    Config,
    CursorConfig,
    MouseEffectsConfig,
    RenderConfig,
    ZoomConfig,
)
from cursorcast.coordinates import Dimensions
from cursorcast.cursor_shapes import CursorShape
from cursorcast.errors import CancelledError, CodecError, CursorAssetError, InputError
from cursorcast.metadata import load_metadata
from cursorcast.models import Action, Button, RawEvent
from cursorcast.pipeline import RenderPipeline

from conftest import FakeCodec, frame_color

SCREEN = Dimensions(64, 48)
EVENTS = [RawEvent(0, 10, 10), RawEvent(500, 50, 40), RawEvent(200, 30, 20, Action.DOWN, Button.LEFT)]


def make_config(work_dir, **render):
    render.setdefault('batch_size', 4)
    return Config(render=RenderConfig(work_dir=str(work_dir), **render))


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


def test_frames_encoded_in_index_order(tmp_path, work_dir, source_video, fake_codec):
    pipeline = RenderPipeline(make_config(work_dir, export_metadata=False), codec=fake_codec)
    result = pipeline.render(source_video, tmp_path / "out.mp4", [], SCREEN)

    assert result.frame_count == 15
    assert result.metadata_path is None
    assert (tmp_path / "out.mp4").read_bytes() == b'video'
    colors = [im.getpixel((0, 0)) for im in fake_codec.encoded_frames]
    assert colors == [frame_color(i) for i in range(15)]


def test_work_dir_removed_after_success(tmp_path, work_dir, source_video, fake_codec):
    RenderPipeline(make_config(work_dir), codec=fake_codec).render(
        source_video, tmp_path / "out.mp4", EVENTS, SCREEN)
    assert list(work_dir.iterdir()) == []


def test_cursor_drawn_on_rendered_frames(tmp_path, work_dir, source_video, fake_codec, red_glyph_dir):
    config = make_config(work_dir, assets_dir=str(red_glyph_dir))
    RenderPipeline(config, codec=fake_codec).render(source_video, tmp_path / "out.mp4", EVENTS, SCREEN)
    # Frame 0 has the arrow hotspot (10, 7) on the cursor at (10, 10)
    assert fake_codec.encoded_frames[0].getpixel((10, 10)) == (255, 0, 0)


def test_metadata_exported_next_to_output(tmp_path, work_dir, source_video, fake_codec):
    config = Config(zoom=ZoomConfig(enabled=True), render=RenderConfig(work_dir=str(work_dir)))
    result = RenderPipeline(config, codec=fake_codec).render(
        source_video, tmp_path / "out.mp4", EVENTS, SCREEN)

    assert result.metadata_path == tmp_path / "out.json"
    metadata = load_metadata(result.metadata_path)
    assert metadata.video.width == 64
    assert [k.timestamp for k in metadata.keyframes] == [0, 500]
    assert len(metadata.clicks) == 1
    assert len(metadata.zoom_sections) == 15
    assert json.loads(result.metadata_path.read_text())['version'] == "1.0.0"


def test_render_from_metadata_uses_saved_settings(tmp_path, work_dir, source_video, red_glyph_dir):
    saved = Config(
        cursor=CursorConfig(size=20),
        zoom=ZoomConfig(enabled=True, level=2.0),
        effects=MouseEffectsConfig(click_circles=ClickCirclesConfig(enabled=True)),
        render=RenderConfig(frame_rate=24, work_dir=str(work_dir), assets_dir=str(red_glyph_dir)),
    )
    first = FakeCodec()
    result = RenderPipeline(saved, codec=first).render(source_video, tmp_path / "a.mp4", EVENTS, SCREEN)

    plain = make_config(work_dir, assets_dir=str(red_glyph_dir), export_metadata=False)
    second = FakeCodec()
    replay = RenderPipeline(plain, codec=second).render_metadata(
        source_video, tmp_path / "b.mp4", load_metadata(result.metadata_path))

    assert replay.frame_count == result.frame_count == 12
    assert [im.tobytes() for im in first.encoded_frames] == [im.tobytes() for im in second.encoded_frames]


def test_codec_failure_cleans_up(tmp_path, work_dir, source_video):
    pipeline = RenderPipeline(make_config(work_dir), codec=FakeCodec(fail_encode=True))
    with pytest.raises(CodecError):
        pipeline.render(source_video, tmp_path / "out.mp4", EVENTS, SCREEN)
    assert list(work_dir.iterdir()) == []
    assert not (tmp_path / "out.mp4").exists()
    assert not (tmp_path / "out.json").exists()


def test_cancel_stops_after_current_batch(tmp_path, work_dir, source_video, fake_codec):
    cancel = threading.Event()
    progress = []

    def on_progress(done, total):
        progress.append((done, total))
        cancel.set()

    pipeline = RenderPipeline(make_config(work_dir), codec=fake_codec, progress=on_progress, cancel_event=cancel)
    with pytest.raises(CancelledError):
        pipeline.render(source_video, tmp_path / "out.mp4", EVENTS, SCREEN)
    assert progress == [(4, 15)]
    assert list(work_dir.iterdir()) == []
    assert not (tmp_path / "out.mp4").exists()


def test_progress_reported_per_batch(tmp_path, work_dir, source_video, fake_codec):
    progress = []
    RenderPipeline(make_config(work_dir), codec=fake_codec, progress=lambda d, t: progress.append(d)).render(
        source_video, tmp_path / "out.mp4", EVENTS, SCREEN)
    assert progress == [4, 8, 12, 15]


def test_missing_video(tmp_path, work_dir, fake_codec):
    with pytest.raises(InputError):
        RenderPipeline(make_config(work_dir), codec=fake_codec).render(
            tmp_path / "absent.mp4", tmp_path / "out.mp4", EVENTS, SCREEN)


def test_missing_glyph_fails_before_rendering(tmp_path, work_dir, source_video, fake_codec):
    events = [RawEvent(0, 10, 10, cursor_shape='ibeam')]
    config = make_config(work_dir, assets_dir=str(tmp_path))
    with pytest.raises(CursorAssetError):
        RenderPipeline(config, codec=fake_codec).render(source_video, tmp_path / "out.mp4", events, SCREEN)
    assert list(work_dir.iterdir()) == []


def test_plan_without_rendering(source_video, fake_codec):
    plan = RenderPipeline(Config(cursor=CursorConfig(size=20)), codec=fake_codec).plan(source_video, EVENTS, SCREEN)
    assert len(plan) == 15
    assert plan.frame(0).cursor_pos == (10, 10)
    assert plan.frame(0).cursor_size == 20


def test_configured_shape_used_when_telemetry_has_none(source_video, fake_codec):
    config = Config(cursor=CursorConfig(shape='crosshair'))
    plan = RenderPipeline(config, codec=fake_codec).plan(source_video, EVENTS, SCREEN)
    assert plan.frame(3).cursor_shape is CursorShape.CROSSHAIR
