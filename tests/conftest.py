import os
from pathlib import Path

import pytest
from PIL import Image

from cursorcast.codec import frame_filename
from cursorcast.coordinates import Dimensions
from cursorcast.errors import CodecError
from cursorcast.render_plan import frame_count


def frame_color(index):
    """Distinct solid color for source frame index."""
    return ((index * 37) % 256, (index * 91) % 256, (index * 53) % 256)


class FakeCodec:
    """
    In-process stand-in for FfmpegCodec.

    extract_frames() writes solid-color PNGs, encode() records the
    rendered frames in file-name order and writes a placeholder video.
    """

    def __init__(self, video=Dimensions(64, 48), duration_ms=500.0, fail_encode=False):
        self.video = video
        self.duration_ms = duration_ms
        self.fail_encode = fail_encode
        self.encoded_frames = []
        self.encoded_dimensions = None

    def probe(self, video_path):
        return self.video, self.duration_ms

    def extract_frames(self, video_path, output_dir, frame_rate):
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        count = frame_count(self.duration_ms, frame_rate)
        size = (int(self.video.width), int(self.video.height))
        for i in range(count):
            Image.new('RGB', size, frame_color(i)).save(output_dir / frame_filename(i))
        return count

    def encode(self, frames_dir, frame_rate, output_path, dimensions=None):
        if self.fail_encode:
            raise CodecError("ffmpeg exited with code 1", returncode=1, stderr="boom")
        self.encoded_dimensions = dimensions
        for name in sorted(os.listdir(frames_dir)):
            with Image.open(Path(frames_dir) / name) as im:
                self.encoded_frames.append(im.convert('RGB'))
        Path(output_path).write_bytes(b'video')
        return Path(output_path)


@pytest.fixture
def fake_codec():
    return FakeCodec()


@pytest.fixture
def source_video(tmp_path):
    path = tmp_path / "recording.mp4"
    path.write_bytes(b'not really a video')
    return path


@pytest.fixture
def red_glyph_dir(tmp_path):
    """Assets directory whose arrow glyph is a solid red square."""
    assets = tmp_path / "assets"
    assets.mkdir()
    Image.new('RGBA', (32, 32), (255, 0, 0, 255)).save(assets / 'cursor.png')
    return assets
