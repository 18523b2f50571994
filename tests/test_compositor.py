import pytest
from PIL import Image

from cursorcast.compositor import (
    FrameCompositor,
    cursor_origin,
    motion_blur_radius,
    output_dimensions,
    to_output_space,
)
from cursorcast.coordinates import Dimensions
from cursorcast.cursor_shapes import CursorShape, GlyphFamily
from cursorcast.effects import EffectFrame, EffectKind
from cursorcast.errors import CursorAssetError
from cursorcast.glyphs import GlyphLibrary, draw_glyph
from cursorcast.render_plan import FrameRenderSpec
from cursorcast.zoom_tracker import CropRect

WHITE = (255, 255, 255)
RED = (255, 0, 0)
OUTPUT = Dimensions(200, 100)
FULL = CropRect(0, 0, 200, 100)


def spec(cursor_pos=(100, 50), crop=FULL, effects=(), size=32, velocity=(0.0, 0.0)):
    return FrameRenderSpec(
        frame_index=0,
        timestamp=0.0,
        crop_rect=crop,
        cursor_pos=cursor_pos,
        cursor_shape=CursorShape.ARROW,
        cursor_size=size,
        active_effects=tuple(effects),
        cursor_velocity=velocity,
    )


def test_to_output_space_scales_crop():
    crop = CropRect(50, 25, 100, 50)
    assert to_output_space(100, 50, crop, OUTPUT) == (100, 50)
    assert to_output_space(50, 25, crop, OUTPUT) == (0, 0)


def test_cursor_origin_uses_hotspot():
    # Arrow hotspot (10, 7) in a 32 box
    assert cursor_origin(spec(), OUTPUT, 32) == (90, 43)


def test_cursor_origin_clamped_inside_output():
    assert cursor_origin(spec(cursor_pos=(199, 99)), OUTPUT, 32) == (168, 68)
    assert cursor_origin(spec(cursor_pos=(0, 0)), OUTPUT, 32) == (0, 0)


def test_motion_blur_radius():
    assert motion_blur_radius((0.0, 0.0), 30, 1.0) == 0.0
    assert motion_blur_radius((1.0, 0.0), 30, 0.0) == 0.0
    assert motion_blur_radius((1.0, 0.0), 30, 1.0) == pytest.approx(15.0)
    assert motion_blur_radius((0.0005, 0.0), 30, 1.0) == 0.0


def test_output_dimensions():
    video = Dimensions(1921, 1081)
    assert output_dimensions(video) == Dimensions(1920, 1080)
    assert output_dimensions(Dimensions(1920, 1080), width=1280) == Dimensions(1280, 720)
    assert output_dimensions(Dimensions(1920, 1080), 640, 480) == Dimensions(640, 480)


class TestFrameCompositor:

    def test_cursor_pasted_at_hotspot(self, red_glyph_dir):
        compositor = FrameCompositor(OUTPUT, GlyphLibrary(str(red_glyph_dir)))
        result = compositor.compose(Image.new('RGB', (200, 100), WHITE), spec())
        assert result.size == (200, 100)
        assert result.mode == 'RGB'
        assert result.getpixel((100, 50)) == RED
        assert result.getpixel((90, 43)) == RED
        assert result.getpixel((89, 50)) == WHITE

    def test_cursor_never_leaves_frame(self, red_glyph_dir):
        compositor = FrameCompositor(OUTPUT, GlyphLibrary(str(red_glyph_dir)))
        result = compositor.compose(Image.new('RGB', (200, 100), WHITE), spec(cursor_pos=(199, 99)))
        assert result.getpixel((199, 99)) == RED
        assert result.getpixel((168, 68)) == RED
        assert result.getpixel((167, 68)) == WHITE

    def test_no_cursor_leaves_frame_untouched(self, red_glyph_dir):
        compositor = FrameCompositor(OUTPUT, GlyphLibrary(str(red_glyph_dir)))
        result = compositor.compose(Image.new('RGB', (200, 100), WHITE), spec(cursor_pos=None))
        assert result.getcolors() == [(200 * 100, WHITE)]

    def test_crop_is_resized_to_output(self, red_glyph_dir):
        frame = Image.new('RGB', (200, 100), (0, 0, 255))
        frame.paste(Image.new('RGB', (100, 50), (0, 255, 0)), (0, 0))
        compositor = FrameCompositor(OUTPUT, GlyphLibrary(str(red_glyph_dir)))
        result = compositor.compose(frame, spec(cursor_pos=None, crop=CropRect(0, 0, 100, 50)))
        assert result.size == (200, 100)
        assert result.getpixel((100, 50)) == (0, 255, 0)
        assert result.getpixel((10, 90)) == (0, 255, 0)

    def test_trail_effect_drawn(self, red_glyph_dir):
        effect = EffectFrame(0, EffectKind.TRAIL, 50, 50, 1.0, 20, '#0000ff')
        compositor = FrameCompositor(OUTPUT, GlyphLibrary(str(red_glyph_dir)))
        result = compositor.compose(Image.new('RGB', (200, 100), WHITE),
                                    spec(cursor_pos=None, effects=[effect]))
        assert result.getpixel((50, 50)) == (0, 0, 255)
        assert result.getpixel((150, 50)) == WHITE

    def test_motion_blur_spreads_glyph(self, tmp_path):
        glyph = Image.new('RGBA', (32, 32), (0, 0, 0, 0))
        glyph.paste(Image.new('RGBA', (8, 8), (255, 0, 0, 255)), (12, 12))
        glyph.save(tmp_path / 'cursor.png')

        frame = Image.new('RGB', (200, 100), WHITE)
        blurred = FrameCompositor(OUTPUT, GlyphLibrary(str(tmp_path)), frame_rate=30, motion_blur=1.0)
        sharp = FrameCompositor(OUTPUT, GlyphLibrary(str(tmp_path)))
        moving = spec(velocity=(0.2, 0.0))

        # Glyph pixel (8, 16) sits just left of the red square
        assert sharp.compose(frame, moving).getpixel((98, 59)) == WHITE
        assert blurred.compose(frame, moving).getpixel((98, 59)) != WHITE

    def test_render_file_round_trip(self, tmp_path, red_glyph_dir):
        source = tmp_path / "in.png"
        Image.new('RGB', (200, 100), WHITE).save(source)
        compositor = FrameCompositor(OUTPUT, GlyphLibrary(str(red_glyph_dir)))
        out = compositor.render_file(source, tmp_path / "out.png", spec())
        with Image.open(out) as im:
            assert im.getpixel((100, 50))[:3] == RED


class TestGlyphLibrary:

    def test_missing_asset_raises(self, red_glyph_dir):
        library = GlyphLibrary(str(red_glyph_dir))
        with pytest.raises(CursorAssetError):
            library.prepare([CursorShape.ARROW, CursorShape.IBEAM])

    def test_drawn_glyphs_for_every_shape(self):
        library = GlyphLibrary()
        library.prepare(list(CursorShape))
        glyph = library.glyph(CursorShape.POINTER, 24)
        assert glyph.size == (24, 24)
        assert glyph.mode == 'RGBA'
        assert glyph.getbbox() is not None

    def test_sized_glyphs_shared(self):
        library = GlyphLibrary()
        assert library.glyph(CursorShape.ARROW, 32) is library.glyph(CursorShape.ARROW, 32)

    def test_hotspot_scales_with_size(self):
        assert GlyphLibrary.hotspot(CursorShape.ARROW, 64) == (20, 14)

    @pytest.mark.parametrize("family", list(GlyphFamily))
    def test_draw_glyph_has_content(self, family):
        assert draw_glyph(family, '#112233').getbbox() is not None
