"""
Frame Compositor Module
Applies one FrameRenderSpec to one decoded source frame
"""

import logging
import math
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageColor, ImageDraw, ImageFilter

from .coordinates import Dimensions
from .easing import clamp
from .effects import EffectFrame, EffectKind
from .glyphs import GlyphLibrary
from .render_plan import FrameRenderSpec
from .zoom_tracker import CropRect

logger = logging.getLogger(__name__)

# Blur below this length in output pixels is invisible
MIN_BLUR_LENGTH = 0.5
MAX_BLUR_LENGTH = 50.0


def to_output_space(x: float, y: float, crop: CropRect, output: Dimensions) -> Tuple[float, float]:
    """
    Map a video-pixel point into output-frame pixels.

    The point is made relative to the crop, then scaled by the ratio
    between output and crop size.
    """
    return ((x - crop.x) * output.width / crop.width,
            (y - crop.y) * output.height / crop.height)


def cursor_origin(spec: FrameRenderSpec, output: Dimensions, glyph_size: int) -> Tuple[int, int]:
    """
    Top-left corner where the cursor glyph is pasted.

    The glyph hotspot lands on the mapped cursor position, then the
    corner is clamped so the whole glyph stays inside the output frame.
    """
    x, y = to_output_space(spec.cursor_pos[0], spec.cursor_pos[1], spec.crop_rect, output)
    hx, hy = GlyphLibrary.hotspot(spec.cursor_shape, glyph_size)
    left = clamp(round(x - hx), 0, max(0, output.width - glyph_size))
    top = clamp(round(y - hy), 0, max(0, output.height - glyph_size))
    return int(left), int(top)


def motion_blur_radius(velocity: Tuple[float, float], frame_rate: float, strength: float) -> float:
    """
    Gaussian blur radius for a cursor moving at velocity (pixels/ms).

    Returns 0 when the blur would be shorter than MIN_BLUR_LENGTH.
    """
    if strength <= 0:
        return 0.0
    speed = math.hypot(velocity[0], velocity[1]) * 1000.0
    length = min(speed / frame_rate * strength * 20, MAX_BLUR_LENGTH)
    if length < MIN_BLUR_LENGTH:
        return 0.0
    return length * 0.3


class FrameCompositor:
    """
    Draws the cursor and effect overlays on cropped, resized frames.

    One instance is shared by every render worker. It holds no per-frame
    state; glyphs come from the shared GlyphLibrary.
    """

    def __init__(self, output: Dimensions, glyphs: GlyphLibrary,
                 frame_rate: float = 30.0, motion_blur: float = 0.0):
        """
        Args:
            output: Output frame size in pixels
            glyphs: Prepared cursor glyphs
            frame_rate: Output frame rate, used for motion blur
            motion_blur: Blur strength (0 disables)
        """
        self._output = Dimensions(int(output.width), int(output.height))
        self._glyphs = glyphs
        self._frame_rate = frame_rate
        self._motion_blur = motion_blur

    @property
    def output(self) -> Dimensions:
        return self._output

    def _crop_and_resize(self, frame: Image.Image, crop: CropRect) -> Image.Image:
        x, y, w, h = crop.to_int_tuple()
        x = int(clamp(x, 0, frame.width - 1))
        y = int(clamp(y, 0, frame.height - 1))
        w = int(clamp(w, 1, frame.width - x))
        h = int(clamp(h, 1, frame.height - y))

        size = (self._output.width, self._output.height)
        if (x, y, w, h) == (0, 0, frame.width, frame.height) and frame.size == size:
            return frame.convert('RGBA')
        return frame.crop((x, y, x + w, y + h)).resize(size, Image.LANCZOS).convert('RGBA')

    def _draw_effect(self, draw: ImageDraw.ImageDraw, effect: EffectFrame, spec: FrameRenderSpec):
        x, y = to_output_space(effect.x, effect.y, spec.crop_rect, self._output)
        # Effect sizes are in video pixels and zoom with the picture
        radius = effect.size * self._output.width / spec.crop_rect.width / 2
        if radius <= 0:
            return
        red, green, blue = ImageColor.getrgb(effect.color)[:3]
        color = (red, green, blue, int(round(clamp(effect.opacity, 0.0, 1.0) * 255)))
        box = [x - radius, y - radius, x + radius, y + radius]

        if effect.kind == EffectKind.TRAIL:
            draw.ellipse(box, fill=color)
        else:
            draw.ellipse(box, outline=color, width=max(1, int(round(radius * 0.1))))

    def _cursor_glyph(self, spec: FrameRenderSpec) -> Image.Image:
        size = max(1, int(round(spec.cursor_size)))
        glyph = self._glyphs.glyph(spec.cursor_shape, size)
        radius = motion_blur_radius(spec.cursor_velocity, self._frame_rate, self._motion_blur)
        if radius > 0:
            # filter() returns a copy, the shared glyph is untouched
            glyph = glyph.filter(ImageFilter.GaussianBlur(radius))
        return glyph

    def compose(self, frame: Image.Image, spec: FrameRenderSpec) -> Image.Image:
        """
        Render one output frame.

        Args:
            frame: Decoded source frame in video pixels
            spec: Instructions for this frame

        Returns:
            RGB image at the output size
        """
        base = self._crop_and_resize(frame, spec.crop_rect)

        if spec.active_effects:
            overlay = Image.new('RGBA', base.size, (0, 0, 0, 0))
            draw = ImageDraw.Draw(overlay)
            for effect in spec.active_effects:
                self._draw_effect(draw, effect, spec)
            base = Image.alpha_composite(base, overlay)

        if spec.has_cursor:
            glyph = self._cursor_glyph(spec)
            base.alpha_composite(glyph, dest=cursor_origin(spec, self._output, glyph.width))

        return base.convert('RGB')

    def render_file(self, source: Union[str, Path], destination: Union[str, Path],
                    spec: FrameRenderSpec) -> Path:
        """Compose a frame read from source and write it to destination as PNG."""
        with Image.open(source) as frame:
            frame.load()
            result = self.compose(frame, spec)
        result.save(destination, format='PNG')
        return Path(destination)


def output_dimensions(video: Dimensions, width: Optional[int] = None,
                      height: Optional[int] = None) -> Dimensions:
    """
    Resolve the output frame size.

    A single given side keeps the video's aspect ratio; the result is
    rounded to even numbers for yuv420p encoding.
    """
    if width and height:
        w, h = width, height
    elif width:
        w, h = width, width * video.height / video.width
    elif height:
        w, h = height * video.width / video.height, height
    else:
        w, h = video.width, video.height
    return Dimensions(max(2, int(round(w)) // 2 * 2), max(2, int(round(h)) // 2 * 2))
