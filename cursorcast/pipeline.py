"""
Render Pipeline Module
Runs a recording through planning, compositing and encoding
"""

import logging
import shutil
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .codec import FfmpegCodec, frame_filename
from .compositor import FrameCompositor, output_dimensions
from .config_manager import Config, RenderConfig
from .coordinates import CoordinateTransform, Dimensions, RecordingRegion
from .display_manager import DisplayManager
from .errors import CancelledError, CodecError, InputError
from .glyphs import GlyphLibrary
from .keyframes import KeyframeBuilder
from .metadata import RecordingMetadata, VideoInfo, export_metadata
from .models import ClickEvent, CursorKeyframe, RawEvent
from .render_plan import RenderPlan, RenderPlanBuilder

logger = logging.getLogger(__name__)

# Called after every batch with (frames rendered, total frames)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderResult:
    """Outcome of a successful run."""
    output_path: Path
    frame_count: int
    video: Dimensions
    output: Dimensions
    metadata_path: Optional[Path] = None


class RenderPipeline:
    """
    Orchestrates one render run.

    Steps:
    - probe the source video and build keyframes and the render plan
    - extract source frames into a private work directory
    - composite frames in sequential batches, in parallel within a batch
    - encode the rendered frames and export metadata

    The work directory is removed on every exit path.
    """

    def __init__(self, config: Optional[Config] = None, codec: Optional[FfmpegCodec] = None,
                 progress: Optional[ProgressCallback] = None,
                 cancel_event: Optional[threading.Event] = None):
        """
        Args:
            config: Run configuration (defaults when None)
            codec: Codec collaborator; an FfmpegCodec built from config when None
            progress: Batch progress callback
            cancel_event: Set to stop scheduling further batches
        """
        self.config = config or Config()
        render = self.config.render
        self.codec = codec or FfmpegCodec(render.ffmpeg_path, render.ffprobe_path, render.codec_timeout_s)
        self._progress = progress
        self._cancel = cancel_event or threading.Event()

        if render.debug_logging:
            logging.getLogger(__package__).setLevel(logging.DEBUG)

    def cancel(self):
        """Finish in-flight frames, then stop before the next batch."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def build_inputs(self, events: Sequence[RawEvent], video: Dimensions, duration_ms: float,
                     screen: Optional[Dimensions] = None,
                     region: Optional[RecordingRegion] = None) -> Tuple[List[CursorKeyframe], List[ClickEvent]]:
        """Convert raw telemetry into video-space keyframes and clicks."""
        if screen is None and region is None:
            screen = DisplayManager().screen_dimensions()
            if screen is None:
                logger.warning("No display detected; treating telemetry as video pixels")
                screen = video

        transform = CoordinateTransform(screen if screen is not None else video, video, region)
        cursor = self.config.cursor
        builder = KeyframeBuilder(transform, lookahead_ms=cursor.shape_lookahead_ms,
                                  smoothing=cursor.smoothing, default_shape=cursor.cursor_shape)
        return builder.build(events, duration_ms)

    def build_plan(self, keyframes: Sequence[CursorKeyframe], clicks: Sequence[ClickEvent],
                   video: Dimensions, duration_ms: float, config: Optional[Config] = None) -> RenderPlan:
        cfg = config or self.config
        builder = RenderPlanBuilder(video, cfg.render.frame_rate, cfg.cursor, cfg.zoom, cfg.effects)
        return builder.build(keyframes, clicks, duration_ms)

    def plan(self, video_path: Union[str, Path], events: Sequence[RawEvent],
             screen: Optional[Dimensions] = None,
             region: Optional[RecordingRegion] = None) -> RenderPlan:
        """Probe a video and build its render plan without rendering."""
        video, duration_ms = self.codec.probe(video_path)
        keyframes, clicks = self.build_inputs(events, video, duration_ms, screen, region)
        return self.build_plan(keyframes, clicks, video, duration_ms)

    def render(self, video_path: Union[str, Path], output_path: Union[str, Path],
               events: Sequence[RawEvent], screen: Optional[Dimensions] = None,
               region: Optional[RecordingRegion] = None) -> RenderResult:
        """
        Render a video with its telemetry.

        Args:
            video_path: Source screen recording
            output_path: Final video path, written only on success
            events: Raw pointer telemetry (may be empty)
            screen: Logical screen size; detected when None and no region is given
            region: Recorded sub-region of the screen

        Returns:
            RenderResult describing the written video

        Raises:
            InputError: Source video missing
            CursorAssetError: Cursor glyph missing
            CodecError: ffmpeg/ffprobe failed
            CancelledError: Cancelled between batches
        """
        video_path = Path(video_path)
        if not video_path.is_file():
            raise InputError(f"Source video not found: {video_path}")

        video, duration_ms = self.codec.probe(video_path)
        if not events:
            logger.warning("No telemetry events; rendering without cursor overlay")
        keyframes, clicks = self.build_inputs(events, video, duration_ms, screen, region)
        return self._run(self.config, video_path, Path(output_path), keyframes, clicks, video, duration_ms)

    def config_for(self, metadata: RecordingMetadata) -> Config:
        """
        Run configuration that reproduces a metadata snapshot.

        Cursor, zoom and effect settings and the frame rate come from the
        snapshot; output size, tools and batching stay with this pipeline.
        """
        render = replace(self.config.render, frame_rate=metadata.video.frame_rate)
        return replace(self.config, cursor=metadata.cursor_config, zoom=metadata.zoom_config,
                       effects=metadata.effects_config, render=render)

    def render_metadata(self, video_path: Union[str, Path], output_path: Union[str, Path],
                        metadata: RecordingMetadata) -> RenderResult:
        """Render from a metadata snapshot instead of raw telemetry."""
        video_path = Path(video_path)
        if not video_path.is_file():
            raise InputError(f"Source video not found: {video_path}")

        video, duration_ms = self.codec.probe(video_path)
        if (video.width, video.height) != (metadata.video.width, metadata.video.height):
            logger.warning("Metadata was captured for %sx%s but video is %sx%s",
                           metadata.video.width, metadata.video.height, video.width, video.height)
        return self._run(self.config_for(metadata), video_path, Path(output_path),
                         metadata.keyframes, metadata.clicks, video, duration_ms)

    def _run(self, cfg: Config, video_path: Path, output_path: Path, keyframes: Sequence[CursorKeyframe],
             clicks: Sequence[ClickEvent], video: Dimensions, duration_ms: float) -> RenderResult:
        plan = self.build_plan(keyframes, clicks, video, duration_ms, cfg)
        output = output_dimensions(video, cfg.render.output_width, cfg.render.output_height)

        glyphs = GlyphLibrary(cfg.render.assets_dir, cfg.cursor.color)
        glyphs.prepare({k.shape for k in keyframes})
        compositor = FrameCompositor(output, glyphs, cfg.render.frame_rate, cfg.cursor.motion_blur)

        work_dir = Path(tempfile.mkdtemp(prefix='cursorcast_', dir=cfg.render.work_dir))
        logger.debug("Work directory %s", work_dir)
        try:
            source_dir = work_dir / 'source'
            rendered_dir = work_dir / 'rendered'
            rendered_dir.mkdir()

            extracted = self.codec.extract_frames(video_path, source_dir, cfg.render.frame_rate)
            if extracted == 0:
                raise CodecError(f"No frames extracted from {video_path}")
            if extracted != len(plan):
                logger.debug("Extracted %d frames for a %d frame plan", extracted, len(plan))

            self._render_frames(plan, compositor, source_dir, rendered_dir, extracted, cfg.render)
            self.codec.encode(rendered_dir, cfg.render.frame_rate, output_path, output)
        finally:
            self._cleanup(work_dir)

        metadata_path = None
        if cfg.render.export_metadata:
            metadata = RecordingMetadata(
                video=VideoInfo(str(video_path), int(video.width), int(video.height),
                                cfg.render.frame_rate, duration_ms),
                keyframes=list(keyframes),
                clicks=list(clicks),
                zoom_sections=list(plan.regions) if cfg.zoom.enabled else [],
                cursor_config=cfg.cursor,
                zoom_config=cfg.zoom,
                effects_config=cfg.effects,
            )
            metadata_path = export_metadata(metadata, output_path)

        logger.info("Rendered %d frames to %s", len(plan), output_path)
        return RenderResult(output_path, len(plan), video, output, metadata_path)

    def _render_frames(self, plan: RenderPlan, compositor: FrameCompositor,
                       source_dir: Path, rendered_dir: Path, extracted: int, render: RenderConfig):
        total = len(plan)
        batch_size = render.batch_size

        def render_one(index: int):
            # Output names follow the frame index, never completion order
            source = source_dir / frame_filename(min(index, extracted - 1))
            compositor.render_file(source, rendered_dir / frame_filename(index), plan.frame(index))

        with ThreadPoolExecutor(max_workers=render.workers,
                                thread_name_prefix='cursorcast-render') as pool:
            for start in range(0, total, batch_size):
                if self._cancel.is_set():
                    raise CancelledError(f"Cancelled after {start} of {total} frames")

                batch = range(start, min(start + batch_size, total))
                # Consuming the iterator re-raises the first worker exception
                list(pool.map(render_one, batch))

                done = batch.stop
                logger.info("Rendered frames %d-%d of %d", batch.start + 1, done, total)
                if self._progress:
                    self._progress(done, total)

    @staticmethod
    def _cleanup(work_dir: Path):
        try:
            shutil.rmtree(work_dir)
        except OSError as e:
            logger.warning("Failed to remove work directory %s: %s", work_dir, e)


def render_video(video_path: Union[str, Path], output_path: Union[str, Path],
                 events: Sequence[RawEvent], config: Optional[Config] = None,
                 screen: Optional[Dimensions] = None,
                 region: Optional[RecordingRegion] = None,
                 progress: Optional[ProgressCallback] = None) -> RenderResult:
    """Render a video with one call; see RenderPipeline.render()."""
    return RenderPipeline(config, progress=progress).render(video_path, output_path, events, screen, region)
