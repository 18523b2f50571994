"""
Codec Module
ffprobe/ffmpeg wrapper for probing, frame extraction and encoding
"""

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .coordinates import Dimensions
from .errors import CodecError, InputError

logger = logging.getLogger(__name__)

FRAME_PATTERN = "frame_%06d.png"


def frame_filename(frame_index: int) -> str:
    """
    File name of a 0-based frame index.

    ffmpeg numbers image sequences from 1, so frame 0 is frame_000001.png.
    """
    return FRAME_PATTERN % (frame_index + 1)


class FfmpegCodec:
    """
    Runs the ffmpeg and ffprobe command line tools.

    Every call is a blocking subprocess with a timeout. A non-zero exit,
    a timeout or a missing binary raises CodecError carrying stderr.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe",
                 timeout: float = 600.0):
        """
        Args:
            ffmpeg_path: ffmpeg executable
            ffprobe_path: ffprobe executable
            timeout: Seconds before a codec process is killed
        """
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise CodecError(f"{cmd[0]} not found", command=cmd) from e
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr.decode(errors='replace') if isinstance(e.stderr, bytes) else (e.stderr or "")
            raise CodecError(f"{cmd[0]} timed out after {self.timeout:.0f}s",
                             command=cmd, stderr=stderr) from e

        if result.returncode != 0:
            raise CodecError(f"{cmd[0]} exited with code {result.returncode}",
                             command=cmd, returncode=result.returncode, stderr=result.stderr)
        return result

    def probe(self, video_path: Union[str, Path]) -> Tuple[Dimensions, float]:
        """
        Read the first video stream's size and the container duration.

        Returns:
            Tuple of (dimensions, duration in ms)

        Raises:
            InputError: If the file does not exist
            CodecError: If ffprobe fails or reports no video stream
        """
        video_path = Path(video_path)
        if not video_path.is_file():
            raise InputError(f"Source video not found: {video_path}")

        cmd = [
            self.ffprobe_path, '-v', 'error',
            '-select_streams', 'v:0',
            '-show_entries', 'stream=width,height:format=duration',
            '-of', 'json',
            str(video_path),
        ]
        result = self._run(cmd)

        try:
            info = json.loads(result.stdout)
            stream = info['streams'][0]
            dims = Dimensions(int(stream['width']), int(stream['height']))
            duration_ms = float(info['format']['duration']) * 1000.0
        except (ValueError, KeyError, IndexError) as e:
            raise CodecError(f"Unexpected ffprobe output for {video_path}", command=cmd,
                             stderr=result.stdout) from e

        logger.debug("Probed %s: %sx%s, %.0f ms", video_path, dims.width, dims.height, duration_ms)
        return dims, duration_ms

    def extract_frames(self, video_path: Union[str, Path], output_dir: Union[str, Path],
                       frame_rate: float) -> int:
        """
        Decode the video into numbered PNG files at a fixed frame rate.

        Returns:
            Number of frames written
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        self._run([
            self.ffmpeg_path, '-y', '-v', 'error',
            '-i', str(video_path),
            '-vf', f'fps={frame_rate}',
            str(output_dir / FRAME_PATTERN),
        ])
        count = len(list(output_dir.glob('frame_*.png')))
        logger.debug("Extracted %d frames to %s", count, output_dir)
        return count

    def encode(self, frames_dir: Union[str, Path], frame_rate: float,
               output_path: Union[str, Path], dimensions: Optional[Dimensions] = None) -> Path:
        """
        Encode numbered PNG files into an H.264 MP4.

        The video is written to a temporary name beside output_path and
        renamed into place only when ffmpeg succeeds.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        partial = output_path.with_name(f".{output_path.stem}.partial{output_path.suffix or '.mp4'}")

        cmd = [
            self.ffmpeg_path, '-y', '-v', 'error',
            '-framerate', str(frame_rate),
            '-i', str(Path(frames_dir) / FRAME_PATTERN),
        ]
        if dimensions is not None:
            cmd += ['-s', f'{int(dimensions.width)}x{int(dimensions.height)}']
        cmd += [
            '-c:v', 'libx264',
            '-preset', 'medium',
            '-crf', '23',
            '-pix_fmt', 'yuv420p',
            '-movflags', '+faststart',
            '-f', 'mp4',
            str(partial),
        ]

        try:
            self._run(cmd)
            os.replace(partial, output_path)
        finally:
            if partial.exists():
                partial.unlink()

        logger.debug("Encoded %s", output_path)
        return output_path
