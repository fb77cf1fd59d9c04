"""
encoding/ffmpeg.py
------------------
ffmpeg as the byte sink: raw rgb24 frames in on stdin, an encoded video
file out.

The command line declares the stream geometry (resolution, pixel format,
frame rate) that every written frame must match.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from framepipe.core.config import EncoderConfig
from framepipe.encoding.rawvideo import PIXEL_FORMAT
from framepipe.encoding.sink import ProcessSink

logger = logging.getLogger(__name__)


def resolve_output_path(output: str | Path, container: str) -> Path:
    """Append ``.<container>`` when *output* has no suffix."""
    path = Path(output)
    if not path.suffix:
        path = path.with_name(f"{path.name}.{container}")
    return path


def build_ffmpeg_command(
    resolution: tuple[int, int],
    fps: int,
    output: str | Path,
    config: Optional[EncoderConfig] = None,
) -> list[str]:
    """Build the ffmpeg argv for encoding a raw rgb24 stream read from stdin."""
    cfg = config or EncoderConfig()
    width, height = resolution

    cmd = [cfg.binary]
    if cfg.overwrite:
        cmd.append("-y")
    cmd += [
        "-loglevel", cfg.loglevel,
        "-f", "rawvideo",
        "-pixel_format", PIXEL_FORMAT,
        "-video_size", f"{width}x{height}",
        "-framerate", str(fps),
        "-i", "-",
        "-c:v", cfg.codec,
    ]
    if cfg.crf is not None:
        cmd += ["-crf", str(cfg.crf)]
    cmd += ["-pix_fmt", cfg.output_pix_fmt, "-an"]
    cmd += cfg.extra_args
    cmd.append(str(resolve_output_path(output, cfg.container)))
    return cmd


class FFmpegSink(ProcessSink):
    """Streams raw frames into an ffmpeg encoder process."""

    def __init__(
        self,
        resolution: tuple[int, int],
        fps: int,
        output: str | Path,
        config: Optional[EncoderConfig] = None,
    ) -> None:
        cfg = config or EncoderConfig()
        self._output_path = resolve_output_path(output, cfg.container)
        super().__init__(build_ffmpeg_command(resolution, fps, output, cfg))

    def open(self) -> None:
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Encoding to %s", self._output_path)
        super().open()

    @property
    def output_path(self) -> Path:
        return self._output_path

    @property
    def description(self) -> str:
        return str(self._output_path)
