"""
session/video.py
----------------
VideoSession: owns one reusable frame buffer and the byte sink for the
lifetime of one video.

  VideoSession(...)            → sink established
    reset_frame() / frame_mut()  → paint pixels
    emit_frame()                 → frame bytes written to the sink
    ... repeat ...
  finish()                     → end-of-stream, wait for the consumer

After ``finish()`` every operation raises :class:`SessionFinishedError`.
A :class:`SinkError` from ``emit_frame()`` or ``finish()`` aborts the sink and
leaves the session finished; there is no retry or partial-frame recovery.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Generic, Optional, TypeVar

from framepipe.core.config import AppConfig, EncoderConfig
from framepipe.core.exceptions import SessionFinishedError, SinkError
from framepipe.core.models import SessionInfo
from framepipe.encoding.ffmpeg import FFmpegSink
from framepipe.encoding.rawvideo import encode_frame
from framepipe.encoding.sink import ByteSink
from framepipe.frame.buffer import Frame
from framepipe.pixels.models import PIXEL_MODELS, Pixel, Rgb

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Pixel)


class VideoSession(Generic[P]):
    """Frame-by-frame producer streaming into a single :class:`ByteSink`."""

    def __init__(
        self,
        resolution: tuple[int, int],
        fps: int,
        output: str | Path | None = None,
        *,
        pixel_type: type[P] = Rgb,  # type: ignore[assignment]
        sink: Optional[ByteSink] = None,
        encoder: Optional[EncoderConfig] = None,
    ) -> None:
        """
        Args:
            resolution: ``(width, height)`` in pixels, fixed for the session.
            fps:        Frame rate declared to the sink, fixed for the session.
            output:     Output video path for the default ffmpeg sink. A path
                        without suffix gets the container extension appended.
            pixel_type: Pixel model stored in the frame buffer.
            sink:       Pre-built sink. If given, *output* and *encoder* are
                        ignored. The session opens and closes it.
            encoder:    ffmpeg settings for the default sink.
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        if sink is None and output is None:
            raise ValueError("VideoSession needs either an output path or a sink")

        self._buffer: Frame[P] = Frame(resolution, pixel_type)
        self._fps = int(fps)
        self._sink = sink if sink is not None else FFmpegSink(
            self._buffer.resolution, self._fps, output, encoder  # type: ignore[arg-type]
        )
        self._finished = False

        self._sink.open()

        width, height = self._buffer.resolution
        self._info = SessionInfo(
            output=self._sink.description,
            width=width,
            height=height,
            fps=self._fps,
            started_at_ms=time.time() * 1000,
        )
        logger.info(
            "Session started: %dx%d @ %d fps (%s) -> %s",
            width, height, self._fps, pixel_type.__name__, self._info.output,
        )

    @classmethod
    def from_config(
        cls,
        cfg: AppConfig,
        output: str | Path,
        pixel_type: Optional[type[Pixel]] = None,
    ) -> "VideoSession":
        """Build a session from the ``video`` and ``encoder`` config sections.

        A relative *output* is placed under the configured output directory.
        """
        path = Path(output)
        if not path.is_absolute():
            path = cfg.output_dir_path() / path
        return cls(
            cfg.video.resolution,
            cfg.video.fps,
            path,
            pixel_type=pixel_type or PIXEL_MODELS[cfg.video.pixel_model],
            encoder=cfg.encoder,
        )

    # ------------------------------------------------------------------
    # Frame access
    # ------------------------------------------------------------------

    def reset_frame(self) -> Frame[P]:
        """Clear the frame buffer to defaults and return it for painting."""
        self._check_active()
        self._buffer.reset()
        return self._buffer

    def frame_mut(self) -> Frame[P]:
        """Return the frame buffer as-is, keeping the previous frame's content."""
        self._check_active()
        return self._buffer

    @property
    def frame(self) -> Frame[P]:
        return self.frame_mut()

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def emit_frame(self) -> None:
        """Write the current frame buffer to the sink."""
        self._check_active()
        data = encode_frame(self._buffer)
        try:
            self._sink.write(data)
        except SinkError:
            self.abort()
            raise
        self._info.frames_emitted += 1
        self._info.bytes_written += len(data)
        logger.debug("Emitted frame %d (%d bytes)", self._info.frames_emitted - 1, len(data))

    def finish(self) -> SessionInfo:
        """Close the sink, wait for the consumer to exit, and end the session."""
        self._check_active()
        self._finished = True
        try:
            self._sink.close()
        except SinkError:
            logger.error("Session failed to finish: %s", self._info.output)
            self._sink.abort()
            raise
        self._info.ended_at_ms = time.time() * 1000
        logger.info(
            "Session finished: %s | frames=%d (%.2fs of video)",
            self._info.output, self._info.frames_emitted, self._info.duration_s,
        )
        return self._info

    def abort(self) -> None:
        """End the session without a clean finish, tearing down the sink."""
        if self._finished:
            return
        self._finished = True
        logger.error(
            "Session aborted: %s after %d frames", self._info.output, self._info.frames_emitted
        )
        self._sink.abort()

    def _check_active(self) -> None:
        if self._finished:
            raise SessionFinishedError("VideoSession has already finished.")

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "VideoSession[P]":
        self._check_active()
        return self

    def __exit__(self, exc_type, *_: object) -> None:
        if exc_type is not None:
            self.abort()
        elif not self._finished:
            self.finish()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def resolution(self) -> tuple[int, int]:
        return self._buffer.resolution

    @property
    def fps(self) -> int:
        return self._fps

    @property
    def frames_emitted(self) -> int:
        return self._info.frames_emitted

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def info(self) -> SessionInfo:
        return self._info

    @property
    def sink(self) -> ByteSink:
        return self._sink
