"""tests/unit/test_session.py — VideoSession lifecycle tests against an in-memory sink."""

import sys

import pytest

from framepipe.core.config import AppConfig, EncoderConfig
from framepipe.core.exceptions import SessionFinishedError, SinkError
from framepipe.encoding.rawvideo import frame_size
from framepipe.encoding.sink import MemorySink, ProcessSink
from framepipe.frame.buffer import Frame
from framepipe.pixels.models import Hsl, Hsv, Rgb
from framepipe.session.video import VideoSession


def make_session(sink, resolution=(4, 3), fps=30, pixel_type=Rgb) -> VideoSession:
    return VideoSession(resolution, fps, pixel_type=pixel_type, sink=sink)


class TestConstruction:
    def test_opens_sink(self, memory_sink):
        make_session(memory_sink)
        memory_sink.write(b"")  # would raise if the session had not opened it

    def test_resolution_matches_frame(self, memory_sink):
        video = make_session(memory_sink, resolution=(6, 2))
        assert video.resolution == (6, 2)
        assert video.frame_mut().resolution == video.resolution
        assert video.fps == 30

    def test_non_positive_fps_rejected(self, memory_sink):
        with pytest.raises(ValueError):
            make_session(memory_sink, fps=0)

    def test_requires_output_or_sink(self):
        with pytest.raises(ValueError):
            VideoSession((2, 2), 10)

    def test_unspawnable_encoder_is_fatal(self, tmp_path):
        cfg = EncoderConfig(binary=str(tmp_path / "missing-ffmpeg"))
        with pytest.raises(SinkError):
            VideoSession((2, 2), 10, tmp_path / "out", encoder=cfg)

    def test_from_config_propagates_sink_failure(self, tmp_path):
        cfg = AppConfig.model_validate(
            {
                "video": {"width": 8, "height": 4, "fps": 12},
                "encoder": {"binary": str(tmp_path / "missing-ffmpeg")},
                "output": {"directory": str(tmp_path)},
            }
        )
        with pytest.raises(SinkError):
            VideoSession.from_config(cfg, "clip")


class TestFrameAccess:
    def test_same_buffer_reused(self, memory_sink):
        video = make_session(memory_sink)
        first = video.reset_frame()
        video.emit_frame()
        assert video.reset_frame() is first
        assert video.frame_mut() is first
        assert video.frame is first

    def test_reset_frame_clears(self, memory_sink):
        video = make_session(memory_sink)
        video.frame_mut().fill(Rgb(9, 9, 9))
        assert video.reset_frame() == Frame((4, 3), Rgb)

    def test_frame_mut_keeps_previous_content(self, memory_sink):
        video = make_session(memory_sink)
        video.reset_frame()[1, 1] = Rgb(50, 60, 70)
        video.emit_frame()
        assert video.frame_mut()[1, 1] == Rgb(50, 60, 70)

    def test_pixel_type_used_for_buffer(self, memory_sink):
        video = make_session(memory_sink, pixel_type=Hsv)
        assert video.frame_mut().pixel_type is Hsv


class TestEmission:
    def test_row_major_order(self, memory_sink, quadrants):
        video = make_session(memory_sink, resolution=(2, 2))
        frame = video.reset_frame()
        for (x, y), pixel in quadrants.items():
            frame[x, y] = pixel
        video.emit_frame()
        video.finish()
        expected = b"".join(bytes(quadrants[xy].to_rgb24()) for xy in [(0, 0), (1, 0), (0, 1), (1, 1)])
        assert memory_sink.getvalue() == expected

    def test_exact_byte_count_without_delimiters(self, memory_sink):
        video = make_session(memory_sink, resolution=(5, 3))
        for i in range(4):
            video.reset_frame().fill(Rgb(i, i, i))
            video.emit_frame()
        video.finish()
        data = memory_sink.getvalue()
        size = frame_size((5, 3))
        assert len(data) == 4 * size
        assert memory_sink.write_count == 4
        for i in range(4):
            assert data[i * size : (i + 1) * size] == bytes([i]) * size

    def test_hsl_red_pixel(self, memory_sink):
        video = make_session(memory_sink, resolution=(1, 1), pixel_type=Hsl)
        video.reset_frame()[0, 0] = Hsl.from_ints(0, 100, 50)
        video.emit_frame()
        r, g, b = memory_sink.getvalue()
        assert abs(r - 255) <= 1 and g <= 1 and b <= 1

    def test_info_tracks_progress(self, memory_sink):
        video = make_session(memory_sink, resolution=(2, 2), fps=10)
        for _ in range(5):
            video.emit_frame()
        info = video.finish()
        assert info.frames_emitted == 5
        assert info.bytes_written == 5 * 12
        assert info.duration_s == pytest.approx(0.5)
        assert info.ended_at_ms is not None
        assert (info.width, info.height, info.fps) == (2, 2, 10)
        assert video.frames_emitted == 5


class TestFinish:
    def test_finish_closes_sink(self, memory_sink):
        video = make_session(memory_sink)
        video.finish()
        assert memory_sink.closed
        assert video.finished

    @pytest.mark.parametrize("operation", ["emit_frame", "reset_frame", "frame_mut", "finish"])
    def test_operations_after_finish_rejected(self, memory_sink, operation):
        video = make_session(memory_sink)
        video.finish()
        with pytest.raises(SessionFinishedError):
            getattr(video, operation)()

    def test_context_manager_finishes(self, memory_sink):
        with make_session(memory_sink, resolution=(1, 1)) as video:
            video.emit_frame()
        assert video.finished
        assert memory_sink.closed
        assert memory_sink.getvalue() == b"\x00\x00\x00"

    def test_context_manager_after_explicit_finish(self, memory_sink):
        with make_session(memory_sink) as video:
            video.finish()
        assert video.finished

    def test_exception_aborts_and_propagates(self, memory_sink):
        with pytest.raises(RuntimeError, match="boom"):
            with make_session(memory_sink) as video:
                video.emit_frame()
                raise RuntimeError("boom")
        assert video.finished
        assert memory_sink.closed


class TestProcessSinkSession:
    def test_bytes_reach_external_consumer(self, tmp_path, copy_to_file_cmd, quadrants):
        out = tmp_path / "frames.rgb"
        video = VideoSession((2, 2), 5, sink=ProcessSink(copy_to_file_cmd(out)))
        frame = video.reset_frame()
        for (x, y), pixel in quadrants.items():
            frame[x, y] = pixel
        video.emit_frame()
        video.emit_frame()
        video.finish()
        assert out.read_bytes() == bytes(range(1, 13)) * 2


class FailingSink(MemorySink):
    """MemorySink whose writes fail once *fail_after* writes have succeeded."""

    def __init__(self, fail_after: int = 0) -> None:
        super().__init__()
        self._fail_after = fail_after
        self.aborted = False

    def write(self, data: bytes) -> None:
        if self.write_count >= self._fail_after:
            raise SinkError("encoder went away")
        super().write(data)

    def abort(self) -> None:
        self.aborted = True
        super().abort()


class TestSinkFailure:
    def test_failed_emit_aborts_sink(self):
        sink = FailingSink(fail_after=1)
        video = make_session(sink)
        video.emit_frame()
        with pytest.raises(SinkError, match="went away"):
            video.emit_frame()
        assert sink.aborted
        assert video.finished
        assert video.frames_emitted == 1

    @pytest.mark.parametrize("operation", ["emit_frame", "reset_frame", "frame_mut", "finish"])
    def test_operations_after_failed_emit_rejected(self, operation):
        video = make_session(FailingSink())
        with pytest.raises(SinkError):
            video.emit_frame()
        with pytest.raises(SessionFinishedError):
            getattr(video, operation)()

    def test_failed_emit_inside_with_block(self):
        sink = FailingSink()
        with pytest.raises(SinkError):
            with make_session(sink) as video:
                video.emit_frame()
        assert sink.aborted
        assert video.finished

    def test_exited_consumer_reaped_after_failed_emit(self):
        sink = ProcessSink([sys.executable, "-c", "pass"])
        video = make_session(sink, resolution=(512, 512))
        with pytest.raises(SinkError):
            video.emit_frame()
        assert video.finished
        assert sink.returncode is not None
        with pytest.raises(SessionFinishedError):
            video.reset_frame()

    def test_failed_finish_is_terminal(self):
        sink = ProcessSink([sys.executable, "-c", "import sys; sys.stdin.buffer.read(); sys.exit(3)"])
        video = make_session(sink)
        with pytest.raises(SinkError, match="status 3"):
            video.finish()
        assert video.finished
        assert sink.returncode == 3
        with pytest.raises(SessionFinishedError):
            video.finish()
