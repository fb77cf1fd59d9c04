"""
encoding/sink.py
----------------
Byte sinks: consumers of the raw frame stream.

A sink is told the stream geometry out of band (e.g. on the ffmpeg command
line) and then receives nothing but concatenated frame bytes. Closing the
sink signals end-of-stream and waits for the consumer to finish.

Concrete implementations:

* :class:`MemorySink`  - keeps the stream in memory.
* :class:`ProcessSink` - pipes the stream into a subprocess' stdin.
"""

from __future__ import annotations

import contextlib
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from framepipe.core.exceptions import SinkError

logger = logging.getLogger(__name__)


class ByteSink(ABC):
    """Interface contract for anything that consumes the raw frame stream."""

    def __init__(self) -> None:
        self._bytes_written = 0
        self._writes = 0

    @abstractmethod
    def open(self) -> None:
        """Establish the sink. Called once before the first write."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Deliver *data* in full, blocking if the consumer is behind."""

    @abstractmethod
    def close(self) -> None:
        """Signal end-of-stream, then wait for the consumer to finish."""

    def abort(self) -> None:
        """Tear the sink down after a failure. Defaults to :meth:`close`."""
        self.close()

    # ------------------------------------------------------------------
    # Convenience: context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "ByteSink":
        self.open()
        return self

    def __exit__(self, exc_type, *_: object) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def write_count(self) -> int:
        return self._writes

    @property
    def description(self) -> str:
        """Human-readable sink identifier."""
        return type(self).__name__

    def _account(self, data: bytes) -> None:
        self._bytes_written += len(data)
        self._writes += 1


class MemorySink(ByteSink):
    """Collects the stream in a ``bytearray``."""

    def __init__(self) -> None:
        super().__init__()
        self._buffer = bytearray()
        self._opened = False
        self._closed = False

    def open(self) -> None:
        self._opened = True

    def write(self, data: bytes) -> None:
        if not self._opened or self._closed:
            raise SinkError("MemorySink is not open for writing.")
        self._buffer += data
        self._account(data)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class ProcessSink(ByteSink):
    """Pipes the stream into the stdin of an external process.

    The process inherits stdout/stderr so its diagnostics reach the terminal.
    A non-zero exit status is reported as :class:`SinkError` by :meth:`close`.
    """

    def __init__(self, argv: Sequence[str]) -> None:
        super().__init__()
        if not argv:
            raise ValueError("ProcessSink needs a command to run")
        self._argv = list(argv)
        self._proc: Optional[subprocess.Popen] = None
        self._returncode: Optional[int] = None

    # ------------------------------------------------------------------
    # ByteSink implementation
    # ------------------------------------------------------------------

    def open(self) -> None:
        if self._proc is not None:
            raise SinkError(f"{self.description} already started.")
        try:
            self._proc = subprocess.Popen(self._argv, stdin=subprocess.PIPE)
        except OSError as exc:
            raise SinkError(f"Could not spawn {self._argv[0]!r}: {exc}") from exc
        if self._proc.stdin is None:
            raise SinkError(f"Could not attach to stdin of {self._argv[0]!r}")
        logger.info("Spawned %s (pid %d)", self._argv[0], self._proc.pid)
        logger.debug("Command: %s", " ".join(self._argv))

    def write(self, data: bytes) -> None:
        stdin = self._stdin()
        try:
            stdin.write(data)
        except (OSError, ValueError) as exc:
            raise SinkError(f"Could not write to {self._argv[0]!r}: {exc}") from exc
        self._account(data)

    def close(self) -> None:
        if self._proc is None:
            raise SinkError(f"{self.description} was never started.")
        if self._returncode is not None:
            return

        close_error: Optional[OSError] = None
        if self._proc.stdin is not None and not self._proc.stdin.closed:
            try:
                self._proc.stdin.close()
            except OSError as exc:
                close_error = exc

        try:
            self._returncode = self._proc.wait()
        except OSError as exc:
            raise SinkError(f"Failed to wait for {self._argv[0]!r} to exit: {exc}") from exc

        logger.info(
            "%s exited with status %d after %d bytes",
            self._argv[0], self._returncode, self._bytes_written,
        )
        if close_error is not None:
            raise SinkError(f"Could not flush {self._argv[0]!r}: {close_error}") from close_error
        if self._returncode != 0:
            raise SinkError(f"{self._argv[0]!r} exited with status {self._returncode}")

    def abort(self) -> None:
        if self._proc is None or self._returncode is not None:
            return
        logger.error("Aborting %s (pid %d)", self._argv[0], self._proc.pid)
        if self._proc.stdin is not None:
            # consumer may already have exited
            with contextlib.suppress(OSError):
                self._proc.stdin.close()
        self._proc.kill()
        self._returncode = self._proc.wait()

    # ------------------------------------------------------------------
    # Helpers / metadata
    # ------------------------------------------------------------------

    def _stdin(self):
        if self._proc is None or self._proc.stdin is None:
            raise SinkError(f"{self.description} is not open. Call open() first.")
        if self._returncode is not None or self._proc.stdin.closed:
            raise SinkError(f"{self.description} is already closed.")
        return self._proc.stdin

    @property
    def argv(self) -> list[str]:
        return list(self._argv)

    @property
    def returncode(self) -> Optional[int]:
        return self._returncode

    @property
    def description(self) -> str:
        return f"{type(self).__name__}({self._argv[0]})"
