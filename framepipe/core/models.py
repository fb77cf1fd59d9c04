"""
core/models.py
--------------
Plain data-transfer objects shared between the session and its callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionInfo:
    """Metadata for a single video-production session."""

    output: str
    """Output artifact path, or a sink description when there is no file."""

    width: int
    height: int
    fps: int

    started_at_ms: float
    """Wall-clock start time (epoch ms)."""

    ended_at_ms: Optional[float] = None
    frames_emitted: int = 0
    bytes_written: int = 0

    @property
    def duration_s(self) -> float:
        """Length of the produced video in seconds."""
        return self.frames_emitted / self.fps if self.fps else 0.0
