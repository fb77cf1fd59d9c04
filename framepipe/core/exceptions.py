"""
core/exceptions.py
------------------
Custom exception hierarchy for framepipe.
"""


class FramePipeError(Exception):
    """Root exception for all framepipe-specific errors."""


# --- Configuration ---

class ConfigError(FramePipeError):
    """Raised when the configuration file is missing or invalid."""


# --- Frame buffer ---

class FrameIndexError(FramePipeError, IndexError):
    """Raised on direct (``frame[x, y]``) access outside the frame."""


# --- Sink / encoder process ---

class SinkError(FramePipeError):
    """Raised when the byte sink cannot be started, written to or reaped."""


# --- Session ---

class SessionFinishedError(FramePipeError):
    """Raised on any use of a VideoSession after ``finish()``."""
