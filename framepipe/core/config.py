"""
core/config.py
--------------
Loads, validates, and exposes the application config from a YAML file.

Usage:
    from framepipe.core.config import load_config, AppConfig
    cfg = load_config()            # loads config/default.yaml
    cfg = load_config("my.yaml")   # loads a custom file
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from framepipe.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_CONFIG = _PROJECT_ROOT / "config" / "default.yaml"

_FFMPEG_LOGLEVELS = {
    "quiet", "panic", "fatal", "error", "warning", "info", "verbose", "debug", "trace",
}


# ---------------------------------------------------------------------------
# Pydantic sub-models
# ---------------------------------------------------------------------------

class VideoConfig(BaseModel):
    width: int = Field(640, gt=0)
    height: int = Field(360, gt=0)
    fps: int = Field(30, gt=0)
    pixel_model: Literal["rgb", "hsl", "hsv"] = "rgb"

    @property
    def resolution(self) -> tuple[int, int]:
        return (self.width, self.height)


class EncoderConfig(BaseModel):
    binary: str = "ffmpeg"
    codec: str = "libx264"
    output_pix_fmt: str = "yuv420p"
    container: str = "mp4"
    crf: Optional[int] = Field(None, ge=0, le=63)
    overwrite: bool = True
    loglevel: str = "error"
    extra_args: list[str] = []

    @field_validator("container")
    @classmethod
    def strip_leading_dot(cls, v: str) -> str:
        v = v.strip().lstrip(".")
        if not v:
            raise ValueError("container must not be empty")
        return v

    @field_validator("loglevel")
    @classmethod
    def known_loglevel(cls, v: str) -> str:
        if v not in _FFMPEG_LOGLEVELS:
            raise ValueError(f"unknown ffmpeg loglevel: {v}")
        return v


class OutputConfig(BaseModel):
    directory: str = "output"


class LoggingConfig(BaseModel):
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Root config model
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    video: VideoConfig = VideoConfig()
    encoder: EncoderConfig = EncoderConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()

    def output_dir_path(self) -> Path:
        """Resolve output directory relative to project root."""
        p = Path(self.output.directory)
        return p if p.is_absolute() else _PROJECT_ROOT / p


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate AppConfig from a YAML file.

    Args:
        path: Explicit path to a YAML file. Defaults to ``config/default.yaml``.

    Returns:
        Validated :class:`AppConfig` instance.

    Raises:
        ConfigError: If the file is missing or contains invalid values.
    """
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error in {config_path}: {exc}") from exc

    try:
        cfg = AppConfig.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration values in {config_path}: {problems}") from exc

    logger.info(
        "Configuration loaded from %s (%dx%d @ %d fps, %s pixels)",
        config_path, cfg.video.width, cfg.video.height, cfg.video.fps, cfg.video.pixel_model,
    )
    return cfg
