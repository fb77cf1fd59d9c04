"""
cli.py
------
Command-line interface.

Commands:
    framepipe render    Render a demo animation to a video file via ffmpeg
    framepipe command   Print the ffmpeg command a render would run
"""

from __future__ import annotations

import logging
import sys

import click
from tqdm import tqdm

from framepipe.core.config import AppConfig, load_config
from framepipe.core.exceptions import ConfigError
from framepipe.encoding.ffmpeg import build_ffmpeg_command, resolve_output_path
from framepipe.render.patterns import PATTERNS
from framepipe.session.video import VideoSession


def _setup_logging(level: str) -> None:
    """Send framepipe records to stderr at *level*; other libraries stay at WARNING."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("framepipe").setLevel(getattr(logging, level.upper(), logging.INFO))


def _load(config_path, width, height, fps) -> AppConfig:
    try:
        cfg = load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if width:
        cfg.video.width = width
    if height:
        cfg.video.height = height
    if fps:
        cfg.video.fps = fps
    return cfg


_video_options = [
    click.option("--config", "config_path", default=None, type=click.Path(), help="YAML config (default: config/default.yaml)."),
    click.option("--width", default=None, type=click.IntRange(min=1), help="Override video width."),
    click.option("--height", default=None, type=click.IntRange(min=1), help="Override video height."),
    click.option("--fps", default=None, type=click.IntRange(min=1), help="Override frame rate."),
]


def video_options(func):
    for option in reversed(_video_options):
        func = option(func)
    return func


@click.group()
def main() -> None:
    """framepipe -- stream generated frames into a video encoder."""


# ---------------------------------------------------------------------------
# framepipe render
# ---------------------------------------------------------------------------

@main.command("render")
@click.option("--output", required=True, type=click.Path(), help="Output video path (extension optional).")
@click.option("--pattern", type=click.Choice(sorted(PATTERNS)), default="rainbow", show_default=True, help="Demo animation.")
@click.option("--seconds", default=3.0, show_default=True, type=click.FloatRange(min=0), help="Video length.")
@click.option("--log-level", default=None, help="Logging verbosity (default: from config).")
@video_options
def render_cmd(output, pattern, seconds, log_level, config_path, width, height, fps):
    """Render a demo animation and encode it with ffmpeg."""
    cfg = _load(config_path, width, height, fps)
    _setup_logging(log_level or cfg.logging.log_level)

    painter = PATTERNS[pattern]
    total = int(round(seconds * cfg.video.fps))

    click.echo(f"\nRendering: {pattern} ({cfg.video.width}x{cfg.video.height} @ {cfg.video.fps} fps)")

    try:
        with VideoSession.from_config(cfg, output, pixel_type=painter.pixel_type) as video:
            with tqdm(total=total, unit="frame", dynamic_ncols=True) as pbar:
                for t in range(total):
                    painter.paint(video.reset_frame(), t, video.fps)
                    video.emit_frame()
                    pbar.update(1)
            info = video.finish()
    except KeyboardInterrupt:
        click.echo("\nInterrupted -- encoder aborted.")
        sys.exit(130)
    except Exception:
        logging.exception("Fatal error")
        sys.exit(1)

    click.echo("\n" + "=" * 60)
    click.echo(" RENDER COMPLETE")
    click.echo("=" * 60)
    click.echo(f"  Frames   : {info.frames_emitted}")
    click.echo(f"  Duration : {info.duration_s:.2f} s")
    click.echo(f"  Raw bytes: {info.bytes_written}")
    click.echo(f"  Output   : {info.output}")
    click.echo("")


# ---------------------------------------------------------------------------
# framepipe command
# ---------------------------------------------------------------------------

@main.command("command")
@click.option("--output", required=True, type=click.Path(), help="Output video path (extension optional).")
@video_options
def command_cmd(output, config_path, width, height, fps):
    """Print the ffmpeg command line used for encoding."""
    cfg = _load(config_path, width, height, fps)
    path = resolve_output_path(cfg.output_dir_path() / output, cfg.encoder.container)
    click.echo(" ".join(build_ffmpeg_command(cfg.video.resolution, cfg.video.fps, path, cfg.encoder)))


if __name__ == "__main__":
    main()
