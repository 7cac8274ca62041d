"""Command-line interface using Click."""

import json
import re
import sys
from pathlib import Path
from typing import List, Optional

import click

from . import __version__
from .config import DEFAULT_FORMAT, SUPPORTED_FORMATS
from .core.formatting import render_timed_text
from .core.pipeline import TimingReconciler
from .core.provider import fetch_aligned_lyrics
from .exceptions import PayloadError, TimedLyricsError, ValidationError
from .utils.logging import setup_logging
from .utils.validation import (
    validate_duration,
    validate_format,
    validate_output_path,
    validate_track_id,
)

_reconciler = TimingReconciler()


def load_envelope(path: Optional[str]) -> Optional[List[float]]:
    """Read an energy envelope from a JSON list or a plain list of numbers."""
    if not path:
        return None
    text = Path(path).read_text(encoding="utf-8").strip()
    if not text:
        return None
    if text.startswith("["):
        try:
            values = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid envelope file: {e}")
    else:
        values = [v for v in re.split(r"[\s,]+", text) if v]
    try:
        return [float(v) for v in values]
    except (TypeError, ValueError):
        raise ValidationError("Envelope file must contain only numbers")


def load_payload(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise PayloadError(f"Payload is not valid JSON: {e}")


def _emit(ctx, timings, fmt: str, output: Optional[str]) -> None:
    logger = ctx.obj['logger']
    if not timings:
        raise TimedLyricsError("No timed lyrics available for this track")

    text = render_timed_text(timings, fmt)
    if output:
        output_path = validate_output_path(output, fmt)
        output_path.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {len(timings)} lines to {output_path}")
    else:
        click.echo(text)


def _run(ctx, track_id, payload, duration, envelope, reference, fmt, output) -> None:
    fmt = validate_format(fmt)
    duration = validate_duration(duration)
    reference_text = (
        Path(reference).read_text(encoding="utf-8") if reference else None
    )
    timings = _reconciler.reconcile_payload(
        track_id,
        payload,
        duration=duration,
        envelope=load_envelope(envelope),
        reference_text=reference_text,
    )
    _emit(ctx, timings, fmt, output)


def _timing_options(func):
    options = [
        click.option('--duration', type=float, default=None,
                     help='Track duration in seconds (overrides payload hint)'),
        click.option('--envelope', type=click.Path(exists=True, dir_okay=False),
                     help='Energy envelope file (JSON list or numbers)'),
        click.option('--reference', type=click.Path(exists=True, dir_okay=False),
                     help='Original lyric text used to restore missing lines'),
        click.option('--format', 'fmt', type=click.Choice(SUPPORTED_FORMATS),
                     default=DEFAULT_FORMAT, show_default=True,
                     help='Output format'),
        click.option('-o', '--output', help='Output file path (default: stdout)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(), help='Log to file')
@click.pass_context
def cli(ctx, verbose, log_file):
    """TimedLyrics - Build LRC/SRT files from provider-aligned lyrics."""
    ctx.ensure_object(dict)
    logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose
    )
    ctx.obj['logger'] = logger


@cli.command()
@click.argument('payload_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--track-id', help='Cache key for this track (default: file name)')
@_timing_options
@click.pass_context
def convert(ctx, payload_file, track_id, duration, envelope, reference, fmt, output):
    """Reconcile a saved aligned-lyrics response into a lyric file."""
    logger = ctx.obj['logger']
    try:
        payload = load_payload(payload_file)
        _run(ctx, track_id or Path(payload_file).stem, payload,
             duration, envelope, reference, fmt, output)
    except TimedLyricsError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


@cli.command()
@click.argument('track')
@click.option('--token', envvar='TIMEDLYRICS_TOKEN', required=True,
              help='Session token for the provider API')
@_timing_options
@click.pass_context
def fetch(ctx, track, token, duration, envelope, reference, fmt, output):
    """Fetch aligned lyrics for TRACK (id or song URL) and write a lyric file."""
    logger = ctx.obj['logger']
    try:
        track_id = validate_track_id(track)
        payload = fetch_aligned_lyrics(track_id, token)
        if payload is None:
            raise TimedLyricsError(f"No aligned lyrics found for {track_id}")
        _run(ctx, track_id, payload, duration, envelope, reference, fmt, output)
    except TimedLyricsError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
