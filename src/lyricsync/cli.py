"""Command-line interface using Click."""

import asyncio
import functools
import json
import sys
from pathlib import Path

import click

from . import __version__, config
from .core.follow import LyricsFollower, LyricsRenderer
from .core.lrc import format_offset, parse_transcript, transcript_to_json
from .core.models import CurrentTrack, TimedLine, TimedTranscript
from .core.playback import (
    PlaybackSession,
    SpotifyPlaybackClient,
    build_authorize_url,
    exchange_authorization_code,
    refresh_access_token,
)
from .core.romanization import KANA_RE, romanize_with_outcome
from .core.service import current_playback_payload, lookup_lyrics, warm_up
from .exceptions import AuthError, LyricSyncError, LyricsError
from .utils.logging import setup_logging
from .utils.validation import validate_track_query, validate_transcript_path


def _echo_lines(lines, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps({"parsed": lines}, ensure_ascii=False, indent=2))
        return
    for item in lines:
        click.echo(f"{format_offset(item['time'])}  {item['text']}")


def _session_from_env() -> PlaybackSession:
    creds = config.get_spotify_credentials()
    if not creds.access_token:
        raise AuthError(
            "SPOTIFY_ACCESS_TOKEN is not set; run `lyricsync auth-url` first"
        )
    refresh_fn = None
    if creds.refresh_token and creds.client_id and creds.client_secret:
        refresh_fn = functools.partial(
            refresh_access_token,
            creds.refresh_token,
            creds.client_id,
            creds.client_secret,
        )
    return PlaybackSession(
        creds.access_token, refresh_fn=refresh_fn, refresh_token=creds.refresh_token
    )


class TerminalRenderer(LyricsRenderer):
    """Print each newly activated line to the terminal."""

    def on_track(self, track: CurrentTrack) -> None:
        click.echo("")
        click.secho(f"♪ {track.name} - {track.artist}", bold=True)

    def on_lyrics(self, track: CurrentTrack, transcript: TimedTranscript) -> None:
        if not transcript:
            click.secho("No lyrics available", dim=True)

    def on_activate(self, index: int, line: TimedLine) -> None:
        click.echo(f"{format_offset(line.offset_ms)}  {line.text}")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(), help='Log to file')
@click.pass_context
def cli(ctx, verbose, log_file):
    """Lyricsync - Time-synced, romanized lyrics for the playing track."""
    ctx.ensure_object(dict)
    logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose
    )
    ctx.obj['logger'] = logger
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('text')
@click.option('--show-script', is_flag=True, help='Prefix output with the detected script')
@click.pass_context
def romanize(ctx, text, show_script):
    """Romanize a single line of text."""
    if KANA_RE.search(text):
        warm_up(wait=config.JP_INIT_WAIT)
    result = romanize_with_outcome(text)
    ctx.obj['logger'].debug(f"script={result.script.value} status={result.status.value}")
    if show_script:
        click.echo(f"[{result.script.value}] {result.text}")
    else:
        click.echo(result.text)


@cli.command()
@click.argument('transcript_file')
@click.option('--json', 'as_json', is_flag=True, help='Print the parsed lines as JSON')
@click.pass_context
def parse(ctx, transcript_file, as_json):
    """Parse an LRC file into romanized, time-ordered lines."""
    logger = ctx.obj['logger']
    try:
        path = validate_transcript_path(transcript_file)
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LyricsError(f"Cannot read transcript {path}: {e}") from e
        if KANA_RE.search(raw):
            warm_up(wait=config.JP_INIT_WAIT)
        transcript = parse_transcript(raw)
        logger.debug(f"Parsed {len(transcript)} lines from {path}")
        _echo_lines(transcript_to_json(transcript), as_json)
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)


@cli.command()
@click.argument('track')
@click.argument('artist', default="")
@click.option('--json', 'as_json', is_flag=True, help='Print the parsed lines as JSON')
@click.pass_context
def lyrics(ctx, track, artist, as_json):
    """Fetch synced lyrics for TRACK by ARTIST."""
    logger = ctx.obj['logger']
    try:
        track, artist = validate_track_query(track, artist)
        warm_up(wait=config.JP_INIT_WAIT)
        response = lookup_lyrics(track, artist)
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    if not response.ok:
        logger.error(f"❌ {response.body.get('error', 'Lookup failed')}")
        sys.exit(1)
    _echo_lines(response.body["parsed"], as_json)


@cli.command('now-playing')
@click.pass_context
def now_playing(ctx):
    """Print the current playback snapshot as JSON."""
    creds = config.get_spotify_credentials()
    client = None
    if creds.access_token:
        client = SpotifyPlaybackClient(_session_from_env())
    click.echo(json.dumps(current_playback_payload(client), ensure_ascii=False))


@cli.command()
@click.option('--poll-interval', type=float, default=config.POLL_INTERVAL,
              help='Seconds between playback polls')
@click.option('--frame-rate', type=float, default=config.FRAME_RATE,
              help='Tracker ticks per second')
@click.pass_context
def follow(ctx, poll_interval, frame_rate):
    """Follow the playing track and print each lyric line as it starts."""
    logger = ctx.obj['logger']
    try:
        if poll_interval <= 0 or frame_rate <= 0:
            raise click.BadParameter("--poll-interval and --frame-rate must be positive")
        session = _session_from_env()
        warm_up()
        follower = LyricsFollower(
            SpotifyPlaybackClient(session), renderer=TerminalRenderer()
        )
        asyncio.run(follower.run(poll_interval=poll_interval, frame_rate=frame_rate))
    except KeyboardInterrupt:
        logger.info("Stopped")
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)


@cli.command('auth-url')
@click.pass_context
def auth_url(ctx):
    """Print the URL that grants playback-state access."""
    creds = config.get_spotify_credentials()
    try:
        click.echo(build_authorize_url(creds.client_id, creds.redirect_uri))
    except LyricSyncError as e:
        ctx.obj['logger'].error(f"❌ {e}")
        sys.exit(1)


@cli.command('auth-exchange')
@click.argument('code')
@click.pass_context
def auth_exchange(ctx, code):
    """Exchange an authorization CODE for an access token."""
    creds = config.get_spotify_credentials()
    try:
        session = exchange_authorization_code(
            code, creds.client_id, creds.client_secret, creds.redirect_uri
        )
    except LyricSyncError as e:
        ctx.obj['logger'].error(f"❌ {e}")
        sys.exit(1)
    click.echo(f"SPOTIFY_ACCESS_TOKEN={session.access_token}")
    if session.refresh_token:
        click.echo(f"SPOTIFY_REFRESH_TOKEN={session.refresh_token}")


if __name__ == '__main__':
    cli()
