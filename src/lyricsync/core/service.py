"""Inbound operations: lyric lookup and current-playback snapshot.

Both return plain data shaped like the HTTP responses a web front end would
serve, so any routing layer can wrap them without further translation.
"""

from typing import Any, Dict, Optional

from ..exceptions import ValidationError
from ..utils.logging import get_logger
from ..utils.validation import validate_track_query
from .lrc import parse_transcript, transcript_to_json
from .models import LookupResponse, TimedTranscript
from .playback import SpotifyPlaybackClient
from .romanization import start_japanese_analyzer
from .sources import LyricSourceResolver

logger = get_logger(__name__)


def warm_up(wait: Optional[float] = None) -> bool:
    """Start loading the Japanese dictionary; optionally wait for it.

    Returns True if the analyzer is ready when this returns.
    """
    analyzer = start_japanese_analyzer()
    if wait:
        return analyzer.wait(wait)
    return analyzer.is_ready


def fetch_transcript(
    track_name: str,
    artist_name: str,
    resolver: Optional[LyricSourceResolver] = None,
) -> TimedTranscript:
    """Resolve and parse; an empty transcript means no lyrics were found."""
    start_japanese_analyzer()
    resolved = (resolver or LyricSourceResolver()).resolve(track_name, artist_name)
    if not resolved.found:
        return TimedTranscript()
    return parse_transcript(resolved.raw)


def lookup_lyrics(
    track_name: str,
    artist_name: str,
    resolver: Optional[LyricSourceResolver] = None,
) -> LookupResponse:
    """Handle a lyric lookup request.

    200 with {"parsed": [...]}, 404 when no provider has synced lyrics,
    400 for a blank track name, 500 for anything unexpected. Japanese
    dictionary loading is started before the providers are queried.
    """
    start_japanese_analyzer()
    try:
        track, artist = validate_track_query(track_name, artist_name)
    except ValidationError as e:
        return LookupResponse(400, {"error": str(e)})

    try:
        resolved = (resolver or LyricSourceResolver()).resolve(track, artist)
        if not resolved.found:
            return LookupResponse(404, {"error": "Lyrics not found"})
        transcript = parse_transcript(resolved.raw)
        return LookupResponse(200, {"parsed": transcript_to_json(transcript)})
    except Exception:
        logger.exception(f"Lyric lookup failed for {track!r} by {artist!r}")
        return LookupResponse(500, {"error": "Internal Server Error"})


def current_playback_payload(
    client: Optional[SpotifyPlaybackClient],
) -> Dict[str, Any]:
    """Current playback as a JSON object; {} when there is nothing to report."""
    if client is None:
        return {}
    track = client.current_track()
    return track.to_json() if track else {}
