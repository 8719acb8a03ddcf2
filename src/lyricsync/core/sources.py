"""Lyric source resolution: primary provider first, then a search+fetch fallback.

Every hop is attempted once. A network error or an unexpected response
shape at a hop counts as "no result" and the chain moves on; only the final
outcome (found / not found) reaches the caller.
"""

from typing import Any, List, Optional, Sequence

import requests  # type: ignore[import-untyped]

from .. import config
from ..utils.logging import get_logger
from .fetch import fetch_json
from .models import ResolvedTranscript, ResolveStatus

logger = get_logger(__name__)


class LrclibProvider:
    """Primary provider: LRCLIB search by track and artist."""

    name = "lrclib"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        search_url: str = config.LRCLIB_SEARCH_URL,
    ):
        self.session = session
        self.search_url = search_url

    def fetch_synced(self, track_name: str, artist_name: str) -> Optional[str]:
        data = fetch_json(
            self.search_url,
            params={"track_name": track_name, "artist_name": artist_name},
            session=self.session,
        )
        if not isinstance(data, list):
            return None
        for result in data:
            if not isinstance(result, dict):
                continue
            synced = result.get("syncedLyrics")
            if isinstance(synced, str) and synced.strip():
                return synced
        return None


class NeteaseProvider:
    """Secondary provider: NetEase text search, then lyric by song id."""

    name = "netease"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        search_url: str = config.NETEASE_SEARCH_URL,
        lyric_url: str = config.NETEASE_LYRIC_URL,
    ):
        self.session = session
        self.search_url = search_url
        self.lyric_url = lyric_url

    def search_id(self, query: str) -> Optional[Any]:
        data = fetch_json(
            self.search_url,
            params={"s": query, "type": 1, "limit": 1},
            session=self.session,
        )
        try:
            return data["result"]["songs"][0]["id"]
        except (KeyError, IndexError, TypeError):
            return None

    def fetch_lyric(self, song_id: Any) -> Optional[str]:
        data = fetch_json(self.lyric_url, params={"id": song_id}, session=self.session)
        try:
            lyric = data["lrc"]["lyric"]
        except (KeyError, TypeError):
            return None
        return lyric if isinstance(lyric, str) and lyric.strip() else None

    def fetch_synced(self, track_name: str, artist_name: str) -> Optional[str]:
        song_id = self.search_id(f"{track_name} {artist_name}")
        if not song_id:
            return None
        return self.fetch_lyric(song_id)


class LyricSourceResolver:
    """Query providers sequentially and return the first usable transcript."""

    def __init__(self, providers: Optional[Sequence[Any]] = None):
        if providers is None:
            providers = [LrclibProvider(), NeteaseProvider()]
        self.providers = list(providers)

    def resolve(self, track_name: str, artist_name: str) -> ResolvedTranscript:
        attempts: List[str] = []
        for provider in self.providers:
            attempts.append(provider.name)
            try:
                raw = provider.fetch_synced(track_name, artist_name)
            except Exception as e:
                logger.debug(f"{provider.name} failed: {e}")
                raw = None
            if raw:
                logger.info(f"Found synced lyrics from {provider.name}")
                return ResolvedTranscript(
                    status=ResolveStatus.FOUND,
                    raw=raw,
                    source=provider.name,
                    attempts=tuple(attempts),
                )
            logger.debug(f"No synced lyrics from {provider.name}")

        logger.info(f"No synced lyrics for {track_name!r} by {artist_name!r}")
        return ResolvedTranscript.not_found(attempts)


def resolve_lyrics(
    track_name: str,
    artist_name: str,
    session: Optional[requests.Session] = None,
) -> ResolvedTranscript:
    """Resolve with the default provider chain sharing one HTTP session."""
    resolver = LyricSourceResolver(
        [LrclibProvider(session=session), NeteaseProvider(session=session)]
    )
    return resolver.resolve(track_name, artist_name)
