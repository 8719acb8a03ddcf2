"""Configuration settings for Lyricsync."""

import os
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigError


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _float(name: str, default: str) -> float:
    value = os.getenv(name, default)
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


# Client loop cadences (can be overridden via environment variables)
POLL_INTERVAL = _float("LYRICSYNC_POLL_INTERVAL", "2.0")  # seconds between snapshots
FRAME_RATE = _float("LYRICSYNC_FRAME_RATE", "30")  # tracker ticks per second
DRIFT_TOLERANCE_MS = int(_float("LYRICSYNC_DRIFT_TOLERANCE_MS", "1000"))

# Outbound calls rely on the transport default unless a timeout is set
HTTP_TIMEOUT = _optional_float("LYRICSYNC_HTTP_TIMEOUT")

# How long the CLI waits for the Japanese dictionary before parsing anyway
JP_INIT_WAIT = _float("LYRICSYNC_JP_INIT_WAIT", "10")

# Lyric providers
LRCLIB_SEARCH_URL = "https://lrclib.net/api/search"
NETEASE_SEARCH_URL = "https://music.163.com/api/search/get/web"
NETEASE_LYRIC_URL = "https://music.163.com/api/song/lyric"

# Playback-state provider
SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_PLAYER_URL = "https://api.spotify.com/v1/me/player/currently-playing"
SPOTIFY_SCOPES = "user-read-currently-playing user-read-playback-state"
DEFAULT_REDIRECT_URI = "http://127.0.0.1:3000/callback"


@dataclass(frozen=True)
class SpotifyCredentials:
    client_id: Optional[str]
    client_secret: Optional[str]
    redirect_uri: str
    access_token: Optional[str]
    refresh_token: Optional[str] = None


def validate_config() -> None:
    """Validate configuration values."""
    if POLL_INTERVAL <= 0:
        raise ConfigError("Poll interval must be positive")

    if FRAME_RATE <= 0:
        raise ConfigError("Frame rate must be positive")

    if DRIFT_TOLERANCE_MS < 0:
        raise ConfigError("Drift tolerance cannot be negative")

    if HTTP_TIMEOUT is not None and HTTP_TIMEOUT <= 0:
        raise ConfigError("HTTP timeout must be positive when set")

    if JP_INIT_WAIT < 0:
        raise ConfigError("Japanese analyzer wait cannot be negative")


def get_spotify_credentials() -> SpotifyCredentials:
    """Read playback-provider credentials from the environment."""
    return SpotifyCredentials(
        client_id=os.getenv("SPOTIFY_CLIENT_ID"),
        client_secret=os.getenv("SPOTIFY_CLIENT_SECRET"),
        redirect_uri=os.getenv("SPOTIFY_REDIRECT_URI", DEFAULT_REDIRECT_URI),
        access_token=os.getenv("SPOTIFY_ACCESS_TOKEN") or None,
        refresh_token=os.getenv("SPOTIFY_REFRESH_TOKEN") or None,
    )


# Validate config on import
validate_config()
