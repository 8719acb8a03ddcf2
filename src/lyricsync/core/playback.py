"""Playback-state client: who is playing what, and where.

Authorization lives in an explicit PlaybackSession that is handed to every
call needing it. The session only knows how to present its bearer token and
how to ask its refresh function for a new one; obtaining tokens is the job
of the authorization-code helpers at the bottom of this module.
"""

from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import requests  # type: ignore[import-untyped]

from .. import config
from ..exceptions import AuthError
from ..utils.logging import get_logger
from .models import CurrentTrack, PlaybackPoll

logger = get_logger(__name__)


class PlaybackSession:
    """Access token holder with an optional refresh contract."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_fn: Optional[Callable[[], Optional[str]]] = None,
        refresh_token: Optional[str] = None,
    ):
        self.access_token = access_token or None
        self.refresh_fn = refresh_fn
        self.refresh_token = refresh_token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def authorization_header(self) -> Dict[str, str]:
        if not self.access_token:
            raise AuthError("No playback access token")
        return {"Authorization": f"Bearer {self.access_token}"}

    def refresh(self) -> bool:
        """Ask the refresh function for a new token; True if one was obtained."""
        if self.refresh_fn is None:
            return False
        try:
            token = self.refresh_fn()
        except Exception as e:
            logger.warning(f"Access token refresh failed: {e}")
            return False
        if not token:
            return False
        self.access_token = token
        return True


def normalize_current_track(data: Any) -> Optional[CurrentTrack]:
    """Reduce a currently-playing payload to CurrentTrack, or None."""
    try:
        item = data["item"]
        if not item:
            return None
        images = item.get("album", {}).get("images") or []
        return CurrentTrack(
            id=str(item["id"]),
            name=item["name"],
            artist=item["artists"][0]["name"],
            album_art_url=images[0]["url"] if images else None,
            progress_ms=int(data.get("progress_ms") or 0),
            is_playing=bool(data.get("is_playing")),
        )
    except (KeyError, IndexError, TypeError, ValueError, AttributeError):
        return None


class SpotifyPlaybackClient:
    """Fetch the currently playing track for a session."""

    def __init__(
        self,
        session: PlaybackSession,
        http: Optional[requests.Session] = None,
        player_url: str = config.SPOTIFY_PLAYER_URL,
        timeout: Optional[float] = None,
    ):
        self.session = session
        self.http = http or requests
        self.player_url = player_url
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT

    def _get(self):
        return self.http.get(
            self.player_url,
            headers=self.session.authorization_header(),
            timeout=self.timeout,
        )

    def poll(self) -> PlaybackPoll:
        """Poll the currently-playing endpoint.

        204 No Content or a payload without an item is IDLE. A missing token,
        transport error, error status or malformed payload is FAILED.
        """
        if not self.session.is_authenticated:
            return PlaybackPoll.failed()
        try:
            resp = self._get()
            if resp.status_code == 401 and self.session.refresh():
                resp = self._get()
            if resp.status_code == 204:
                return PlaybackPoll.idle()
            resp.raise_for_status()
            data = resp.json()
        except Exception as e:
            logger.debug(f"Currently-playing fetch failed: {e}")
            return PlaybackPoll.failed()

        if isinstance(data, dict) and not data.get("item"):
            return PlaybackPoll.idle()
        track = normalize_current_track(data)
        if track is None:
            logger.debug("Currently-playing payload is malformed")
            return PlaybackPoll.failed()
        return PlaybackPoll.active(track)

    def current_track(self) -> Optional[CurrentTrack]:
        """Current track, or None when nothing is playing or anything fails."""
        return self.poll().track


# ----------------------
# Authorization-code helpers
# ----------------------
def build_authorize_url(
    client_id: str,
    redirect_uri: str = config.DEFAULT_REDIRECT_URI,
    scopes: str = config.SPOTIFY_SCOPES,
    authorize_url: str = config.SPOTIFY_AUTHORIZE_URL,
) -> str:
    """URL the user opens to grant playback-state access."""
    if not client_id:
        raise AuthError("SPOTIFY_CLIENT_ID is not set")
    query = urlencode(
        {
            "response_type": "code",
            "client_id": client_id,
            "scope": scopes,
            "redirect_uri": redirect_uri,
        }
    )
    return f"{authorize_url}?{query}"


def _request_token(
    data: Dict[str, str],
    client_id: str,
    client_secret: str,
    http: Optional[requests.Session],
    token_url: str,
) -> Dict[str, Any]:
    if not client_id or not client_secret:
        raise AuthError("Client id and secret are required")
    sess = http or requests
    try:
        resp = sess.post(
            token_url,
            data=data,
            auth=(client_id, client_secret),
            timeout=config.HTTP_TIMEOUT,
        )
        resp.raise_for_status()
        payload = resp.json()
    except Exception as e:
        raise AuthError(f"Token request failed: {e}") from e
    if not isinstance(payload, dict) or not payload.get("access_token"):
        raise AuthError("Token response has no access_token")
    return payload


def refresh_access_token(
    refresh_token: str,
    client_id: str,
    client_secret: str,
    http: Optional[requests.Session] = None,
    token_url: str = config.SPOTIFY_TOKEN_URL,
) -> str:
    payload = _request_token(
        {"grant_type": "refresh_token", "refresh_token": refresh_token},
        client_id,
        client_secret,
        http,
        token_url,
    )
    return payload["access_token"]


def exchange_authorization_code(
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str = config.DEFAULT_REDIRECT_URI,
    http: Optional[requests.Session] = None,
    token_url: str = config.SPOTIFY_TOKEN_URL,
) -> PlaybackSession:
    """Exchange an authorization code for a session that can refresh itself."""
    if not code:
        raise AuthError("Authorization code is empty")
    payload = _request_token(
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        },
        client_id,
        client_secret,
        http,
        token_url,
    )

    refresh_token = payload.get("refresh_token")
    refresh_fn: Optional[Callable[[], Optional[str]]] = None
    if refresh_token:
        refresh_fn = lambda: refresh_access_token(  # noqa: E731
            refresh_token, client_id, client_secret, http, token_url
        )

    return PlaybackSession(
        payload["access_token"], refresh_fn=refresh_fn, refresh_token=refresh_token
    )
