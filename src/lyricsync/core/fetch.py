"""
HTTP fetching for lyric providers.

This module intentionally contains only network logic:
- requests
- one attempt per call
- failures collapse to None

No parsing. No provider-specific semantics.
"""

from typing import Any, Optional

import requests  # type: ignore[import-untyped]

from .. import config
from ..utils.logging import get_logger

logger = get_logger(__name__)


def fetch_json(
    url: str,
    *,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> Optional[Any]:
    """
    Fetch JSON from a URL, attempting exactly once.

    Returns None on any transport error, HTTP error status or undecodable
    body. The timeout defaults to LYRICSYNC_HTTP_TIMEOUT, which is unset
    (transport default) unless configured.
    """
    sess = session or requests
    if timeout is None:
        timeout = config.HTTP_TIMEOUT

    try:
        resp = sess.get(url, params=params, headers=headers or {}, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except Exception as e:
        logger.debug(f"GET {url} failed: {e}")
        return None
