"""Test configuration and fixtures.

Provides reusable fixtures for:
- LRC (synced lyrics) transcripts
- Fake HTTP responses and sessions for provider and playback calls
- A controllable clock for the playback tracker
- An isolated Japanese analyzer with a fake converter
"""

import os

import pytest

from lyricsync.core import romanization


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# HTTP fakes
# =============================================================================


class FakeResponse:
    def __init__(self, json_data=None, status_code=200, raise_error=False):
        self._json_data = json_data
        self.status_code = status_code
        self._raise_error = raise_error

    def raise_for_status(self):
        if self._raise_error or self.status_code >= 400:
            raise RuntimeError(f"bad status {self.status_code}")

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class FakeSession:
    """Routes GET/POST calls by URL to queued responses and records calls."""

    def __init__(self, routes=None):
        self.routes = {url: list(responses) for url, responses in (routes or {}).items()}
        self.calls = []

    def _next(self, url):
        responses = self.routes.get(url)
        if not responses:
            raise ConnectionError(f"no response for {url}")
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(("GET", url, params, headers, timeout))
        return self._next(url)

    def post(self, url, data=None, auth=None, timeout=None):
        self.calls.append(("POST", url, data, auth, timeout))
        return self._next(url)

    def urls(self):
        return [call[1] for call in self.calls]


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Japanese analyzer
# =============================================================================


class FakeKakasi:
    """Stands in for pykakasi's converter with a tiny fixed vocabulary."""

    VOCAB = {
        "日本語": "nihongo",
        "の": "no",
        "テスト": "tesuto",
        "こんにちは": "konnichiha",
    }

    def convert(self, text):
        items = []
        rest = text
        while rest:
            for word, reading in self.VOCAB.items():
                if rest.startswith(word):
                    items.append({"orig": word, "hepburn": reading})
                    rest = rest[len(word):]
                    break
            else:
                items.append({"orig": rest[0], "hepburn": rest[0]})
                rest = rest[1:]
        return items


@pytest.fixture
def japanese_analyzer(monkeypatch):
    """Replace the shared analyzer with a ready one backed by FakeKakasi."""
    analyzer = romanization.JapaneseAnalyzer(factory=FakeKakasi)
    analyzer.initialize()
    monkeypatch.setattr(romanization, "_JAPANESE_ANALYZER", analyzer)
    return analyzer


@pytest.fixture
def pending_japanese_analyzer(monkeypatch):
    """Replace the shared analyzer with one that never starts loading."""
    analyzer = romanization.JapaneseAnalyzer(factory=FakeKakasi)
    monkeypatch.setattr(analyzer, "start", lambda: None)
    monkeypatch.setattr(romanization, "_JAPANESE_ANALYZER", analyzer)
    return analyzer


# =============================================================================
# LRC (Synced Lyrics) Fixtures
# =============================================================================


@pytest.fixture
def lrc_yesterday():
    """Synced LRC lyrics for Yesterday (simplified)."""
    return """[ar:The Beatles]
[ti:Yesterday]
[al:Help!]
[length:02:05]

[00:00.00]Yesterday
[00:04.00]All my troubles seemed so far away
[00:10.00]Now it looks as though they're here to stay
[00:16.00]Oh, I believe in yesterday
[02:00.00]Yesterday
[02:05.00]"""


@pytest.fixture
def lrc_unsorted():
    """LRC whose lines are out of order, with a duplicated offset."""
    return """[00:05.00]B
[00:01.00]A
[00:05.00]C
[00:03.500]Between"""


@pytest.fixture
def lrclib_results():
    """LRCLIB /api/search response with one plain-only and one synced hit."""
    return [
        {"id": 1, "trackName": "Song", "syncedLyrics": None, "plainLyrics": "Line"},
        {"id": 2, "trackName": "Song", "syncedLyrics": "[00:01.00]Line"},
    ]


@pytest.fixture
def netease_search_result():
    return {"result": {"songs": [{"id": 12345, "name": "Song"}]}, "code": 200}


@pytest.fixture
def netease_lyric_result():
    return {"lrc": {"version": 1, "lyric": "[00:02.00]Fallback line\n"}, "code": 200}


@pytest.fixture
def spotify_currently_playing():
    """Spotify currently-playing payload (trimmed)."""
    return {
        "progress_ms": 5000,
        "is_playing": True,
        "item": {
            "id": "track-1",
            "name": "Yesterday",
            "artists": [{"name": "The Beatles"}, {"name": "Someone Else"}],
            "album": {
                "images": [
                    {"url": "https://img.example/640.jpg"},
                    {"url": "https://img.example/300.jpg"},
                ]
            },
        },
    }
