import json

import pytest
from click.testing import CliRunner

import lyricsync.cli as cli
from lyricsync.core.models import CurrentTrack, LookupResponse
from lyricsync.core.playback import PlaybackSession
from lyricsync.exceptions import AuthError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SPOTIFY_CLIENT_ID",
        "SPOTIFY_CLIENT_SECRET",
        "SPOTIFY_ACCESS_TOKEN",
        "SPOTIFY_REFRESH_TOKEN",
        "SPOTIFY_REDIRECT_URI",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "warm_up", lambda wait=None: True)


def test_romanize_passthrough(runner):
    result = runner.invoke(cli.cli, ["romanize", "Hello world"])

    assert result.exit_code == 0
    assert result.output.strip() == "Hello world"


def test_romanize_show_script(runner):
    result = runner.invoke(cli.cli, ["romanize", "--show-script", "你好"])

    assert result.exit_code == 0
    assert result.output.strip() == "[han] nǐ hǎo"


def test_parse_file(runner, tmp_path, lrc_yesterday):
    path = tmp_path / "yesterday.lrc"
    path.write_text(lrc_yesterday, encoding="utf-8")

    result = runner.invoke(cli.cli, ["parse", str(path)])

    assert result.exit_code == 0
    assert "00:04.000  All my troubles seemed so far away" in result.output
    assert "02:05" not in result.output


def test_parse_file_json(runner, tmp_path, lrc_unsorted):
    path = tmp_path / "unsorted.lrc"
    path.write_text(lrc_unsorted, encoding="utf-8")

    result = runner.invoke(cli.cli, ["parse", "--json", str(path)])

    assert result.exit_code == 0
    parsed = json.loads(result.output)["parsed"]
    assert [item["time"] for item in parsed] == [1000, 3500, 5000, 5000]


def test_parse_missing_file(runner, tmp_path):
    result = runner.invoke(cli.cli, ["parse", str(tmp_path / "nope.lrc")])

    assert result.exit_code == 1
    assert "Transcript file not found" in result.output


def test_parse_undecodable_file(runner, tmp_path):
    path = tmp_path / "binary.lrc"
    path.write_bytes(b"\xff\xfe[00:01.00]\x80")

    result = runner.invoke(cli.cli, ["parse", str(path)])

    assert result.exit_code == 1
    assert "Cannot read transcript" in result.output


def test_lyrics_found(runner, monkeypatch):
    calls = []

    def fake_lookup(track, artist):
        calls.append((track, artist))
        return LookupResponse(200, {"parsed": [{"time": 1500, "text": "hello"}]})

    monkeypatch.setattr(cli, "lookup_lyrics", fake_lookup)

    result = runner.invoke(cli.cli, ["lyrics", "Song", "Artist"])

    assert result.exit_code == 0
    assert "00:01.500  hello" in result.output
    assert calls == [("Song", "Artist")]


def test_lyrics_not_found(runner, monkeypatch):
    monkeypatch.setattr(
        cli,
        "lookup_lyrics",
        lambda track, artist: LookupResponse(404, {"error": "Lyrics not found"}),
    )

    result = runner.invoke(cli.cli, ["lyrics", "Song"])

    assert result.exit_code == 1
    assert "Lyrics not found" in result.output


def test_lyrics_blank_track(runner, monkeypatch):
    monkeypatch.setattr(cli, "lookup_lyrics", lambda *a: pytest.fail("should not look up"))

    result = runner.invoke(cli.cli, ["lyrics", "   "])

    assert result.exit_code == 1
    assert "Track name cannot be empty" in result.output


def test_now_playing_without_token(runner):
    result = runner.invoke(cli.cli, ["now-playing"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {}


def test_now_playing(runner, monkeypatch):
    class FakeClient:
        def __init__(self, session):
            self.session = session

        def current_track(self):
            return CurrentTrack("t1", "Song", "Artist", None, 4200, True)

    monkeypatch.setenv("SPOTIFY_ACCESS_TOKEN", "tok")
    monkeypatch.setattr(cli, "SpotifyPlaybackClient", FakeClient)

    result = runner.invoke(cli.cli, ["now-playing"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["id"] == "t1"
    assert payload["progress_ms"] == 4200


def test_follow_requires_token(runner):
    result = runner.invoke(cli.cli, ["follow"])

    assert result.exit_code == 1
    assert "SPOTIFY_ACCESS_TOKEN" in result.output


def test_follow_runs_follower(runner, monkeypatch):
    seen = {}

    class FakeFollower:
        def __init__(self, playback, renderer=None):
            seen["session"] = playback.session
            seen["renderer"] = renderer

        async def run(self, poll_interval, frame_rate):
            seen["poll_interval"] = poll_interval
            seen["frame_rate"] = frame_rate

    monkeypatch.setenv("SPOTIFY_ACCESS_TOKEN", "tok")
    monkeypatch.setenv("SPOTIFY_REFRESH_TOKEN", "ref")
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    monkeypatch.setattr(cli, "LyricsFollower", FakeFollower)

    result = runner.invoke(cli.cli, ["follow", "--poll-interval", "1.5", "--frame-rate", "10"])

    assert result.exit_code == 0
    assert seen["poll_interval"] == 1.5
    assert seen["frame_rate"] == 10
    assert seen["session"].access_token == "tok"
    assert seen["session"].refresh_token == "ref"
    assert isinstance(seen["renderer"], cli.TerminalRenderer)


def test_follow_rejects_non_positive_rate(runner, monkeypatch):
    monkeypatch.setenv("SPOTIFY_ACCESS_TOKEN", "tok")

    result = runner.invoke(cli.cli, ["follow", "--frame-rate", "0"])

    assert result.exit_code == 2


def test_auth_url(runner, monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "my-client")

    result = runner.invoke(cli.cli, ["auth-url"])

    assert result.exit_code == 0
    assert "client_id=my-client" in result.output


def test_auth_url_without_client_id(runner):
    result = runner.invoke(cli.cli, ["auth-url"])
    assert result.exit_code == 1


def test_auth_exchange(runner, monkeypatch):
    monkeypatch.setattr(
        cli,
        "exchange_authorization_code",
        lambda code, client_id, client_secret, redirect_uri: PlaybackSession(
            f"access-{code}", refresh_token="refresh-1"
        ),
    )

    result = runner.invoke(cli.cli, ["auth-exchange", "abc"])

    assert result.exit_code == 0
    assert "SPOTIFY_ACCESS_TOKEN=access-abc" in result.output
    assert "SPOTIFY_REFRESH_TOKEN=refresh-1" in result.output


def test_auth_exchange_failure(runner, monkeypatch):
    def broken(*args):
        raise AuthError("invalid_grant")

    monkeypatch.setattr(cli, "exchange_authorization_code", broken)

    result = runner.invoke(cli.cli, ["auth-exchange", "abc"])

    assert result.exit_code == 1
    assert "invalid_grant" in result.output
