"""Data models for timed lyrics, playback state and lookup outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


class ScriptKind(str, Enum):
    """Script detected in a text fragment, in classification priority order."""

    KANA = "kana"
    HANGUL = "hangul"
    HAN = "han"
    OTHER = "other"


class RomanizationStatus(str, Enum):
    CONVERTED = "converted"
    UNCHANGED = "unchanged"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class Romanization:
    """Result of romanizing one fragment."""

    text: str
    script: ScriptKind
    status: RomanizationStatus = RomanizationStatus.UNCHANGED


@dataclass(frozen=True)
class TimedLine:
    """A single lyric line and the offset at which it starts."""

    offset_ms: int
    text: str

    def to_json(self) -> Dict[str, Any]:
        return {"time": self.offset_ms, "text": self.text}


class TimedTranscript:
    """Immutable, offset-ordered sequence of TimedLine.

    Lines are stable-sorted by offset on construction, so equal offsets keep
    their transcript order. An empty transcript means no lyrics were found.
    """

    __slots__ = ("_lines",)

    def __init__(self, lines: Sequence[TimedLine] = ()):
        self._lines: Tuple[TimedLine, ...] = tuple(
            sorted(lines, key=lambda line: line.offset_ms)
        )

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[TimedLine]:
        return iter(self._lines)

    def __getitem__(self, index: int) -> TimedLine:
        return self._lines[index]

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimedTranscript):
            return NotImplemented
        return self._lines == other._lines

    def __hash__(self) -> int:
        return hash(self._lines)

    def __repr__(self) -> str:
        return f"TimedTranscript({list(self._lines)!r})"

    @property
    def lines(self) -> Tuple[TimedLine, ...]:
        return self._lines

    @property
    def offsets(self) -> List[int]:
        return [line.offset_ms for line in self._lines]

    @property
    def texts(self) -> List[str]:
        return [line.text for line in self._lines]


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Playback state observed at one poll."""

    track_id: str
    position_ms: int
    is_playing: bool
    captured_at_ms: float


@dataclass
class TrackedPosition:
    """Client-local extrapolated playback position."""

    estimated_ms: float = 0.0
    is_playing: bool = False
    last_observed_ms: Optional[float] = None


@dataclass(frozen=True)
class CurrentTrack:
    """Normalized currently-playing state from the playback provider."""

    id: str
    name: str
    artist: str
    album_art_url: Optional[str]
    progress_ms: int
    is_playing: bool

    def to_snapshot(self, captured_at_ms: float) -> PlaybackSnapshot:
        return PlaybackSnapshot(
            track_id=self.id,
            position_ms=max(int(self.progress_ms), 0),
            is_playing=self.is_playing,
            captured_at_ms=captured_at_ms,
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "artist": self.artist,
            "albumArt": self.album_art_url,
            "progress_ms": self.progress_ms,
            "is_playing": self.is_playing,
        }


class PollStatus(str, Enum):
    ACTIVE = "active"
    IDLE = "idle"
    FAILED = "failed"


@dataclass(frozen=True)
class PlaybackPoll:
    """One currently-playing poll.

    IDLE means the provider reported nothing playing; FAILED means the poll
    itself did not succeed and says nothing about playback.
    """

    status: PollStatus
    track: Optional[CurrentTrack] = None

    @classmethod
    def active(cls, track: CurrentTrack) -> "PlaybackPoll":
        return cls(PollStatus.ACTIVE, track)

    @classmethod
    def idle(cls) -> "PlaybackPoll":
        return cls(PollStatus.IDLE)

    @classmethod
    def failed(cls) -> "PlaybackPoll":
        return cls(PollStatus.FAILED)


class ResolveStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolvedTranscript:
    """Outcome of the lyric source fallback chain."""

    status: ResolveStatus
    raw: Optional[str] = None
    source: str = ""
    attempts: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def found(self) -> bool:
        return self.status is ResolveStatus.FOUND

    @classmethod
    def not_found(cls, attempts: Sequence[str] = ()) -> "ResolvedTranscript":
        return cls(status=ResolveStatus.NOT_FOUND, attempts=tuple(attempts))


@dataclass(frozen=True)
class LookupResponse:
    """Inbound lyric lookup response as (HTTP-equivalent status, JSON body)."""

    status_code: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code == 200
