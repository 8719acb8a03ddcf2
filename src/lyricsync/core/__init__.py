"""Core functionality modules."""

from .models import (
    CurrentTrack,
    LookupResponse,
    PlaybackPoll,
    PlaybackSnapshot,
    PollStatus,
    ResolvedTranscript,
    ResolveStatus,
    Romanization,
    RomanizationStatus,
    ScriptKind,
    TimedLine,
    TimedTranscript,
    TrackedPosition,
)

__all__ = [
    "CurrentTrack",
    "LookupResponse",
    "PlaybackPoll",
    "PlaybackSnapshot",
    "PollStatus",
    "ResolvedTranscript",
    "ResolveStatus",
    "Romanization",
    "RomanizationStatus",
    "ScriptKind",
    "TimedLine",
    "TimedTranscript",
    "TrackedPosition",
]
