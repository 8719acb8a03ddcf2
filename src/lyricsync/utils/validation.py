"""Validation utilities."""

from pathlib import Path
from typing import Tuple

from ..exceptions import ValidationError


def validate_track_query(track_name: str, artist_name: str) -> Tuple[str, str]:
    """Validate and normalize a (track, artist) lyric lookup."""
    track = (track_name or "").strip()
    artist = (artist_name or "").strip()
    if not track:
        raise ValidationError("Track name cannot be empty")
    return track, artist


def validate_transcript_path(path: str) -> Path:
    """Validate that a transcript file exists and is readable."""
    transcript_path = Path(path)
    if not transcript_path.is_file():
        raise ValidationError(f"Transcript file not found: {path}")
    return transcript_path
