"""Utility modules."""

from .logging import setup_logging, get_logger
from .validation import validate_track_query, validate_transcript_path

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_track_query",
    "validate_transcript_path",
]
