"""Lyricsync - time-synced, romanized lyrics for the track that is playing."""

__version__ = "0.1.0"
