"""Custom exceptions for Lyricsync."""

class LyricSyncError(Exception):
    """Base exception for Lyricsync."""
    pass

class ConfigError(LyricSyncError):
    """Invalid configuration value."""
    pass

class ValidationError(LyricSyncError):
    """Invalid input parameters."""
    pass

class LyricsError(LyricSyncError):
    """Error reading or processing a lyric transcript."""
    pass

class PlaybackError(LyricSyncError):
    """Error talking to the playback-state provider."""
    pass

class AuthError(PlaybackError):
    """Missing or rejected playback authorization."""
    pass
