"""Pick the active lyric line for a playback position."""

from typing import Optional

from .models import TimedTranscript


def active_index(estimated_ms: float, transcript: TimedTranscript) -> Optional[int]:
    """Largest index whose offset is <= estimated_ms, or None before line 0."""
    idx = None
    for i, line in enumerate(transcript):
        if line.offset_ms <= estimated_ms:
            idx = i
    return idx


class ActiveLineSelector:
    """Emit an activation whenever the active line changes.

    A position before the first line never un-highlights an already active
    line; the last activation stays in place until a different line wins.
    """

    def __init__(self, transcript: Optional[TimedTranscript] = None):
        self.transcript = transcript if transcript is not None else TimedTranscript()
        self.current_index: Optional[int] = None

    def load(self, transcript: TimedTranscript) -> None:
        """Replace the transcript wholesale and forget the active line."""
        self.transcript = transcript
        self.current_index = None

    def update(self, estimated_ms: float) -> Optional[int]:
        """Return the newly activated index, or None when nothing changed."""
        idx = active_index(estimated_ms, self.transcript)
        if idx is None or idx == self.current_index:
            return None
        self.current_index = idx
        return idx
