"""LRC parsing into offset-ordered, romanized transcripts.

This module handles:
- LRC timestamp parsing to integer milliseconds
- Dropping untimed metadata lines and empty (instrumental) lines
- Romanizing each retained line in transcript order
- Serializing parsed lines for the lyric lookup response
"""

import re
from typing import Callable, List, Optional

from ..utils.logging import get_logger
from .models import TimedLine, TimedTranscript
from .romanization import romanize

logger = get_logger(__name__)

# ----------------------
# LRC timestamp regex
# ----------------------
_LRC_TS_RE = re.compile(
    r"""
    \[                      # opening bracket
    (?P<min>\d{2})          # minutes, exactly two digits
    :
    (?P<sec>\d{2})          # seconds, exactly two digits
    \.
    (?P<frac>\d{2,3})       # centiseconds (2 digits) or milliseconds (3 digits)
    \]                      # closing bracket
    (?P<text>.*)            # lyric payload
    """,
    re.VERBOSE | re.ASCII,
)


def timestamp_to_ms(minutes: str, seconds: str, fraction: str) -> int:
    """Convert LRC timestamp fields to milliseconds.

    A two-digit fraction is centiseconds and is scaled by 10; a three-digit
    fraction is already milliseconds.
    """
    frac_ms = int(fraction) * 10 if len(fraction) == 2 else int(fraction)
    return (int(minutes) * 60 + int(seconds)) * 1000 + frac_ms


def parse_lrc_timestamp(ts: str) -> Optional[int]:
    """Parse a single LRC timestamp like [01:23.45] to milliseconds."""
    if not ts:
        return None
    match = _LRC_TS_RE.search(ts)
    if not match:
        return None
    return timestamp_to_ms(match.group("min"), match.group("sec"), match.group("frac"))


def parse_transcript(
    raw_transcript: str,
    romanizer: Callable[[str], str] = romanize,
) -> TimedTranscript:
    """Parse raw line-synced lyrics into a sorted TimedTranscript.

    Physical lines without a timestamp are skipped, as are lines whose
    payload is blank after the timestamp. Only the first timestamp on a
    line is used.
    """
    if not raw_transcript:
        return TimedTranscript()

    entries: List[TimedLine] = []
    skipped = 0
    for line in raw_transcript.split("\n"):
        match = _LRC_TS_RE.search(line)
        if not match:
            skipped += 1
            continue

        text = match.group("text").strip()
        if not text:
            continue

        offset_ms = timestamp_to_ms(
            match.group("min"), match.group("sec"), match.group("frac")
        )
        entries.append(TimedLine(offset_ms=offset_ms, text=romanizer(text)))

    if skipped:
        logger.debug(f"Skipped {skipped} untimed transcript lines")
    return TimedTranscript(entries)


def transcript_to_json(transcript: TimedTranscript) -> List[dict]:
    """Convert a transcript into the lookup response's `parsed` list."""
    return [line.to_json() for line in transcript]


def transcript_from_json(data: List[dict]) -> TimedTranscript:
    """Rebuild a transcript from its JSON form."""
    return TimedTranscript(
        [TimedLine(offset_ms=int(item["time"]), text=item["text"]) for item in data]
    )


def transcript_duration_ms(transcript: TimedTranscript) -> Optional[int]:
    """Offset of the last line, or None for an empty transcript."""
    if not transcript:
        return None
    return transcript[-1].offset_ms


def format_offset(offset_ms: int) -> str:
    """Format milliseconds as mm:ss.mmm for display."""
    minutes, rem = divmod(int(offset_ms), 60_000)
    seconds, millis = divmod(rem, 1000)
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"
