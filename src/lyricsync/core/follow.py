"""Client loop: follow the playing track and highlight the current lyric line.

Two cadences share one event loop:

- the frame task ticks the tracker and selector many times per second
- the poll task fetches a playback snapshot every few seconds

Blocking HTTP (polls, lyric lookups) runs in worker threads via
``asyncio.to_thread``; results are applied back on the loop thread, so the
shared state below is only ever touched by one thread and the frame task
never waits on the network.
"""

import asyncio
from typing import Callable, Optional, Set

from .. import config
from ..utils.logging import get_logger
from .models import CurrentTrack, PlaybackPoll, PollStatus, TimedLine, TimedTranscript
from .playback import SpotifyPlaybackClient
from .selector import ActiveLineSelector
from .service import fetch_transcript
from .tracker import PlaybackTracker, TrackerState

logger = get_logger(__name__)


class LyricsRenderer:
    """Rendering collaborator; the default does nothing."""

    def on_track(self, track: CurrentTrack) -> None:
        pass

    def on_lyrics(self, track: CurrentTrack, transcript: TimedTranscript) -> None:
        pass

    def on_activate(self, index: int, line: TimedLine) -> None:
        pass


class LyricsFollower:
    """Shared client-local state plus the two periodic tasks that drive it."""

    def __init__(
        self,
        playback: SpotifyPlaybackClient,
        lyrics_fn: Callable[[str, str], TimedTranscript] = fetch_transcript,
        renderer: Optional[LyricsRenderer] = None,
        tracker: Optional[PlaybackTracker] = None,
    ):
        self.playback = playback
        self.lyrics_fn = lyrics_fn
        self.renderer = renderer or LyricsRenderer()
        self.tracker = tracker or PlaybackTracker()
        self.selector = ActiveLineSelector()
        self.current_track: Optional[CurrentTrack] = None
        self._lyric_tasks: Set["asyncio.Task[None]"] = set()

    @property
    def current_track_id(self) -> Optional[str]:
        return self.current_track.id if self.current_track else None

    # ----------------------
    # State transitions
    # ----------------------
    def apply_snapshot(
        self, track: Optional[CurrentTrack], now: Optional[float] = None
    ) -> Optional[CurrentTrack]:
        """Feed a track to the tracker (None: nothing playing); returns it if it changed."""
        if track is None:
            if self.current_track is not None:
                logger.info("Playback stopped")
            self.tracker.reset()
            self.current_track = None
            return None

        now = self.tracker.now() if now is None else now
        self.tracker.observe(track.to_snapshot(captured_at_ms=now), now=now)
        if track.id == self.current_track_id:
            return None

        logger.info(f"Now playing: {track.name} - {track.artist}")
        self.current_track = track
        self.selector.load(TimedTranscript())
        self.renderer.on_track(track)
        return track

    def set_transcript(self, track: CurrentTrack, transcript: TimedTranscript) -> bool:
        """Install lyrics for a track unless the track has changed meanwhile."""
        if track.id != self.current_track_id:
            logger.debug(f"Dropping stale lyrics for {track.name}")
            return False
        self.selector.load(transcript)
        self.renderer.on_lyrics(track, transcript)
        return True

    def load_lyrics(self, track: CurrentTrack) -> TimedTranscript:
        try:
            return self.lyrics_fn(track.name, track.artist)
        except Exception as e:
            logger.warning(f"Lyrics unavailable for {track.name}: {e}")
            return TimedTranscript()

    def apply_poll(
        self, poll: PlaybackPoll, now: Optional[float] = None
    ) -> Optional[CurrentTrack]:
        """Apply a poll; a failed poll leaves the track and tracker untouched."""
        if poll.status is PollStatus.FAILED:
            logger.debug("Playback poll failed; keeping current state")
            return None
        return self.apply_snapshot(poll.track, now=now)

    def handle_poll(self, poll: PlaybackPoll, now: Optional[float] = None) -> None:
        """Apply a poll result and, on a track change, load lyrics inline."""
        changed = self.apply_poll(poll, now=now)
        if changed is not None:
            self.set_transcript(changed, self.load_lyrics(changed))

    def frame(self, now: Optional[float] = None) -> Optional[int]:
        """One rendering frame; returns the newly activated index, if any."""
        if self.tracker.state is not TrackerState.ADVANCING:
            return None
        estimated = self.tracker.tick(now)
        idx = self.selector.update(estimated)
        if idx is not None:
            self.renderer.on_activate(idx, self.selector.transcript[idx])
        return idx

    # ----------------------
    # Periodic tasks
    # ----------------------
    async def _load_lyrics_async(self, track: CurrentTrack) -> None:
        transcript = await asyncio.to_thread(self.load_lyrics, track)
        self.set_transcript(track, transcript)

    async def poll_once(self) -> None:
        poll = await asyncio.to_thread(self.playback.poll)
        changed = self.apply_poll(poll)
        if changed is not None:
            task = asyncio.create_task(self._load_lyrics_async(changed))
            self._lyric_tasks.add(task)
            task.add_done_callback(self._lyric_tasks.discard)

    async def _poll_loop(self, interval: float, stop: asyncio.Event) -> None:
        while not stop.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    async def _frame_loop(self, period: float, stop: asyncio.Event) -> None:
        while not stop.is_set():
            self.frame()
            await asyncio.sleep(period)

    async def run(
        self,
        poll_interval: float = config.POLL_INTERVAL,
        frame_rate: float = config.FRAME_RATE,
        stop: Optional[asyncio.Event] = None,
    ) -> None:
        """Run both tasks until `stop` is set."""
        stop = stop or asyncio.Event()
        tasks = [
            asyncio.create_task(self._frame_loop(1.0 / frame_rate, stop)),
            asyncio.create_task(self._poll_loop(poll_interval, stop)),
        ]
        try:
            await stop.wait()
        finally:
            for task in tasks + list(self._lyric_tasks):
                task.cancel()
            await asyncio.gather(
                *tasks, *self._lyric_tasks, return_exceptions=True
            )
