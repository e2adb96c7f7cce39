"""Playback clock: the shared on-air position, derived from wall-clock time.

Nothing here does I/O or reads the system clock: every operation takes
``now`` (epoch seconds) from the caller, so the engine owns time and the
tests can drive it directly.

Position is never accumulated tick by tick. It is always ``now - start_time``,
so irregular or missed ticks can't make it drift.
"""
from dataclasses import dataclass, field
from typing import Optional

from .config import FALLBACK_DURATION
from .utils import to_millis


def build_playlist(base_url: str, names: tuple[str, ...]) -> tuple[str, ...]:
    """Join the base location with each item name. Raises on an empty playlist."""
    if not names:
        raise ValueError("playlist needs at least one track")
    base = base_url.rstrip("/")
    return tuple(f"{base}/{name}" for name in names)


@dataclass
class PlaybackState:
    playlist: tuple[str, ...]
    track_durations: dict[str, float] = field(default_factory=dict)
    current_track_index: int = 0
    is_playing: bool = True
    start_time: float = 0.0
    current_position: float = 0.0

    def __post_init__(self):
        if not self.playlist:
            raise ValueError("playlist needs at least one track")
        self.current_track_index %= len(self.playlist)

    @classmethod
    def create(cls, playlist, track_durations: Optional[dict] = None, now: float = 0.0) -> "PlaybackState":
        """Fresh state: first track, playing, position 0 starting at ``now``."""
        return cls(
            playlist=tuple(playlist),
            track_durations=track_durations if track_durations is not None else {},
            current_track_index=0,
            is_playing=True,
            start_time=now,
            current_position=0.0,
        )

    @property
    def current_track(self) -> str:
        return self.playlist[self.current_track_index]

    def duration_of(self, track: str) -> float:
        return self.track_durations.get(track) or FALLBACK_DURATION

    @property
    def current_duration(self) -> float:
        return self.duration_of(self.current_track)


def tick(state: PlaybackState, now: float) -> tuple[PlaybackState, bool]:
    """Advance the clock to ``now``. Returns (state, transitioned).

    At most one track change per call: after a long stall the clock lands at
    the start of the next track instead of replaying every skipped one.
    """
    if not state.is_playing:
        return state, False

    state.current_position = now - state.start_time
    if state.current_position < state.current_duration:
        return state, False

    state.current_track_index = (state.current_track_index + 1) % len(state.playlist)
    state.start_time = now
    state.current_position = 0.0
    return state, True


def toggle(state: PlaybackState, now: float) -> PlaybackState:
    """Flip play/pause without moving the position.

    Pausing only freezes ``current_position``. Resuming moves the origin so
    that ``now - start_time`` equals the frozen position again.
    """
    state.is_playing = not state.is_playing
    if state.is_playing:
        state.start_time = now - state.current_position
    return state


def snapshot(state: PlaybackState, server_time: float) -> dict:
    """Full self-contained state for clients (``playbackState`` payload)."""
    return {
        "currentTrack": state.current_track,
        "isPlaying": state.is_playing,
        "startTime": to_millis(state.start_time),
        "currentPosition": state.current_position,
        "playlist": list(state.playlist),
        "currentTrackIndex": state.current_track_index,
        "trackDurations": dict(state.track_durations),
        "serverTime": to_millis(server_time),
    }


def status(state: PlaybackState, server_time: float) -> dict:
    return {
        "status": "ok",
        "currentTrack": state.current_track,
        "isPlaying": state.is_playing,
        "currentPosition": state.current_position,
        "serverTime": to_millis(server_time),
    }
