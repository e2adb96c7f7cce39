"""Unit tests for the playback clock."""

from __future__ import annotations

import pytest

from syncradio.clock import PlaybackState, build_playlist, snapshot, status, tick, toggle
from syncradio.config import FALLBACK_DURATION

A = "https://media.test/a.mp3"
B = "https://media.test/b.mp3"
C = "https://media.test/c.mp3"


def _make_state(durations: dict | None = None, playlist=(A, B), now: float = 0.0) -> PlaybackState:
    if durations is None:
        durations = {A: 3.0, B: 2.0}
    return PlaybackState.create(playlist, durations, now=now)


class TestBuildPlaylist:
    def test_joins_base_and_names(self):
        assert build_playlist("https://cdn.test/radio/", ("1.mp3", "2.mp3")) == (
            "https://cdn.test/radio/1.mp3",
            "https://cdn.test/radio/2.mp3",
        )

    def test_empty_playlist_rejected(self):
        with pytest.raises(ValueError):
            build_playlist("https://cdn.test", ())

    def test_state_rejects_empty_playlist(self):
        with pytest.raises(ValueError):
            PlaybackState(playlist=())


class TestCreate:
    def test_starts_on_first_track_playing(self):
        state = _make_state(now=100.0)
        assert state.current_track == A
        assert state.current_track_index == 0
        assert state.is_playing is True
        assert state.start_time == 100.0
        assert state.current_position == 0.0


class TestTick:
    def test_position_derived_from_origin(self):
        state = _make_state(now=10.0)
        _, transitioned = tick(state, 11.5)
        assert transitioned is False
        assert state.current_position == pytest.approx(1.5)
        assert state.current_track == A

    def test_irregular_ticks_do_not_drift(self):
        state = _make_state(now=0.0)
        for t in (0.05, 0.4, 0.41, 1.9, 2.25):
            tick(state, t)
        assert state.current_position == pytest.approx(2.25)

    def test_paused_is_noop(self):
        state = _make_state(now=0.0)
        tick(state, 1.0)
        toggle(state, 1.0)
        _, transitioned = tick(state, 50.0)
        assert transitioned is False
        assert state.current_position == pytest.approx(1.0)
        assert state.current_track == A

    def test_expiry_at_exact_duration(self):
        state = _make_state(now=0.0)
        _, transitioned = tick(state, 3.0)
        assert transitioned is True
        assert state.current_track == B

    def test_scenario_two_tracks_wrap(self):
        state = _make_state(now=0.0)

        _, transitioned = tick(state, 3.1)
        assert transitioned is True
        assert state.current_track == B
        assert state.current_track_index == 1
        assert state.current_position == 0.0
        assert state.start_time == pytest.approx(3.1)

        _, transitioned = tick(state, 5.3)
        assert transitioned is True
        assert state.current_track == A
        assert state.current_track_index == 0
        assert state.current_position == 0.0

    def test_wraps_after_playlist_length_expiries(self):
        durations = {A: 1.0, B: 1.0, C: 1.0}
        state = _make_state(durations, playlist=(A, B, C), now=0.0)
        now = 0.0
        for _ in range(3):
            now += 1.5
            _, transitioned = tick(state, now)
            assert transitioned is True
        assert state.current_track_index == 0
        assert state.current_track == A

    def test_long_gap_is_one_transition(self):
        state = _make_state(now=0.0)
        _, transitioned = tick(state, 100.0)
        assert transitioned is True
        assert state.current_track == B
        assert state.current_position == 0.0

    def test_missing_duration_uses_fallback(self):
        state = _make_state({A: 3.0}, playlist=(C, A), now=0.0)
        assert state.current_duration == FALLBACK_DURATION

        _, transitioned = tick(state, FALLBACK_DURATION - 0.1)
        assert transitioned is False
        _, transitioned = tick(state, FALLBACK_DURATION + 0.1)
        assert transitioned is True
        assert state.current_track == A


class TestToggle:
    def test_pause_freezes_position(self):
        state = _make_state(now=0.0)
        tick(state, 1.2)
        start = state.start_time

        toggle(state, 1.2)
        assert state.is_playing is False
        assert state.start_time == start
        assert state.current_position == pytest.approx(1.2)

    def test_double_toggle_restores(self):
        state = _make_state(now=0.0)
        tick(state, 0.8)
        toggle(toggle(state, 0.8), 0.8)
        assert state.is_playing is True
        tick(state, 0.8)
        assert state.current_position == pytest.approx(0.8)

    def test_pause_resume_preserves_position(self):
        state = _make_state(now=0.0)
        tick(state, 1.0)
        toggle(state, 1.0)
        toggle(state, 61.0)

        assert state.start_time == pytest.approx(60.0)
        tick(state, 61.0)
        assert state.current_position == pytest.approx(1.0)
        assert state.current_track == A

    def test_resume_then_expiry_counts_only_played_time(self):
        state = _make_state(now=0.0)
        tick(state, 2.0)
        toggle(state, 2.0)
        toggle(state, 30.0)
        _, transitioned = tick(state, 30.5)
        assert transitioned is False
        _, transitioned = tick(state, 31.1)
        assert transitioned is True
        assert state.current_track == B


class TestProjections:
    def test_snapshot_fields(self):
        state = _make_state(now=1_000.0)
        tick(state, 1_001.25)
        snap = snapshot(state, 1_001.5)
        assert snap == {
            "currentTrack": A,
            "isPlaying": True,
            "startTime": 1_000_000,
            "currentPosition": pytest.approx(1.25),
            "playlist": [A, B],
            "currentTrackIndex": 0,
            "trackDurations": {A: 3.0, B: 2.0},
            "serverTime": 1_001_500,
        }

    def test_snapshot_is_a_copy(self):
        state = _make_state(now=0.0)
        snap = snapshot(state, 0.0)
        snap["trackDurations"][A] = 99.0
        assert state.track_durations[A] == 3.0

    def test_status_projection(self):
        state = _make_state(now=0.0)
        tick(state, 0.5)
        assert status(state, 0.75) == {
            "status": "ok",
            "currentTrack": A,
            "isPlaying": True,
            "currentPosition": pytest.approx(0.5),
            "serverTime": 750,
        }
