import pytest

from syncradio.clock import PlaybackState
from syncradio.engine import RadioEngine
from syncradio.web.state import ObserverRegistry

TRACK_A = "https://media.test/1.mp3"
TRACK_B = "https://media.test/2.mp3"


class FakeClock:
    """Manually advanced time source (epoch seconds)."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def playback_state(fake_clock):
    return PlaybackState.create((TRACK_A, TRACK_B), {TRACK_A: 3.0, TRACK_B: 2.0}, now=fake_clock())


@pytest.fixture
def engine(playback_state, fake_clock):
    return RadioEngine(playback_state, ObserverRegistry(), now=fake_clock, tick_interval=0.01)
