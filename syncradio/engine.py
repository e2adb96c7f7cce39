"""Radio engine: owns the playback state, runs the tick loop, fans out snapshots.

Everything that touches PlaybackState (tick, toggle, connect) is plain
synchronous code running on the event loop, so no two of them interleave.
"""
import asyncio
import logging
import time
from typing import Callable, Optional

from . import clock
from .clock import PlaybackState
from .config import APP_VERSION, TICK_INTERVAL
from .web.state import ObserverRegistry

logger = logging.getLogger(__name__)

PLAYBACK_EVENT = "playbackState"


class RadioEngine:
    def __init__(
        self,
        state: PlaybackState,
        observers: Optional[ObserverRegistry] = None,
        now: Callable[[], float] = time.time,
        tick_interval: float = TICK_INTERVAL,
    ):
        self.state = state
        self.observers = observers if observers is not None else ObserverRegistry()
        self._now = now
        self.tick_interval = tick_interval

        self._running = False
        self._tick_task: Optional[asyncio.Task] = None

    # ── Commands ─────────────────────────────────────────────────────────────

    def toggle_play(self):
        """Flip play/pause and tell everyone."""
        clock.toggle(self.state, self._now())
        logger.info("Playback %s at %.2fs", "resumed" if self.state.is_playing else "paused",
                    self.state.current_position)
        self.on_transition()

    # ── Broadcast ────────────────────────────────────────────────────────────

    def on_transition(self):
        """Push the full snapshot to every observer."""
        self.observers.broadcast(PLAYBACK_EVENT, self.get_snapshot())

    def on_connect(self, observer_id: str):
        """Register an observer and queue the current snapshot for it alone."""
        queue = self.observers.register(observer_id)
        self.observers.send(observer_id, PLAYBACK_EVENT, self.get_snapshot())
        return queue

    def on_disconnect(self, observer_id: str):
        self.observers.unregister(observer_id)

    # ── Tick loop ────────────────────────────────────────────────────────────

    def tick_once(self) -> bool:
        """Evaluate the clock once. Returns True if the track changed."""
        _, transitioned = clock.tick(self.state, self._now())
        if transitioned:
            logger.info("Switching to track: %s", self.state.current_track)
            self.on_transition()
        return transitioned

    async def run(self):
        """Tick until stopped."""
        self._running = True
        while self._running:
            try:
                self.tick_once()
            except Exception:
                logger.exception("Tick error")
            await asyncio.sleep(self.tick_interval)

    def start(self) -> asyncio.Task:
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.create_task(self.run())
            logger.info("Tick loop started (every %.0f ms)", self.tick_interval * 1000)
        return self._tick_task

    async def stop(self):
        """Graceful shutdown."""
        self._running = False
        if self._tick_task and not self._tick_task.done():
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
        self._tick_task = None

    @property
    def ticking(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    # ── Projections ──────────────────────────────────────────────────────────

    def get_snapshot(self) -> dict:
        """Full state for a client, stamped with a fresh serverTime."""
        return clock.snapshot(self.state, self._now())

    def get_status(self) -> dict:
        return clock.status(self.state, self._now())

    def get_health(self) -> dict:
        return {
            "status": "ok" if self.ticking else "degraded",
            "version": APP_VERSION,
            "observers": self.observers.observer_count,
            "ticking": self.ticking,
            "tracks": len(self.state.playlist),
        }
