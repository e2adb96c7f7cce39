"""Observer registry: fan-out from the engine to connected websocket clients."""
import asyncio
import logging
from typing import Any

from ..config import OBSERVER_QUEUE_SIZE

logger = logging.getLogger(__name__)


class ObserverRegistry:
    """One bounded queue per observer; a writer task drains each queue.

    Pushing never awaits, so a slow client can't hold up the tick loop or
    the other clients.
    """

    def __init__(self, maxsize: int = OBSERVER_QUEUE_SIZE):
        self._maxsize = maxsize
        self._observers: dict[str, asyncio.Queue] = {}

    def register(self, observer_id: str) -> asyncio.Queue:
        """Add an observer. Returns the queue that receives (event, data) tuples."""
        q: asyncio.Queue = asyncio.Queue(maxsize=self._maxsize)
        self._observers[observer_id] = q
        return q

    def unregister(self, observer_id: str):
        self._observers.pop(observer_id, None)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def send(self, observer_id: str, event: str, data: Any) -> bool:
        """Push to a single observer. Returns False if it had to be dropped."""
        q = self._observers.get(observer_id)
        if q is None:
            return False
        if self._push(q, event, data):
            return True
        logger.warning("Dropping observer %s: queue stuck", observer_id)
        self._observers.pop(observer_id, None)
        return False

    def broadcast(self, event: str, data: Any):
        """Push an event to every observer."""
        for observer_id in list(self._observers):
            self.send(observer_id, event, data)

    @staticmethod
    def _push(q: asyncio.Queue, event: str, data: Any) -> bool:
        try:
            q.put_nowait((event, data))
            return True
        except asyncio.QueueFull:
            # Client too slow: drop oldest
            try:
                q.get_nowait()
                q.put_nowait((event, data))
                return True
            except (asyncio.QueueEmpty, asyncio.QueueFull):
                return False
