"""In-process fan-out of notification payloads to live SSE subscribers."""
from __future__ import annotations

import queue
import threading
from typing import Any

# Bounded so one stalled browser tab cannot grow memory without limit
SUBSCRIBER_QUEUE_SIZE = 100


class NotificationHub:
    """Minimal pub/sub hub; each subscriber owns a bounded queue."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[queue.Queue] = []

    def subscribe(self) -> queue.Queue:
        q: queue.Queue = queue.Queue(maxsize=SUBSCRIBER_QUEUE_SIZE)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            if q in self._subscribers:
                self._subscribers.remove(q)

    def publish(self, payload: dict[str, Any]) -> int:
        """Push payload to every subscriber; full queues drop the message. Returns deliveries."""
        with self._lock:
            targets = list(self._subscribers)
        delivered = 0
        for q in targets:
            try:
                q.put_nowait(payload)
                delivered += 1
            except queue.Full:
                continue
        return delivered

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
