"""Per-session fan-out of game events.

Each SSE connection holds a ``Subscription`` with a bounded queue. The game
loop publishes into every queue of the session; a subscriber that falls so
far behind that its queue fills is dropped. Events are also mirrored to the
Socket.IO room ``session:<id>`` when an emitter is attached.
"""

import logging
import queue
import threading
from typing import Any, Callable, Dict, Optional, Set

# Sentinel pushed to a subscriber's queue when it must stop listening
CLOSED = object()


def room_for(session_id: str) -> str:
    return f"session:{session_id}"


class Subscription:
    def __init__(self, session_id: str, maxsize: int) -> None:
        self.session_id = session_id
        self.queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self.closed = False

    def listen(self, keepalive_sec: float):
        """Yield ``(event, data)`` tuples, or None after ``keepalive_sec`` of
        silence. Stops once the subscription is closed."""
        while True:
            try:
                item = self.queue.get(timeout=keepalive_sec)
            except queue.Empty:
                if self.closed:
                    return
                yield None
                continue
            if item is CLOSED:
                return
            yield item


class BroadcastChannel:
    def __init__(self, maxsize: int = 256, emit: Optional[Callable[..., Any]] = None,
                 logger: Optional[logging.Logger] = None) -> None:
        self._maxsize = maxsize
        self._emit = emit
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Set[Subscription]] = {}

    def subscribe(self, session_id: str) -> Subscription:
        sub = Subscription(session_id, self._maxsize)
        with self._lock:
            self._subscribers.setdefault(session_id, set()).add(sub)
        self._logger.info(f"[subscribe] session={session_id} subscribers={self.subscriber_count(session_id)}")
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.closed = True
        with self._lock:
            subs = self._subscribers.get(sub.session_id)
            if subs is not None:
                subs.discard(sub)
                if not subs:
                    self._subscribers.pop(sub.session_id, None)

    def subscriber_count(self, session_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(session_id, ()))

    def publish(self, session_id: str, event: str, data: Dict[str, Any]) -> int:
        """Push an event to every subscriber of the session; returns how many
        subscribers received it."""
        with self._lock:
            subs = list(self._subscribers.get(session_id, ()))
        delivered = 0
        for sub in subs:
            try:
                sub.queue.put_nowait((event, data))
                delivered += 1
            except queue.Full:
                self._logger.warning(f"[subscriber-drop] session={session_id} queue full")
                self.unsubscribe(sub)
        if self._emit is not None:
            try:
                self._emit(event, data, to=room_for(session_id), namespace='/ws')
            except Exception:
                self._logger.exception(f"[emit-failed] session={session_id} event={event}")
        return delivered

    def close(self, session_id: str) -> None:
        """Detach all subscribers of a session after their pending events."""
        with self._lock:
            subs = self._subscribers.pop(session_id, set())
        for sub in subs:
            sub.closed = True
            try:
                sub.queue.put_nowait(CLOSED)
            except queue.Full:
                # listen() returns on the next timeout once closed is set
                pass
