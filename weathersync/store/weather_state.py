"""Process-wide holder of the latest current-weather and forecast payloads.

One instance is built by the composition root and handed to every consumer.
Publishing replaces the held payload and queues a notification for each
subscriber of that kind. Every subscriber owns a delivery channel (a FIFO queue
drained by its own worker thread), so a slow subscriber delays only itself.
A subscriber sees notifications in publish order; there is no ordering between
different subscribers.
"""

import logging
import queue
import threading
import time
from collections.abc import Callable

from weathersync.models.common import DataKind, Payload

logger = logging.getLogger(__name__)

Subscriber = Callable[[DataKind], None]

_CLOSE = object()


class _Channel:
    """Delivery queue and worker thread for one subscriber."""

    def __init__(self, subscriber: Subscriber):
        self.subscriber = subscriber
        self._queue: queue.Queue = queue.Queue()
        self._idle = threading.Condition()
        self._pending = 0
        self._thread = threading.Thread(
            target=self._run, name="store-subscriber", daemon=True
        )
        self._thread.start()

    def put(self, kind: DataKind) -> None:
        with self._idle:
            self._pending += 1
        self._queue.put(kind)

    def close(self) -> None:
        self._queue.put(_CLOSE)

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _CLOSE:
                return
            try:
                self.subscriber(item)
            except Exception:
                logger.exception("Subscriber %r failed on %s update", self.subscriber, item.value)
            finally:
                with self._idle:
                    self._pending -= 1
                    if self._pending == 0:
                        self._idle.notify_all()


class WeatherStateStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._payloads: dict[DataKind, Payload | None] = {
            DataKind.CURRENT: None,
            DataKind.FORECAST: None,
        }
        self._subscribers: dict[DataKind, list[Subscriber]] = {
            DataKind.CURRENT: [],
            DataKind.FORECAST: [],
        }
        self._channels: dict[Subscriber, _Channel] = {}

    def publish_current(self, payload: Payload | None) -> bool:
        return self._publish(DataKind.CURRENT, payload)

    def publish_forecast(self, payload: Payload | None) -> bool:
        return self._publish(DataKind.FORECAST, payload)

    def get_current(self) -> Payload | None:
        with self._lock:
            return self._payloads[DataKind.CURRENT]

    def get_forecast(self) -> Payload | None:
        with self._lock:
            return self._payloads[DataKind.FORECAST]

    def get(self, kind: DataKind) -> Payload | None:
        with self._lock:
            return self._payloads[kind]

    def subscribe(self, kind: DataKind, subscriber: Subscriber) -> None:
        with self._lock:
            if subscriber in self._subscribers[kind]:
                return
            self._subscribers[kind].append(subscriber)
            if subscriber not in self._channels:
                self._channels[subscriber] = _Channel(subscriber)

    def unsubscribe(self, kind: DataKind, subscriber: Subscriber) -> None:
        """Stop notifying a subscriber of one kind. Already queued notifications still arrive."""
        with self._lock:
            if subscriber not in self._subscribers[kind]:
                return
            self._subscribers[kind].remove(subscriber)
            if not any(subscriber in subs for subs in self._subscribers.values()):
                self._channels.pop(subscriber).close()

    def subscriber_count(self, kind: DataKind) -> int:
        with self._lock:
            return len(self._subscribers[kind])

    def drain(self, timeout: float | None = None) -> bool:
        """Block until every queued notification has been delivered.

        Returns False if the timeout ran out first. Must not be called from a
        subscriber callback, which would wait on its own channel.
        """
        with self._lock:
            channels = list(self._channels.values())
        deadline = None if timeout is None else time.monotonic() + timeout
        for channel in channels:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not channel.wait_idle(remaining):
                return False
        return True

    def close(self) -> None:
        """Drop every subscriber and stop their workers."""
        with self._lock:
            for subs in self._subscribers.values():
                subs.clear()
            for channel in self._channels.values():
                channel.close()
            self._channels.clear()

    def _publish(self, kind: DataKind, payload: Payload | None) -> bool:
        """Replace the payload of one kind and notify. Empty payloads are dropped."""
        if not payload:
            logger.error("Attempted to publish empty %s payload, ignoring", kind.value)
            return False
        with self._lock:
            self._payloads[kind] = payload
            # Queued under the lock so each channel sees publishes in order
            for subscriber in self._subscribers[kind]:
                self._channels[subscriber].put(kind)
        return True
