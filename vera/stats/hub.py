"""Fan-out of snapshots to open ``/api/stats/stream`` connections."""
import logging
import queue
import threading
from typing import Callable, Iterator, Optional, Set

from .models import Snapshot

logger = logging.getLogger(__name__)

_CLOSED = object()


class SinkFull(Exception):
    """The consumer fell behind and its buffer is full."""


class QueueSink:
    """Writable end of one streaming request.

    ``send`` never blocks; the request thread drains the queue through
    :meth:`frames`.
    """

    def __init__(self, maxsize: int = 16):
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self.closed = False

    def send(self, payload: str) -> None:
        if self.closed:
            raise SinkFull("sink closed")
        try:
            self._queue.put_nowait(payload)
        except queue.Full as e:
            raise SinkFull("subscriber buffer full") from e

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass

    def frames(self, keepalive_seconds: float = 15.0) -> Iterator[str]:
        """Yield SSE frames until the sink is closed."""
        while not self.closed:
            try:
                item = self._queue.get(timeout=keepalive_seconds)
            except queue.Empty:
                yield ": keep-alive\n\n"
                continue
            if item is _CLOSED:
                return
            yield f"data: {item}\n\n"


class BroadcastHub:
    def __init__(self, on_empty: Optional[Callable[[], None]] = None):
        self._lock = threading.Lock()
        self._subscribers: Set[QueueSink] = set()
        self._latest: Optional[Snapshot] = None
        self._on_empty = on_empty

    @property
    def latest(self) -> Optional[Snapshot]:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def store(self, snapshot: Snapshot) -> None:
        """Remember *snapshot* as latest without pushing it."""
        with self._lock:
            self._latest = snapshot

    def publish(self, snapshot: Snapshot) -> int:
        payload = snapshot.to_json()
        with self._lock:
            self._latest = snapshot
            sinks = list(self._subscribers)

        delivered = 0
        for sink in sinks:
            try:
                sink.send(payload)
                delivered += 1
            except Exception as e:
                logger.warning("Dropped stats update for one subscriber: %s", e)
        return delivered

    def subscribe(self, sink: QueueSink) -> None:
        with self._lock:
            self._subscribers.add(sink)
            latest = self._latest
            count = len(self._subscribers)
        logger.debug("Stream subscriber connected (%d active)", count)

        if latest is not None:
            try:
                sink.send(latest.to_json())
            except Exception as e:
                logger.warning("Could not send cached snapshot to new subscriber: %s", e)
        elif self._on_empty is not None:
            self._on_empty()

    def unsubscribe(self, sink: QueueSink) -> None:
        with self._lock:
            self._subscribers.discard(sink)
            count = len(self._subscribers)
        sink.close()
        logger.debug("Stream subscriber disconnected (%d active)", count)
