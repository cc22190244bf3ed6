"""Debounced recompute plus a self-healing realtime subscription.

Change notifications arrive in bursts (a bulk insert fires one per row).
``notify_changed`` arms a single timer and ignores further notifications
until it fires, so a burst costs one recompute. The pending timer is only
set when absent and is cleared when it fires; it is never reset, so a
sustained burst cannot postpone the recompute forever.

The subscription runs in a supervisor thread: when the channel drops it
waits ``retry_seconds`` and subscribes again, with no retry ceiling.
"""
from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[Callable[..., Any], Callable[[], Any], threading.Event], None]


class SubscriptionStatus(str, enum.Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBING = "subscribing"
    SUBSCRIBED = "subscribed"
    ERRORED = "errored"


class RecomputeScheduler:
    def __init__(
        self,
        recompute: Callable[[], Any],
        listen: Optional[Listener] = None,
        debounce_seconds: float = 0.4,
        retry_seconds: float = 1.0,
    ) -> None:
        if debounce_seconds < 0 or retry_seconds < 0:
            raise ValueError("delays must be non-negative")
        self._recompute = recompute
        self._listen = listen
        self.debounce_seconds = debounce_seconds
        self.retry_seconds = retry_seconds

        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._pending: Optional[threading.Timer] = None
        self._status = SubscriptionStatus.UNSUBSCRIBED
        self._started = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Debounce
    # ------------------------------------------------------------------
    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def notify_changed(self, *_payload: Any) -> bool:
        """Arm the recompute timer unless one is already pending."""
        with self._lock:
            if self._pending is not None or self._stop.is_set():
                return False
            timer = threading.Timer(self.debounce_seconds, self._fire)
            timer.daemon = True
            self._pending = timer
        timer.start()
        return True

    def _fire(self) -> None:
        with self._lock:
            self._pending = None
        with self._run_lock:
            try:
                self._recompute()
            except Exception:  # keep the timer path usable for the next notification
                logger.exception("Failed to refresh stats snapshot")

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    @property
    def status(self) -> SubscriptionStatus:
        with self._lock:
            return self._status

    def _set_status(self, status: SubscriptionStatus) -> None:
        with self._lock:
            self._status = status

    def start(self) -> bool:
        """Start the supervisor once; later calls are no-ops."""
        with self._lock:
            if self._started or self._listen is None:
                return False
            self._started = True
            self._stop.clear()
        self._thread = threading.Thread(target=self._supervise, daemon=True, name="stats-realtime")
        self._thread.start()
        return True

    def _mark_subscribed(self) -> None:
        self._set_status(SubscriptionStatus.SUBSCRIBED)

    def _supervise(self) -> None:
        while not self._stop.is_set():
            self._set_status(SubscriptionStatus.SUBSCRIBING)
            try:
                self._listen(self.notify_changed, self._mark_subscribed, self._stop)
                if self._stop.is_set():
                    break
                logger.error("Realtime channel closed, attempting to resubscribe...")
            except Exception as e:
                logger.error("Realtime channel error, attempting to resubscribe... (%s)", e)
            self._set_status(SubscriptionStatus.ERRORED)
            self._stop.wait(self.retry_seconds)
        self._set_status(SubscriptionStatus.UNSUBSCRIBED)

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        with self._lock:
            timer, self._pending = self._pending, None
            self._started = False
        if timer is not None:
            timer.cancel()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Recompute scheduler shut down.")
