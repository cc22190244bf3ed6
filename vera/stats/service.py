"""Wires the store, aggregator, hub and scheduler together.

One ``StatsService`` is created per Flask app and kept on
``app.extensions["vera_stats"]``; nothing here is a module-level singleton.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ..errors import StoreError, StoreNotConfiguredError
from ..store import SurveyStore
from .aggregator import DEFAULT_WINDOW_DAYS, compute_snapshot
from .hub import BroadcastHub
from .models import Snapshot
from .schema import DEFAULT_SCHEMA, SurveySchema
from .scheduler import RecomputeScheduler

logger = logging.getLogger(__name__)


def _log_future_exception(fut: Future) -> None:
    exc = fut.exception()
    if exc is not None:
        logger.error("Background stats refresh raised: %s", exc, exc_info=exc)


class StatsService:
    def __init__(
        self,
        store: Optional[SurveyStore],
        schema: SurveySchema = DEFAULT_SCHEMA,
        days: int = DEFAULT_WINDOW_DAYS,
        debounce_seconds: float = 0.4,
        retry_seconds: float = 1.0,
        realtime: bool = True,
    ):
        self.store = store
        self.schema = schema
        self.days = days
        self.realtime = realtime
        self.hub = BroadcastHub(on_empty=self.request_refresh)
        self.scheduler = RecomputeScheduler(
            self.refresh,
            listen=store.listen if store is not None else None,
            debounce_seconds=debounce_seconds,
            retry_seconds=retry_seconds,
        )
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="stats-refresh")

    @property
    def configured(self) -> bool:
        return self.store is not None

    def _compute(self) -> Snapshot:
        if self.store is None:
            raise StoreNotConfiguredError()
        rows = self.store.fetch_rows(self.schema.columns())
        return compute_snapshot(rows, schema=self.schema, days=self.days)

    def get_overview(self) -> Snapshot:
        """Fresh snapshot for a direct read; cached for late stream subscribers."""
        snapshot = self._compute()
        self.hub.store(snapshot)
        return snapshot

    def refresh(self) -> Optional[Snapshot]:
        """Recompute and push to every stream subscriber."""
        try:
            snapshot = self._compute()
        except (StoreError, StoreNotConfiguredError) as e:
            logger.error("Failed to refresh stats snapshot: %s", e.message)
            return None
        self.hub.publish(snapshot)
        return snapshot

    def request_refresh(self) -> Future:
        fut = self._executor.submit(self.refresh)
        fut.add_done_callback(_log_future_exception)
        return fut

    def ensure_live(self) -> bool:
        if not (self.realtime and self.configured):
            return False
        return self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self._executor.shutdown(wait=False)
