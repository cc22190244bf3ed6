import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, current_app

from .auth import AuthGateway
from .stats.schema import SURVEY_TABLE, SurveySchema
from .stats.service import StatsService
from .store import SurveyStore

logger = logging.getLogger(__name__)

_NOT_SET = object()


@dataclass
class StoreStatus:
    configured: bool
    source: str


def init_extensions(app: Flask, store=_NOT_SET, source: Optional[str] = None) -> StatsService:
    """Create the Supabase store and the services that depend on it.

    Passing *store* (even None) bypasses credential resolution, which is how
    tests inject a fake.
    """
    if store is _NOT_SET:
        store, source = SurveyStore.from_settings(app.config)
    source = source or "env"
    if store is None:
        logger.warning("Supabase client not configured; stats and auth routes will return 500.")

    schema = SurveySchema(table=app.config.get("SURVEY_TABLE", SURVEY_TABLE))
    stats = StatsService(
        store,
        schema=schema,
        days=app.config["STATS_DAILY_WINDOW"],
        debounce_seconds=app.config["STATS_DEBOUNCE_MS"] / 1000.0,
        retry_seconds=app.config["STATS_RESUBSCRIBE_MS"] / 1000.0,
        realtime=app.config["REALTIME_ENABLED"],
    )
    app.extensions["vera_store"] = StoreStatus(configured=store is not None, source=source)
    app.extensions["vera_auth"] = AuthGateway(store)
    app.extensions["vera_stats"] = stats
    return stats


def get_stats() -> StatsService:
    return current_app.extensions["vera_stats"]


def get_auth() -> AuthGateway:
    return current_app.extensions["vera_auth"]


def get_store_status() -> StoreStatus:
    return current_app.extensions["vera_store"]
