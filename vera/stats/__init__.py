from .aggregator import compute_snapshot
from .hub import BroadcastHub, QueueSink
from .models import ScaleStat, Snapshot
from .schema import DEFAULT_SCHEMA, SurveySchema
from .scheduler import RecomputeScheduler, SubscriptionStatus
from .service import StatsService

__all__ = [
    "compute_snapshot",
    "BroadcastHub",
    "QueueSink",
    "ScaleStat",
    "Snapshot",
    "DEFAULT_SCHEMA",
    "SurveySchema",
    "RecomputeScheduler",
    "SubscriptionStatus",
    "StatsService",
]
