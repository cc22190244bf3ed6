"""Turn raw ``reponses_sondage`` rows into a :class:`Snapshot`.

Pure and deterministic for a given row list and ``now``: nothing here talks
to Supabase. Malformed inputs (bad timestamps, odd multi-choice entries) are
dropped from the affected statistic instead of failing the whole snapshot.
"""
import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .models import ScaleStat, Snapshot
from .schema import DEFAULT_SCHEMA, SurveySchema

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7

# words pandas resolves to the current time; never real submission stamps
RELATIVE_STAMPS = {"now", "today", "tomorrow", "yesterday"}

Row = Mapping[str, Any]


def _is_number(v: object) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return math.isfinite(v)


def _multi_choice_key(entry: object) -> Optional[str]:
    # plain strings, or {"value": ...} / {"label": ...} objects
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        key = entry.get("value") or entry.get("label")
        if isinstance(key, str):
            return key
    return None


def single_choice_counts(rows: Sequence[Row], columns: Iterable[str]) -> Dict[str, List[Dict[str, Any]]]:
    result = {}
    for column in columns:
        counts: Counter = Counter()
        for row in rows:
            value = row.get(column)
            if value is None or isinstance(value, (list, dict)):
                continue
            counts[value] += 1
        # Counter keeps insertion order, i.e. first-seen order
        result[column] = [{"value": value, "count": count} for value, count in counts.items()]
    return result


def scale_stats(rows: Sequence[Row], columns: Iterable[str]) -> Dict[str, ScaleStat]:
    result = {}
    for column in columns:
        numbers = [row.get(column) for row in rows if _is_number(row.get(column))]
        if not numbers:
            result[column] = ScaleStat()
            continue
        result[column] = ScaleStat(
            avg=float(np.mean(numbers)),
            min=min(numbers),
            max=max(numbers),
        )
    return result


def multi_choice_counts(rows: Sequence[Row], column: str) -> Dict[str, int]:
    counts: Counter = Counter()
    for row in rows:
        value = row.get(column)
        if not value or not isinstance(value, list):
            continue
        for entry in value:
            key = _multi_choice_key(entry)
            if key:
                counts[key] += 1
    return dict(counts)


def daily_counts(rows: Sequence[Row], days: int = DEFAULT_WINDOW_DAYS,
                 now: Optional[datetime] = None,
                 schema: SurveySchema = DEFAULT_SCHEMA) -> List[Dict[str, Any]]:
    """Zero-filled response counts for the trailing *days* UTC days, oldest first."""
    if days < 1:
        raise ValueError("days must be >= 1")
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    stamps = []
    for row in rows:
        stamp = row.get(schema.created_at) or row.get(schema.created_at_fallback)
        if isinstance(stamp, str) and stamp.strip().lower() in RELATIVE_STAMPS:
            continue
        if isinstance(stamp, (str, datetime)):
            stamps.append(stamp)

    per_day: Dict[str, int] = {}
    if stamps:
        parsed = pd.to_datetime(pd.Series(stamps, dtype="object"), utc=True,
                                errors="coerce", format="mixed")
        valid = parsed.dropna()
        if len(valid) < len(parsed):
            logger.debug("Skipped %d rows with unparsable timestamps", len(parsed) - len(valid))
        per_day = {k: int(v) for k, v in valid.dt.strftime("%Y-%m-%d").value_counts().items()}

    today = now.astimezone(timezone.utc).date()
    window = []
    for offset in range(days - 1, -1, -1):
        key = (today - timedelta(days=offset)).isoformat()
        window.append({"date": key, "count": per_day.get(key, 0)})
    return window


def _iso_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def compute_snapshot(rows: Optional[Sequence[Row]], schema: SurveySchema = DEFAULT_SCHEMA,
                     days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> Snapshot:
    rows = list(rows or [])
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return Snapshot(
        total_responses=len(rows),
        single_choice=single_choice_counts(rows, schema.single_choice),
        scales=scale_stats(rows, schema.scales),
        multi_choice={col: multi_choice_counts(rows, col) for col in schema.multi_choice},
        daily_counts=daily_counts(rows, days=days, now=now, schema=schema),
        generated_at=_iso_utc(now),
    )
