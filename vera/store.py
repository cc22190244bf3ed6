"""Supabase access for the survey response table.

``SurveyStore`` is the only place that talks to Supabase: column-projected
selects through PostgREST, sign-up / sign-in through GoTrue, and a realtime
``postgres_changes`` channel used to learn that rows changed.
"""
import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx
from supabase import AuthError, PostgrestAPIError, acreate_client, create_client

from .errors import ChannelError, StoreError

logger = logging.getLogger(__name__)

DROPPED_STATES = {"CHANNEL_ERROR", "TIMED_OUT", "CLOSED"}
STOP_POLL_SECONDS = 0.5


def _dump(obj: Any) -> Any:
    """Turn a supabase/pydantic model into plain JSON data."""
    if obj is None:
        return None
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    return obj


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)


def resolve_credentials(settings: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str], str]:
    """Return ``(url, key, source)``; a config file wins over env variables."""
    path = settings.get("SUPABASE_CONFIG_FILE")
    if path and Path(path).is_file():
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Unreadable Supabase config file %s: %s", path, e)
            return None, None, "config"
        if not isinstance(data, dict):
            return None, None, "config"
        return data.get("url"), data.get("key") or data.get("anon_key"), "config"
    return settings.get("SUPABASE_URL"), settings.get("SUPABASE_ANON_KEY"), "env"


class SurveyStore:
    def __init__(self, client, table: str, url: Optional[str] = None,
                 key: Optional[str] = None, async_client_factory: Optional[Callable] = None):
        self.client = client
        self.table = table
        self._url = url
        self._key = key
        self._async_client_factory = async_client_factory

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> Tuple[Optional["SurveyStore"], str]:
        url, key, source = resolve_credentials(settings)
        table = settings.get("SURVEY_TABLE", "reponses_sondage")
        if not (url and key):
            return None, source
        try:
            client = create_client(url, key)
        except Exception as e:
            logger.warning("Supabase client could not be created: %s", e)
            return None, source
        return cls(client, table, url=url, key=key), source

    # ---------- queries ----------
    def fetch_rows(self, columns: Sequence[str]) -> List[Dict[str, Any]]:
        try:
            response = self.client.table(self.table).select(", ".join(columns)).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise StoreError(f"Failed to fetch rows: {_error_message(e)}") from e
        return list(response.data or [])

    # ---------- auth ----------
    def sign_up(self, email: str, password: str) -> Any:
        try:
            res = self.client.auth.sign_up({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            raise StoreError(_error_message(e)) from e
        return _dump(res.user)

    def sign_in(self, email: str, password: str) -> Any:
        try:
            res = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as e:
            raise StoreError(_error_message(e) or "Invalid credentials.") from e
        return _dump(res.session)

    # ---------- realtime ----------
    def listen(self, on_change: Callable[..., Any], on_subscribed: Callable[[], Any],
               stop: threading.Event) -> None:
        """Block on the change channel until *stop* is set.

        Raises ChannelError as soon as the channel reports an error,
        a timeout or a close.
        """
        asyncio.run(self._listen(on_change, on_subscribed, stop))

    async def _async_client(self):
        if self._async_client_factory is not None:
            return await self._async_client_factory()
        return await acreate_client(self._url, self._key)

    async def _listen(self, on_change, on_subscribed, stop: threading.Event) -> None:
        client = await self._async_client()
        dropped: Dict[str, str] = {}
        done = asyncio.Event()

        def _on_status(status, err=None):
            state = getattr(status, "value", status)
            if state == "SUBSCRIBED":
                logger.info("Realtime subscription active for %s.", self.table)
                on_subscribed()
            elif state in DROPPED_STATES:
                dropped["state"] = state
                if err is not None:
                    dropped["detail"] = str(err)
                done.set()

        channel = client.channel(f"{self.table}_changes")
        channel.on_postgres_changes("*", schema="public", table=self.table,
                                    callback=lambda payload: on_change(payload))
        try:
            await channel.subscribe(_on_status)
            while not done.is_set() and not stop.is_set():
                try:
                    await asyncio.wait_for(done.wait(), timeout=STOP_POLL_SECONDS)
                except asyncio.TimeoutError:
                    pass
        finally:
            try:
                await client.remove_channel(channel)
            except Exception as e:  # channel may already be gone
                logger.debug("remove_channel failed: %s", e)

        if dropped:
            detail = dropped.get("detail")
            raise ChannelError(f"channel {dropped['state']}" + (f": {detail}" if detail else ""))
