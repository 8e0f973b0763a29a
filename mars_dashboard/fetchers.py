"""
Remote fetchers: load dashboard data from the proxy and write it into the store.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

import aiohttp

from mars_dashboard.render import APOD, ROVER
from mars_dashboard.selectors import apod_record
from mars_dashboard.state import Store

_LOG = logging.getLogger(__name__)

FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError, KeyError, TypeError)


@dataclass
class _Request:
    key: str
    task: asyncio.Task


class RemoteFetchers:
    """Fire-and-forget fetches, one cancellable task per request kind.

    Asking again for the same kind and key while a task exists is a no-op, so
    repeated renders never duplicate a request and a failed request is not
    retried until it is invalidated. Asking for a different key cancels the
    previous task and its result is dropped.
    """

    def __init__(
        self,
        store: Store,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 15,
    ):
        self._store = store
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._requests: Dict[str, _Request] = {}

    async def _ensure_session(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Accept": "application/json"},
            )
            self._owns_session = True

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        await self._ensure_session()
        async with self._session.get(f"{self._base_url}{path}", params=params) as response:
            response.raise_for_status()
            return await response.json()

    def in_flight(self, kind: str) -> Optional[str]:
        """Key of the unfinished request of ``kind``, if any."""
        request = self._requests.get(kind)
        if request and not request.task.done():
            return request.key
        return None

    def _start(self, kind: str, key: str, coro) -> asyncio.Task:
        current = self._requests.get(kind)
        if current and current.key == key:
            coro.close()
            return current.task

        if current and not current.task.done():
            _LOG.debug("Superseding %s request for %s with %s", kind, current.key, key)
            current.task.cancel()

        task = asyncio.get_running_loop().create_task(coro)
        self._requests[kind] = _Request(key, task)
        return task

    def _is_current(self, kind: str, key: str) -> bool:
        request = self._requests.get(kind)
        return request is not None and request.key == key and request.task is asyncio.current_task()

    def invalidate(self, kind: str) -> None:
        """Cancel and forget the request of ``kind`` so it can be issued again."""
        request = self._requests.pop(kind, None)
        if request and not request.task.done():
            _LOG.debug("Cancelling %s request for %s", kind, request.key)
            request.task.cancel()

    def fetch_apod(self, today: date) -> asyncio.Task:
        """Load the astronomy picture of ``today`` into ``apod``."""
        key = today.isoformat()
        return self._start(APOD, key, self._load_apod(key))

    def fetch_rover_photos(self, rover: str) -> asyncio.Task:
        """Load the photos of ``rover`` into ``rover_info``."""
        return self._start(ROVER, rover, self._load_rover_photos(rover))

    async def _load_apod(self, key: str) -> None:
        try:
            body = await self._get_json("/apod")
            record = apod_record(body)
        except FETCH_ERRORS as ex:
            _LOG.error("Failed to fetch image of the day: %s", ex)
            return

        if self._is_current(APOD, key):
            self._store.update("apod", record)

    async def _load_rover_photos(self, rover: str) -> None:
        self._store.update("loading", True)
        try:
            try:
                body = await self._get_json("/rover", params={"rover": rover})
                photos = body["data"]["photos"]
                if not isinstance(photos, list):
                    raise TypeError(f"expected a list of photos, got {type(photos).__name__}")
            except FETCH_ERRORS as ex:
                _LOG.error("Failed to fetch %s photos: %s", rover, ex)
                return

            if not self._is_current(ROVER, rover):
                _LOG.debug("Discarding late %s photos", rover)
                return

            _LOG.info("Loaded %d photos for %s", len(photos), rover)
            try:
                self._store.update("rover_info", photos)
            except Exception:
                _LOG.exception("Failed to render %s photos", rover)
        finally:
            if self._is_current(ROVER, rover):
                self._store.update("loading", False)

    async def close(self) -> None:
        """Cancel pending requests and close the HTTP session if owned."""
        tasks = [request.task for request in self._requests.values() if not request.task.done()]
        self._requests.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
