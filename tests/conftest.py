from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import date
from typing import Any

import pytest

from mars_dashboard.config import Config

TODAY = date(2024, 5, 1)


def photo(rover: str = "Curiosity", img_src: str = "a.jpg", earth_date: str = "2020-01-01", **rover_fields: Any) -> dict:
    """Raw photo record as returned by the Mars photos API."""
    metadata = {
        "name": rover,
        "landing_date": "2012-08-06",
        "launch_date": "2011-11-26",
        "status": "active",
    }
    metadata.update(rover_fields)
    return {"img_src": img_src, "earth_date": earth_date, "rover": metadata}


def apod_payload(day: date = TODAY, media_type: str = "image") -> dict:
    """Raw APOD payload as returned by NASA."""
    return {
        "date": day.isoformat(),
        "media_type": media_type,
        "title": "Pillars of Creation",
        "explanation": "Towers of cold gas.",
        "url": "https://apod.nasa.gov/apod/image/pillars.jpg",
    }


class RecordingFetchers:
    """Stands in for RemoteFetchers and records what the dashboard asked for."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def fetch_rover_photos(self, rover: str) -> None:
        self.calls.append(("rover", rover))

    def fetch_apod(self, today: date) -> None:
        self.calls.append(("apod", today.isoformat()))

    def invalidate(self, kind: str) -> None:
        self.calls.append(("invalidate", kind))

    async def close(self) -> None:
        return None

    def rover_calls(self) -> list[str]:
        return [key for kind, key in self.calls if kind == "rover"]


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the loop until ``predicate`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


@pytest.fixture
def config() -> Config:
    return Config(environ={"MARS_DASHBOARD_MODE": "test"})


@pytest.fixture
def fetchers() -> RecordingFetchers:
    return RecordingFetchers()
