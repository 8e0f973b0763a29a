"""
Read-only projections over the application state.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional

from mars_dashboard.state import ApplicationState


@dataclass(frozen=True)
class DisplayImage:
    """A rover photo reduced to what the image list renders."""

    src: str
    date: str


def project_photos(state: ApplicationState) -> List[DisplayImage]:
    """Map every raw photo record to a :class:`DisplayImage`, keeping order."""
    return [
        DisplayImage(src=str(record.get("img_src") or ""), date=str(record.get("earth_date") or ""))
        for record in state.rover_info
    ]


def resolve_rover_metadata(state: ApplicationState) -> Optional[Mapping[str, Any]]:
    """Return the ``rover`` mapping of the first photo taken by the selected rover.

    First match wins, even if later records carry different metadata.
    """
    for record in state.rover_info:
        rover = record.get("rover") or {}
        if rover.get("name") == state.selected_rover:
            return rover
    return None


def apod_is_stale(apod: Optional[Mapping[str, Any]], today: date) -> bool:
    """Tell whether the APOD record is missing or not dated ``today``."""
    if not apod:
        return True
    try:
        return date.fromisoformat(str(apod.get("date", ""))) != today
    except ValueError:
        return True


def apod_record(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Shape the proxy's ``{"image": <APOD>}`` body into the state's APOD record.

    The APOD fields stay at the top level; images additionally get a nested
    ``image`` mapping holding ``url`` and ``explanation``.
    """
    picture = dict(payload["image"])
    record = dict(picture)
    if picture.get("media_type") != "video":
        record["image"] = {
            "url": picture.get("url") or "",
            "explanation": picture.get("explanation") or "",
        }
    return record
