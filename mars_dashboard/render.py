"""
Render pipeline: pure projection of a state snapshot into markup.

Rendering never performs I/O. Besides the markup, every component reports the
data it found missing or stale as :class:`DataNeed` values; the dashboard
runtime satisfies those after the markup is mounted.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from dataclasses import dataclass
from datetime import date
from html import escape
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from mars_dashboard.selectors import (
    DisplayImage,
    apod_is_stale,
    project_photos,
    resolve_rover_metadata,
)
from mars_dashboard.state import ApplicationState

EVENTS_PATH = "/events"

LOADING_PLACEHOLDER = '<p class="loading">Loading Data...</p>'

APOD = "apod"
ROVER = "rover"


@dataclass(frozen=True)
class DataNeed:
    """Data a render pass found missing; ``key`` identifies the request."""

    kind: str
    key: str


@dataclass(frozen=True)
class View:
    """Markup produced by a render pass plus the data it is waiting for."""

    markup: str
    needs: Tuple[DataNeed, ...] = ()


def tab_id(rover: str) -> str:
    """Element id of the tab bound to ``rover``."""
    return f"tab-{rover}"


def greeting(name: Optional[str]) -> str:
    html = """
        <h1 class="title">Mars Dashboard</h1>
        <p class="desc">Click on any of the rovers to view recent pictures.</p>
    """
    if name:
        return f'<h1 class="welcome">Welcome, <span class="name">{escape(name)}</span></h1>' + html
    return html


def tabs(rovers: Sequence[str], selected: Optional[str]) -> str:
    """One submit button per rover; the selected one is active and focused."""
    if not rovers:
        return ""

    buttons = []
    for rover in rovers:
        active = rover == selected
        css_class = "tabLink active" if active else "tabLink"
        focus = " autofocus" if active else ""
        element_id = escape(tab_id(rover))
        buttons.append(
            f'<button type="submit" class="{css_class}" id="{element_id}" '
            f'name="target" value="{element_id}"{focus}>{escape(rover)}</button>'
        )

    return f"""
        <form class="tabs" method="post" action="{EVENTS_PATH}">{"".join(buttons)}</form>
    """


def photo_item(image: DisplayImage) -> str:
    return f"""
        <img src="{escape(str(image.src or ""))}">
        <p class="date">
            <span class="bold">Date: </span>
            {escape(str(image.date or ""))}
        </p>
    """


def image_list(item_fn: Callable[[Any], str], items: Iterable[Any]) -> str:
    """Ordered list with one ``image-list`` entry per item."""
    entries = "".join(f'<li class="image-list">{item_fn(item)}</li>' for item in items)
    return f"""
        <ol>{entries}</ol>
    """


def _rover_details(metadata: Mapping[str, Any], images: Sequence[DisplayImage]) -> str:
    name = escape(str(metadata.get("name") or ""))
    return f"""
        <section class="rover-info">
            <h2>Details for {name} rover camera</h2>
            <ul class="rover-details">
                <li><span class="bold">Name: </span>{name}</li>
                <li><span class="bold">Launch date: </span>{escape(str(metadata.get("launch_date") or ""))}</li>
                <li><span class="bold">Landing date: </span>{escape(str(metadata.get("landing_date") or ""))}</li>
                <li><span class="bold">Status: </span>{escape(str(metadata.get("status") or ""))}</li>
            </ul>
            {image_list(photo_item, images)}
        </section>
    """


def dashboard_body(state: ApplicationState) -> View:
    """Rover details and photos, or the loading placeholder.

    A rover need is reported when the photos on hand do not belong to the
    selected rover and no rover fetch is in flight.
    """
    metadata = resolve_rover_metadata(state)
    images = project_photos(state)

    needs = ()
    stale = metadata is None or metadata.get("name") != state.selected_rover
    if stale and not state.loading:
        needs = (DataNeed(ROVER, state.selected_rover),)

    # Photos of another rover are not shown under the selected tab.
    if images and metadata is not None:
        return View(_rover_details(metadata, images), needs)
    return View(LOADING_PLACEHOLDER, needs)


def image_of_the_day(apod: Mapping[str, Any], today: date) -> View:
    """Today's astronomy picture or video.

    :raises TypeError: if ``apod`` is ``None``; callers pass ``{}`` as placeholder
    """
    if apod is None:
        raise TypeError("apod must be a mapping, use {} as the empty placeholder")

    needs = (DataNeed(APOD, today.isoformat()),) if apod_is_stale(apod, today) else ()

    if apod.get("media_type") == "video":
        markup = f"""
            <p>See today's featured video <a href="{escape(str(apod.get("url") or ""))}">here</a></p>
            <p>{escape(str(apod.get("title") or ""))}</p>
            <p>{escape(str(apod.get("explanation") or ""))}</p>
        """
    else:
        image = apod.get("image") or {}
        markup = f"""
            <img src="{escape(str(image.get("url") or ""))}" height="350px" width="100%" />
            <p>{escape(str(image.get("explanation") or ""))}</p>
        """
    return View(markup, needs)


def render_app(state: ApplicationState, today: date) -> View:
    """Assemble the whole page body for ``state``."""
    body = dashboard_body(state)
    apod = image_of_the_day(state.apod, today)

    markup = f"""
        <header></header>
        <main>
            {greeting(state.user.get("name"))}
            <section>
                {tabs(state.rovers, state.selected_rover)}
                {body.markup}
            </section>
            <section class="apod">
                {apod.markup}
            </section>
        </main>
        <footer></footer>
    """
    return View(markup, body.needs + apod.needs)
