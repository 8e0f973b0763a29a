from __future__ import annotations

import re

import pytest

from mars_dashboard.render import (
    APOD,
    LOADING_PLACEHOLDER,
    ROVER,
    DataNeed,
    View,
    dashboard_body,
    greeting,
    image_list,
    image_of_the_day,
    photo_item,
    render_app,
    tab_id,
    tabs,
)
from mars_dashboard.selectors import DisplayImage
from mars_dashboard.state import ApplicationState

from conftest import TODAY, photo

ROVERS = ("Curiosity", "Opportunity", "Spirit")


def _active_labels(markup: str) -> list[str]:
    return re.findall(r'<button[^>]*class="tabLink active"[^>]*>([^<]*)</button>', markup)


def test_greeting_with_name() -> None:
    html = greeting("Student")

    assert '<h1 class="welcome">Welcome, <span class="name">Student</span></h1>' in html
    assert '<h1 class="title">Mars Dashboard</h1>' in html


@pytest.mark.parametrize("name", ["", None])
def test_greeting_without_name(name) -> None:
    html = greeting(name)

    assert "Welcome" not in html
    assert "Mars Dashboard" in html


@pytest.mark.parametrize("selected", ROVERS)
def test_tabs_marks_exactly_the_selected_rover(selected: str) -> None:
    html = tabs(ROVERS, selected)

    assert _active_labels(html) == [selected]
    assert html.count("autofocus") == 1
    assert html.count('class="tabLink') == len(ROVERS)
    assert f'id="{tab_id(selected)}"' in html


def test_tabs_without_match_has_no_active_tab() -> None:
    html = tabs(ROVERS, "curiosity")

    assert _active_labels(html) == []
    assert "autofocus" not in html


def test_tabs_empty() -> None:
    assert tabs([], "Curiosity") == ""


def test_photo_item_and_list() -> None:
    items = [DisplayImage("a.jpg", "2020-01-01"), DisplayImage("b.jpg", "2020-01-02")]

    html = image_list(photo_item, items)

    assert html.count('<li class="image-list">') == 2
    assert html.index('src="a.jpg"') < html.index('src="b.jpg"')
    assert "2020-01-02" in html
    assert html.strip().startswith("<ol>")


def test_image_list_empty() -> None:
    assert image_list(photo_item, []).strip() == "<ol></ol>"


def test_dashboard_body_initial_state_requests_selected_rover() -> None:
    state = ApplicationState(selected_rover="Curiosity", rover_info=())

    view = dashboard_body(state)

    assert view.markup == LOADING_PLACEHOLDER
    assert view.needs == (DataNeed(ROVER, "Curiosity"),)


def test_dashboard_body_renders_rover_details_and_photos() -> None:
    state = ApplicationState(selected_rover="Curiosity", rover_info=[photo()])

    view = dashboard_body(state)

    assert view.needs == ()
    assert "Details for Curiosity rover camera" in view.markup
    assert "2011-11-26" in view.markup
    assert "2012-08-06" in view.markup
    assert "active" in view.markup
    assert view.markup.count('<li class="image-list">') == 1
    assert 'src="a.jpg"' in view.markup
    assert "2020-01-01" in view.markup


def test_dashboard_body_photos_of_other_rover_show_placeholder_and_request() -> None:
    state = ApplicationState(selected_rover="Opportunity", rover_info=[photo("Curiosity")])

    view = dashboard_body(state)

    assert view.markup == LOADING_PLACEHOLDER
    assert view.needs == (DataNeed(ROVER, "Opportunity"),)


def test_dashboard_body_does_not_request_while_loading() -> None:
    state = ApplicationState(selected_rover="Spirit", loading=True)

    view = dashboard_body(state)

    assert view.markup == LOADING_PLACEHOLDER
    assert view.needs == ()


def test_image_of_the_day_current_image() -> None:
    apod = {"date": TODAY.isoformat(), "media_type": "image", "image": {"url": "x.jpg", "explanation": "e"}}

    view = image_of_the_day(apod, TODAY)

    assert '<img src="x.jpg"' in view.markup
    assert "<p>e</p>" in view.markup
    assert view.needs == ()


def test_image_of_the_day_video() -> None:
    apod = {
        "date": TODAY.isoformat(),
        "media_type": "video",
        "url": "https://youtube.com/embed/x",
        "title": "Launch",
        "explanation": "Liftoff",
    }

    view = image_of_the_day(apod, TODAY)

    assert '<a href="https://youtube.com/embed/x">here</a>' in view.markup
    assert "<p>Launch</p>" in view.markup
    assert "<p>Liftoff</p>" in view.markup
    assert "<img" not in view.markup


def test_image_of_the_day_placeholder_requests_today() -> None:
    view = image_of_the_day({}, TODAY)

    assert '<img src=""' in view.markup
    assert view.needs == (DataNeed(APOD, "2024-05-01"),)


def test_image_of_the_day_stale_record_requests_today() -> None:
    apod = {"date": "2024-04-30", "media_type": "image", "image": {"url": "old.jpg"}}

    view = image_of_the_day(apod, TODAY)

    assert 'src="old.jpg"' in view.markup
    assert view.needs == (DataNeed(APOD, "2024-05-01"),)


def test_image_of_the_day_none_is_an_error() -> None:
    with pytest.raises(TypeError):
        image_of_the_day(None, TODAY)  # type: ignore[arg-type]


def test_render_app_composition_order() -> None:
    state = ApplicationState(rover_info=[photo()])

    view = render_app(state, TODAY)

    markup = view.markup
    positions = [
        markup.index("<header>"),
        markup.index("Welcome"),
        markup.index('class="tabs"'),
        markup.index('class="rover-info"'),
        markup.index('class="apod"'),
        markup.index("<footer>"),
    ]
    assert positions == sorted(positions)
    assert view.needs == (DataNeed(APOD, "2024-05-01"),)


def test_render_app_collects_all_needs() -> None:
    view = render_app(ApplicationState(), TODAY)

    assert isinstance(view, View)
    assert view.needs == (DataNeed(ROVER, "Curiosity"), DataNeed(APOD, "2024-05-01"))


def test_render_app_escapes_text() -> None:
    state = ApplicationState(user={"name": "<script>"}, rover_info=[photo(img_src='a.jpg" onerror="x')])

    markup = render_app(state, TODAY).markup

    assert "<script>" not in markup
    assert "&lt;script&gt;" in markup
    assert 'onerror="x"' not in markup


def test_render_is_total_for_sparse_records() -> None:
    state = ApplicationState(rover_info=[{"rover": {"name": "Curiosity"}}])

    view = render_app(state, TODAY)

    assert "Details for Curiosity rover camera" in view.markup


def test_null_fields_render_as_empty_text() -> None:
    record = photo("Curiosity", img_src=None, earth_date=None, status=None)
    state = ApplicationState(rover_info=[record])

    view = render_app(state, TODAY)

    assert '<img src="">' in view.markup
    assert "None" not in view.markup


def test_image_of_the_day_null_url_renders_empty_src() -> None:
    apod = {"date": TODAY.isoformat(), "media_type": "image", "image": {"url": None, "explanation": None}}

    view = image_of_the_day(apod, TODAY)

    assert '<img src=""' in view.markup
    assert "None" not in view.markup
