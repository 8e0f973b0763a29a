"""
Dashboard runtime: mounts rendered markup, binds tab handlers and runs effects.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional

from mars_dashboard.config import Config
from mars_dashboard.fetchers import RemoteFetchers
from mars_dashboard.render import APOD, ROVER, DataNeed, View, render_app, tab_id
from mars_dashboard.state import ApplicationState, Store, initial_state

_LOG = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class Mount:
    """The single mount point: holds the last markup and its element handlers."""

    def __init__(self):
        self.markup = ""
        self._handlers: Dict[str, Handler] = {}

    def replace(self, markup: str) -> None:
        """Swap in new markup; handlers bound to the old markup are dropped."""
        self.markup = markup
        self._handlers.clear()

    def bind(self, element_id: str, handler: Handler) -> None:
        self._handlers[element_id] = handler

    def dispatch(self, element_id: str, event: Any = None) -> bool:
        """Invoke the handler bound to ``element_id``; ``False`` if none is."""
        handler = self._handlers.get(element_id)
        if handler is None:
            _LOG.debug("No handler bound to %s", element_id)
            return False
        handler(event)
        return True


class Dashboard:
    """Owns the store and drives the render/effect loop."""

    def __init__(
        self,
        config: Config,
        fetchers: Optional[RemoteFetchers] = None,
        clock: Callable[[], date] = date.today,
        state: Optional[ApplicationState] = None,
    ):
        self._config = config
        self._clock = clock
        self._store = Store(state or initial_state(config.user_name, config.rovers))
        self._store.subscribe(self._render)
        self._fetchers = fetchers or RemoteFetchers(
            self._store, config.proxy_base_url, timeout=config.request_timeout
        )
        self._mount = Mount()
        self._loaded = False

    @property
    def store(self) -> Store:
        return self._store

    @property
    def markup(self) -> str:
        """Currently mounted markup."""
        return self._mount.markup

    def load(self) -> None:
        """First render from the initial state; later calls do nothing."""
        if self._loaded:
            return
        self._loaded = True
        _LOG.info("Dashboard loaded")
        self._render(self._store.get())

    def select_rover(self, event: Any, name: str) -> None:
        """Tab handler: show ``name`` and drop any pending fetch for another rover."""
        _LOG.info("Rover selected: %s", name)
        self._fetchers.invalidate(ROVER)
        self._store.update("selected_rover", name)
        if self._store.get().loading:
            self._store.update("loading", False)

    def dispatch(self, element_id: str, event: Any = None) -> bool:
        """Deliver a UI event to the handler bound by the last render."""
        return self._mount.dispatch(element_id, event)

    def _render(self, state: ApplicationState) -> View:
        view = render_app(state, self._clock())
        self._mount.replace(view.markup)
        self._bind(state)
        self._run_effects(view.needs)
        return view

    def _bind(self, state: ApplicationState) -> None:
        for rover in state.rovers:
            self._mount.bind(tab_id(rover), lambda event, name=rover: self.select_rover(event, name))

    def _run_effects(self, needs: Iterable[DataNeed]) -> None:
        for need in needs:
            if need.kind == ROVER:
                self._fetchers.fetch_rover_photos(need.key)
            elif need.kind == APOD:
                self._fetchers.fetch_apod(date.fromisoformat(need.key))
            else:
                _LOG.warning("Unknown data need: %s", need.kind)

    async def close(self) -> None:
        await self._fetchers.close()
