"""
Application state snapshot and the store that replaces it.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from mars_dashboard.config import ROVERS

_LOG = logging.getLogger(__name__)

Listener = Callable[["ApplicationState"], None]


@dataclass(frozen=True)
class ApplicationState:
    """One immutable snapshot of everything the dashboard shows."""

    user: Mapping[str, Any] = field(default_factory=lambda: {"name": "Student"})
    apod: Mapping[str, Any] = field(default_factory=dict)
    rovers: Tuple[str, ...] = tuple(ROVERS)
    selected_rover: str = "Curiosity"
    rover_info: Tuple[Mapping[str, Any], ...] = ()
    loading: bool = False

    def __post_init__(self):
        # Sequences are stored as tuples so a snapshot cannot be mutated in place.
        object.__setattr__(self, "rovers", tuple(self.rovers))
        object.__setattr__(self, "rover_info", tuple(self.rover_info or ()))
        if self.selected_rover not in self.rovers:
            raise ValueError(f"Selected rover {self.selected_rover!r} is not one of {self.rovers}")


STATE_KEYS = frozenset(f.name for f in dataclasses.fields(ApplicationState))


def initial_state(user_name: str = "Student", rovers: Optional[Sequence[str]] = None) -> ApplicationState:
    """Build the load-time state; the first rover is selected."""
    rovers = tuple(rovers or ROVERS)
    return ApplicationState(user={"name": user_name}, rovers=rovers, selected_rover=rovers[0])


class Store:
    """Holds the single current snapshot and notifies on every replacement."""

    def __init__(self, state: Optional[ApplicationState] = None, listener: Optional[Listener] = None):
        self._state = state or ApplicationState()
        self._listeners: List[Listener] = []
        if listener is not None:
            self._listeners.append(listener)

    def subscribe(self, listener: Listener) -> None:
        """Register a callable invoked with each new snapshot."""
        self._listeners.append(listener)

    def get(self) -> ApplicationState:
        """Return the current snapshot."""
        return self._state

    def update(self, key: str, value: Any) -> ApplicationState:
        """Replace the top-level field ``key`` and notify listeners.

        :raises KeyError: if ``key`` is not a state field
        :raises ValueError: if the new snapshot breaks the rover invariant
        """
        if key not in STATE_KEYS:
            raise KeyError(key)

        self._state = dataclasses.replace(self._state, **{key: value})
        _LOG.debug("State updated: %s", key)

        for listener in list(self._listeners):
            listener(self._state)
        return self._state
