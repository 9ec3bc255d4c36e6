"""StateRegistry: process-wide id counter, active state pointer and listeners."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from tick_states.types import NodeId, StateEventType

if TYPE_CHECKING:
    from tick_states.state import State

# Listener signature: (event_type, state, data) -> None.
StateListener = Callable[[StateEventType, "State", Any], None]


class StateRegistry:
    """Shared mutable state for managers and lifecycle objects.

    Node ids are drawn from one counter for every manager built on the same
    registry, so ids never repeat across trees. The registry also tracks the
    currently active ``State`` (used for pre-emption on start) and the
    listeners notified of every lifecycle transition.

    Independent registries never interact; tests create one each.
    """

    def __init__(self) -> None:
        self._next_id: NodeId = 0
        self.current: State | None = None
        self._listeners: list[StateListener] = []

    def next_id(self) -> NodeId:
        """Allocate the next node id."""
        nid = self._next_id
        self._next_id += 1
        return nid

    # --- Listeners ---

    def on_event(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def off_event(self, listener: StateListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, event: StateEventType, state: State, data: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, state, data)


default_registry = StateRegistry()
