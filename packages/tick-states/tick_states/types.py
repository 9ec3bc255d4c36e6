"""Shared type aliases, enums, protocols and errors for tick-states."""
from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Hashable, Protocol

NodeId = int

# Either a node id or a registered alias.
Key = Hashable


class Relation(Enum):
    """Tree-structural transition targets, relative to the current node."""

    SAME = "same"
    PARENT = "parent"
    CHILD = "child"
    SIBLING = "sibling"
    SIBLING_ELSE_UP = "sibling_else_up"


class StateEventType(Enum):
    """Lifecycle notifications broadcast to registry listeners."""

    PRELOAD_BEGIN = "preload_begin"
    PRELOAD_END = "preload_end"
    STARTING = "starting"
    PAUSING = "pausing"
    UNPAUSING = "unpausing"
    ENDING = "ending"


class Lifecycle(Protocol):
    """Hook points a lifecycle-capable payload exposes."""

    def preload(self) -> Awaitable[Any]: ...
    def on_start(self, data: Any) -> None: ...
    def on_pause(self) -> None: ...
    def on_unpause(self) -> None: ...
    def on_end(self) -> None: ...
    def on_child_end(self, child: Any) -> None: ...


# --- Errors ---


class StateError(Exception):
    """Base class for every tick-states contract violation."""


class NoSuchState(StateError, KeyError):
    """Raised when an id or alias does not resolve to a node."""

    def __init__(self, key: Any, message: str | None = None) -> None:
        self.key = key
        super().__init__(message if message is not None else f"No state {key!r}")


class DuplicateAlias(StateError, ValueError):
    """Raised when an alias is already registered with the manager."""

    def __init__(self, alias: Any) -> None:
        self.alias = alias
        super().__init__(f"Alias {alias!r} already exists")


class AlreadyInitialised(StateError):
    """Raised on a second call to ``set_initial``."""


class NotInitialised(StateError):
    """Raised when dispatching before ``set_initial`` was called."""


class NoParent(StateError):
    """Raised by parent-relative queries on a root node."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"State {key!r} has no parent")


class EndingRootState(StateError):
    """Raised when ending a lifecycle object that has no parent."""


class NoMoreSiblings(StateError):
    """Raised when a sibling relation runs past the last child."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"State {key!r} has no next sibling")


class InvalidTransition(StateError):
    """Raised when a relation cannot be resolved from the current node."""


class UnresolvedTransitionTarget(StateError):
    """Raised when a finder or child relation yields no usable node."""


class NoTransitionForTrigger(StateError):
    """Raised by the default empty-transition handler."""

    def __init__(self, trigger: Any, state: Any) -> None:
        self.trigger = trigger
        self.state = state
        super().__init__(f"State {state!r} has no transition for {trigger!r}")
