"""State: lifecycle object with async preload and sync start/pause/end."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any

from tick_states.config import StateConfig
from tick_states.registry import StateRegistry, default_registry
from tick_states.types import EndingRootState, NoSuchState, StateError, StateEventType

logger = logging.getLogger(__name__)


class State:
    """Basic lifecycle object.

    States run linearly, as tree nodes, or both. Behaviour is injected by
    subclassing and overriding ``do_preload`` and the ``on_*`` hooks.

    ``preload`` and ``start`` schedule work on the running event loop, so
    they must be called from inside one. Everything else is synchronous.
    """

    def __init__(
        self,
        name: str,
        parent: State | None = None,
        config: StateConfig | None = None,
        registry: StateRegistry | None = None,
    ) -> None:
        self.name = name
        self.parent = parent
        self.config: StateConfig = config if config is not None else StateConfig()
        self.children: list[State] = []
        if registry is None:
            registry = parent.registry if parent is not None else default_registry
        self._registry = registry
        self._child_index: int = -1
        self._preloaded: asyncio.Future[Any] | None = None
        self._running: bool = False
        self._paused: bool = self.config.paused
        if parent is not None:
            parent.children.append(self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"running={self._running}, paused={self._paused})"
        )

    @classmethod
    def current(cls, registry: StateRegistry | None = None) -> State | None:
        """The most recently started state on *registry*."""
        return (registry if registry is not None else default_registry).current

    @property
    def registry(self) -> StateRegistry:
        return self._registry

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self._paused

    # --- Preload ---

    def preload(self) -> asyncio.Future[Any]:
        """Return the memoized preload future, creating it on first call.

        ``do_preload`` runs at most once per instance.
        """
        self._registry.emit(StateEventType.PRELOAD_BEGIN, self)
        if self._preloaded is None:
            logger.debug("Preloading %r", self.name)
            self._preloaded = asyncio.get_running_loop().create_task(self._load())
        return self._preloaded

    async def _load(self) -> Any:
        data = self.do_preload()
        if inspect.isawaitable(data):
            data = await data
        logger.debug("Preloaded %r", self.name)
        self._registry.emit(StateEventType.PRELOAD_END, self, data)
        return data

    # --- Start ---

    def start(self) -> asyncio.Task[None]:
        """Make this the current state and start it once preloaded.

        An active state that is not an ancestor of this one is ended first.
        Every call runs its own start sequence after the shared preload.
        """
        previous = self._registry.current
        self._registry.current = self
        if previous is not None and previous is not self and not previous.is_ancestor_of(self):
            logger.info("Starting %r pre-empts %r", self.name, previous.name)
            try:
                previous.end()
            except StateError:
                self._registry.current = previous
                raise
        if self.parent is not None and self.parent.config.pause_on_child_start:
            self.parent.pause()
        preloaded = self.preload()
        return asyncio.get_running_loop().create_task(self._start_when_loaded(preloaded))

    async def _start_when_loaded(self, preloaded: asyncio.Future[Any]) -> None:
        data = await preloaded
        logger.debug("Starting %r", self.name)
        self._registry.emit(StateEventType.STARTING, self, data)
        self.on_start(data)
        self._running = True
        if self.config.start_children_immediately and self.children:
            self._child_index = 0
            self.children[0].start()

    def restart(self) -> asyncio.Task[None] | None:
        """Start unless already running. Does not unpause."""
        if self._running:
            return None
        return self.start()

    # --- Pause ---

    def pause(self) -> None:
        if not self._paused:
            logger.debug("Pausing %r", self.name)
            self._registry.emit(StateEventType.PAUSING, self)
            self.on_pause()
            self._paused = True

    def unpause(self) -> None:
        if self._paused:
            logger.debug("Unpausing %r", self.name)
            self._registry.emit(StateEventType.UNPAUSING, self)
            self.on_unpause()
            self._paused = False

    def toggle_pause(self) -> bool:
        """Toggle the pause state.

        Returns True if paused after this call, otherwise False.
        """
        if self._paused:
            self.unpause()
            return False
        self.pause()
        return True

    # --- End ---

    def end(self) -> None:
        """End this state and hand control back to its parent."""
        if self.parent is None:
            raise EndingRootState(f"Ending state {self.name!r} with no parent")
        logger.debug("Ending %r", self.name)
        self._running = False
        self._registry.emit(StateEventType.ENDING, self)
        self.on_end()
        if self._registry.current is self:
            self._registry.current = self.parent
        self.parent._child_ended(self)

    def _child_ended(self, child: State) -> None:
        self.on_child_end(child)
        if self.config.pause_on_child_start:
            self.unpause()
        if self.config.start_children_immediately and not self._entered_elsewhere(child):
            if child in self.children:
                self._child_index = self.children.index(child)
            self.next_child()

    def _entered_elsewhere(self, child: State) -> bool:
        # True when *child* ended because another state was started over it.
        current = self._registry.current
        if current is None or current is self or current is child:
            return False
        return not child.is_ancestor_of(current)

    # --- Children ---

    def next_child(self) -> asyncio.Task[None] | None:
        """Start the child after the last one started.

        Past the last child, ends this state if ``end_when_children_done``.
        """
        self._child_index += 1
        if self._child_index >= len(self.children):
            if self.config.end_when_children_done:
                self.end()
            return None
        return self.children[self._child_index].start()

    def start_child(self, child: str | State) -> asyncio.Task[None]:
        target = self.get_child(child) if isinstance(child, str) else child
        return target.start()

    def get_child(self, name: str) -> State:
        for child in self.children:
            if child.name == name:
                return child
        raise NoSuchState(name, f"No child state {name!r} in {self.name!r}")

    def is_ancestor_of(self, other: State) -> bool:
        parent = other.parent
        while parent is not None:
            if parent is self:
                return True
            parent = parent.parent
        return False

    # --- Overridable hooks ---

    def do_preload(self) -> Any:
        """Load whatever ``on_start`` needs. May return an awaitable."""
        return None

    def on_start(self, data: Any) -> None:
        pass

    def on_pause(self) -> None:
        pass

    def on_unpause(self) -> None:
        pass

    def on_end(self) -> None:
        pass

    def on_child_end(self, child: State) -> None:
        pass


def resume(state: State) -> asyncio.Task[None] | None:
    """Unpause *state*, starting it first if it is not running."""
    state.unpause()
    if not state.running:
        return state.start()
    return None


def reset(state: State) -> None:
    """Pause *state* and end it if it is running under a parent."""
    state.pause()
    if state.running and state.parent is not None:
        state.end()
