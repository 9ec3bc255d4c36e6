"""Splash: a transient screen state that can end itself."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from tick_states.config import StateConfig
from tick_states.registry import StateRegistry
from tick_states.state import State

logger = logging.getLogger(__name__)

# Seconds, an awaitable, or a callable producing an awaitable.
AutoEnd = Union[float, Awaitable[Any], Callable[[], Awaitable[Any]]]


class Splash(State):
    """Splash screen state.

    *source* is the asset to show: a plain value, an awaitable, or a callable
    returning either. It is resolved during preload. ``on_show(asset)`` runs
    on start and ``on_hide(asset)`` on end. With *auto_end* set, the splash
    ends itself once the delay elapses or the awaitable settles, which needs
    a parent to hand control back to.
    """

    def __init__(
        self,
        name: str,
        source: Any,
        parent: State | None = None,
        on_show: Callable[[Any], None] | None = None,
        on_hide: Callable[[Any], None] | None = None,
        auto_end: AutoEnd | None = None,
        config: StateConfig | None = None,
        registry: StateRegistry | None = None,
    ) -> None:
        if auto_end is not None and parent is None:
            raise ValueError(f"Splash {name!r} cannot auto-end without a parent")
        super().__init__(name, parent=parent, config=config, registry=registry)
        self.source = source
        self.on_show = on_show
        self.on_hide = on_hide
        self.auto_end = auto_end
        self.asset: Any = None
        self._auto_end_task: asyncio.Task[None] | None = None

    async def do_preload(self) -> Any:
        asset = self.source() if callable(self.source) else self.source
        if inspect.isawaitable(asset):
            asset = await asset
        return asset

    def on_start(self, data: Any) -> None:
        self.asset = data
        if self.on_show is not None:
            self.on_show(data)
        if self.auto_end is not None and self._auto_end_task is None:
            self._auto_end_task = asyncio.get_running_loop().create_task(
                self._end_after(self.auto_end)
            )

    async def _end_after(self, delay: AutoEnd) -> None:
        if isinstance(delay, (int, float)):
            await asyncio.sleep(delay)
        elif callable(delay):
            await delay()
        else:
            await delay
        self._auto_end_task = None
        if self.running:
            logger.debug("Splash %r auto-ending", self.name)
            self.end()

    def on_end(self) -> None:
        if self._auto_end_task is not None:
            self._auto_end_task.cancel()
            self._auto_end_task = None
        if self.on_hide is not None:
            self.on_hide(self.asset)
