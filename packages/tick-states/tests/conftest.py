"""Shared fixtures for tick-states tests."""
from __future__ import annotations

import asyncio
from typing import Any

import pytest

from tick_states import State, StateManager, StateRegistry


class RecordingState(State):
    """State that appends every hook call to a shared log."""

    def __init__(self, name: str, log: list[str], preload_data: Any = None, **kwargs: Any) -> None:
        super().__init__(name, **kwargs)
        self.log = log
        self.preload_data = preload_data
        self.started_with: list[Any] = []

    def do_preload(self) -> Any:
        self.log.append(f"preload {self.name}")
        return self.preload_data

    def on_start(self, data: Any) -> None:
        self.started_with.append(data)
        self.log.append(f"start {self.name}")

    def on_pause(self) -> None:
        self.log.append(f"pause {self.name}")

    def on_unpause(self) -> None:
        self.log.append(f"unpause {self.name}")

    def on_end(self) -> None:
        self.log.append(f"end {self.name}")

    def on_child_end(self, child: State) -> None:
        self.log.append(f"child_end {self.name}:{child.name}")


async def settle(rounds: int = 10) -> None:
    """Let pending preload/start tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def registry() -> StateRegistry:
    return StateRegistry()


@pytest.fixture
def manager(registry: StateRegistry) -> StateManager:
    return StateManager(registry=registry)


@pytest.fixture
def log() -> list[str]:
    return []
