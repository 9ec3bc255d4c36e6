"""Menu, levels and a closing splash -- a trigger-driven game flow.

Demonstrates:
- Building a state tree with aliases, children and transitions
- Relation targets (child, sibling, same) and explicit alias targets
- Wiring manager hooks to the lifecycle with reset() / resume()
- A Splash screen that ends itself after a delay

State tree:

    MainMenu (root)
      |-- Level_0
      |-- Level_1
      |-- GameComplete (splash)

Run: python -m examples.menu_flow
"""

import asyncio
from enum import Enum
from typing import Any

from tick_states import (
    Relation,
    Splash,
    State,
    StateManager,
    TriggerEvent,
    make_transition,
    reset,
    resume,
)


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

class Trigger(Enum):
    PLAY_GAME = "play_game"
    LEVEL_FAILED = "level_failed"
    LEVEL_COMPLETE = "level_complete"
    RETURN_TO_MENU = "return_to_menu"


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

class Screen(State):
    """Prints every lifecycle hook."""

    async def do_preload(self) -> Any:
        await asyncio.sleep(0.01)
        print(f"  [{self.name}] assets loaded")
        return f"{self.name}-assets"

    def on_start(self, data: Any) -> None:
        print(f"  [{self.name}] started with {data}")

    def on_pause(self) -> None:
        print(f"  [{self.name}] paused")

    def on_unpause(self) -> None:
        print(f"  [{self.name}] unpaused")

    def on_end(self) -> None:
        print(f"  [{self.name}] ended")


# ---------------------------------------------------------------------------
# Setup and run
# ---------------------------------------------------------------------------

def build() -> tuple[StateManager, list[asyncio.Task[None]], State]:
    started: list[asyncio.Task[None]] = []

    def pre_trigger(event: TriggerEvent) -> None:
        print(f"\n{event.trigger}: {event.old.name} -> {event.new.name}")
        reset(event.old)

    def post_trigger(event: TriggerEvent) -> None:
        task = resume(event.new)
        if task is not None:
            started.append(task)

    manager = StateManager(pre_trigger=pre_trigger, post_trigger=post_trigger)

    menu = Screen("MainMenu")
    level_transitions = [
        make_transition(Trigger.LEVEL_FAILED, relation=Relation.SAME),
        make_transition(Trigger.LEVEL_COMPLETE, relation=Relation.SIBLING),
        make_transition(Trigger.RETURN_TO_MENU, id="MainMenu"),
    ]
    menu_id = manager.add(
        menu,
        alias="MainMenu",
        transitions=[make_transition(Trigger.PLAY_GAME, relation=Relation.CHILD)],
        children=[
            manager.add(Screen("Level_0", parent=menu), alias="Level_0",
                        transitions=level_transitions),
            manager.add(Screen("Level_1", parent=menu), alias="Level_1",
                        transitions=level_transitions),
            Splash(
                "GameComplete",
                "game-complete.png",
                parent=menu,
                on_show=lambda asset: print(f"  [GameComplete] showing {asset}"),
                on_hide=lambda asset: print(f"  [GameComplete] hiding {asset}"),
                auto_end=0.05,
            ),
        ],
    )
    manager.set_initial(menu_id)
    return manager, started, menu


async def main() -> None:
    print("=== Menu Flow: Triggers, Relations, Lifecycle ===\n")

    manager, started, menu = build()
    await menu.start()

    script = [
        Trigger.PLAY_GAME,
        Trigger.LEVEL_FAILED,
        Trigger.LEVEL_COMPLETE,
        Trigger.LEVEL_COMPLETE,
    ]
    for trigger in script:
        manager.trigger(trigger)
        await asyncio.gather(*started)
        started.clear()

    # Let the splash end itself.
    await asyncio.sleep(0.1)
    print(f"\nFinal manager state: {manager.current_alias or manager.current_id}")


if __name__ == "__main__":
    asyncio.run(main())
