"""Lifecycle configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StateConfig:
    """Immutable options for a lifecycle ``State``.

    Attributes:
        start_children_immediately: Start the first child once this state
            has started, and advance to the next child whenever one ends.
        end_when_children_done: End this state when advancing runs past its
            last child. Requires a parent.
        pause_on_child_start: Pause this state while one of its children is
            started, unpausing it again when that child ends.
        paused: Initial paused flag.
    """

    start_children_immediately: bool = False
    end_when_children_done: bool = False
    pause_on_child_start: bool = False
    paused: bool = False
