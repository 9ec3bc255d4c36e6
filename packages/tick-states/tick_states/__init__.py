"""tick-states - Hierarchical, trigger-driven game state management."""
from __future__ import annotations

from tick_states.config import StateConfig
from tick_states.manager import Node, StateManager
from tick_states.registry import StateRegistry, default_registry
from tick_states.splash import Splash
from tick_states.state import State, reset, resume
from tick_states.transitions import (
    ByFinder,
    ByID,
    ByRelation,
    Transition,
    TriggerEvent,
    make_transition,
)
from tick_states.types import (
    AlreadyInitialised,
    DuplicateAlias,
    EndingRootState,
    InvalidTransition,
    Lifecycle,
    NoMoreSiblings,
    NoParent,
    NoSuchState,
    NotInitialised,
    NoTransitionForTrigger,
    Relation,
    StateError,
    StateEventType,
    UnresolvedTransitionTarget,
)

__all__ = [
    "StateManager",
    "Node",
    "State",
    "StateConfig",
    "Splash",
    "StateRegistry",
    "default_registry",
    "resume",
    "reset",
    "ByID",
    "ByRelation",
    "ByFinder",
    "Transition",
    "TriggerEvent",
    "make_transition",
    "Relation",
    "StateEventType",
    "Lifecycle",
    "StateError",
    "NoSuchState",
    "DuplicateAlias",
    "AlreadyInitialised",
    "NotInitialised",
    "NoParent",
    "EndingRootState",
    "NoMoreSiblings",
    "InvalidTransition",
    "UnresolvedTransitionTarget",
    "NoTransitionForTrigger",
]
