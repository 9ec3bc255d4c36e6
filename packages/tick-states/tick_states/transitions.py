"""Transition variants and the trigger event passed to dispatch hooks."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Union

from tick_states.types import Key, NodeId, Relation

if TYPE_CHECKING:
    from tick_states.manager import StateManager

ChangeFn = Callable[["TriggerEvent", "StateManager"], None]
FinderFn = Callable[[NodeId, Any, "StateManager"], Union[Key, None]]


@dataclass(frozen=True)
class TriggerEvent:
    """Before/after view of a transition. ``trigger`` is None for jumps."""

    trigger: Any
    old: Any
    old_id: NodeId
    old_alias: Key | None
    new: Any
    new_id: NodeId
    new_alias: Key | None


# --- Variants ---


@dataclass(frozen=True)
class ByID:
    """Target an explicit node id or alias."""

    trigger: Any
    id: Key
    change: ChangeFn | None = None


@dataclass(frozen=True)
class ByRelation:
    """Target a node relative to the current one."""

    trigger: Any
    relation: Relation
    change: ChangeFn | None = None


@dataclass(frozen=True)
class ByFinder:
    """Target whatever ``find(current_id, current_payload, manager)`` returns."""

    trigger: Any
    find: FinderFn
    change: ChangeFn | None = None


Transition = Union[ByID, ByRelation, ByFinder]


def make_transition(
    trigger: Any,
    *,
    id: Key | None = None,
    relation: Relation | None = None,
    find: FinderFn | None = None,
    change: ChangeFn | None = None,
) -> Transition:
    """Build the variant matching the single target given.

    Exactly one of *id*, *relation* or *find* must be set.

    >>> make_transition("play", relation=Relation.CHILD)
    ByRelation(trigger='play', relation=<Relation.CHILD: 'child'>, change=None)
    """
    given = [name for name, value in (("id", id), ("relation", relation), ("find", find))
             if value is not None]
    if len(given) != 1:
        raise ValueError(
            f"Transition needs exactly one of id, relation or find, got {given or 'none'}"
        )
    if id is not None:
        return ByID(trigger, id, change)
    if relation is not None:
        return ByRelation(trigger, relation, change)
    return ByFinder(trigger, find, change)  # type: ignore[arg-type]
