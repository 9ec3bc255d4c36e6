"""StateManager: state tree storage and trigger dispatch."""
from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, Iterable

from tick_states.registry import StateRegistry, default_registry
from tick_states.transitions import (
    ByFinder,
    ByID,
    ByRelation,
    ChangeFn,
    Transition,
    TriggerEvent,
)
from tick_states.types import (
    AlreadyInitialised,
    DuplicateAlias,
    InvalidTransition,
    Key,
    NodeId,
    NoMoreSiblings,
    NoParent,
    NoSuchState,
    NoTransitionForTrigger,
    NotInitialised,
    Relation,
    UnresolvedTransitionTarget,
)

logger = logging.getLogger(__name__)

TriggerHook = Callable[[TriggerEvent], None]
Entry = tuple[NodeId, Any]


def _noop(event: TriggerEvent) -> None:
    pass


@dataclass
class Node:
    """One slot in the state tree. Holds a non-owning payload reference."""

    id: NodeId
    payload: Any
    alias: Key | None = None
    parent: NodeId | None = None
    children: list[NodeId] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)


class StateManager:
    """Tree of states with declarative, trigger-keyed transitions.

    Nodes are identified by ids drawn from the registry's shared counter and
    optionally by a per-manager alias. The same payload may sit in several
    nodes. ``trigger`` and ``jump`` are the only ways to move ``current``;
    both either commit fully or leave ``current`` untouched.
    """

    def __init__(
        self,
        pre_trigger: TriggerHook | None = None,
        post_trigger: TriggerHook | None = None,
        registry: StateRegistry | None = None,
    ) -> None:
        self.pre_trigger: TriggerHook = pre_trigger if pre_trigger is not None else _noop
        self.post_trigger: TriggerHook = post_trigger if post_trigger is not None else _noop
        self._registry = registry if registry is not None else default_registry
        self._nodes: dict[NodeId, Node] = {}
        self._aliases: dict[Key, NodeId] = {}
        self._current: Node | None = None

    @property
    def registry(self) -> StateRegistry:
        return self._registry

    # --- Building ---

    def add(
        self,
        payload: Any,
        alias: Key | None = None,
        parent: Key | None = None,
        children: Iterable[Any] = (),
        transitions: Iterable[Transition] = (),
    ) -> NodeId:
        """Add a node for *payload* and return its id.

        *children* may mix existing ids/aliases and fresh payloads. Aliases
        share the key space with ids, so ints and bools are rejected.
        """
        if isinstance(alias, int):
            raise ValueError(f"Alias {alias!r} would collide with node ids")
        if alias is not None and alias in self._aliases:
            raise DuplicateAlias(alias)
        parent_node = self._node(parent) if parent is not None else None

        node = Node(id=self._registry.next_id(), payload=payload, alias=alias)
        self._nodes[node.id] = node
        if alias is not None:
            self._aliases[alias] = node.id
        logger.debug("Added state %d (alias=%r)", node.id, alias)

        if parent_node is not None:
            self._attach(node, parent_node)
        if children:
            self.append_children(node.id, children)
        if transitions:
            node.transitions.extend(transitions)
        return node.id

    def append_child(self, parent: Key, child: Any) -> NodeId:
        """Attach an existing id/alias, or a new node for a payload, under *parent*."""
        parent_node = self._node(parent)
        existing = self._lookup(child)
        if existing is None:
            return self.add(child, parent=parent_node.id)
        self._attach(existing, parent_node)
        return existing.id

    def append_children(self, parent: Key, children: Iterable[Any]) -> list[NodeId]:
        parent_node = self._node(parent)
        return [self.append_child(parent_node.id, child) for child in children]

    def set_parent(self, child: Key, parent: Key) -> None:
        """Move *child* to the end of *parent*'s children."""
        self._attach(self._node(child), self._node(parent))

    def add_transitions(self, key: Key, transitions: Iterable[Transition]) -> None:
        self._node(key).transitions.extend(transitions)

    def transitions(self, key: Key) -> list[Transition]:
        """Copy of the node's transitions, in match order."""
        return list(self._node(key).transitions)

    def _attach(self, node: Node, parent: Node) -> None:
        if node.parent is not None:
            old = self._nodes[node.parent]
            old.children.remove(node.id)
        parent.children.append(node.id)
        node.parent = parent.id
        logger.debug("State %d attached under %d", node.id, parent.id)

    # --- Lookup ---

    def _lookup(self, key: Any) -> Node | None:
        if not isinstance(key, Hashable):
            return None
        is_id = isinstance(key, int) and not isinstance(key, bool)
        node = self._nodes.get(key) if is_id else None
        if node is not None:
            return node
        nid = self._aliases.get(key)
        return self._nodes[nid] if nid is not None else None

    def _node(self, key: Any) -> Node:
        node = self._lookup(key)
        if node is None:
            raise NoSuchState(key)
        return node

    def at(self, key: Key) -> Any:
        """Payload stored at *key*."""
        return self._node(key).payload

    def id(self, key: Key) -> NodeId:
        return self._node(key).id

    def alias_at(self, key: Key) -> Key | None:
        return self._node(key).alias

    def has(self, key: Key) -> bool:
        return self._lookup(key) is not None

    def has_children(self, key: Key) -> bool:
        return bool(self._node(key).children)

    def parent(self, key: Key) -> Entry:
        """(id, payload) of the parent. Raises NoParent on a root."""
        node = self._node(key)
        if node.parent is None:
            raise NoParent(key)
        return node.parent, self._nodes[node.parent].payload

    def try_parent(self, key: Key) -> Entry | None:
        node = self._node(key)
        if node.parent is None:
            return None
        return node.parent, self._nodes[node.parent].payload

    def count(self, payload: Any) -> int:
        """Number of nodes holding this exact payload object."""
        return sum(1 for node in self._nodes.values() if node.payload is payload)

    def is_unique(self, payload: Any) -> bool:
        return self.count(payload) == 1

    # --- Enumeration ---
    #
    # Each call returns a new generator, so sequences restart from scratch.

    def keys(self) -> Generator[NodeId, None, None]:
        yield from list(self._nodes)

    def values(self) -> Generator[Any, None, None]:
        for node in list(self._nodes.values()):
            yield node.payload

    def entries(self) -> Generator[Entry, None, None]:
        for node in list(self._nodes.values()):
            yield node.id, node.payload

    def children(self, key: Key) -> Generator[Entry, None, None]:
        node = self._node(key)
        for cid in list(node.children):
            yield cid, self._nodes[cid].payload

    def siblings(self, key: Key) -> Generator[Entry, None, None]:
        """The parent's children, *key* included. A root yields only itself."""
        node = self._node(key)
        if node.parent is None:
            yield node.id, node.payload
            return
        yield from self.children(node.parent)

    def ancestors(self, key: Key, strict: bool = False) -> Generator[Entry, None, None]:
        """Walk parent links up to the root, starting at *key* unless *strict*.

        No cycle guard: a cyclic tree never terminates.
        """
        node: Node | None = self._node(key)
        if strict:
            node = self._parent_node(node)
        while node is not None:
            yield node.id, node.payload
            node = self._parent_node(node)

    def _parent_node(self, node: Node) -> Node | None:
        return self._nodes[node.parent] if node.parent is not None else None

    # --- Dispatch ---

    @property
    def current(self) -> Any:
        """Payload of the current node, or None before ``set_initial``."""
        return self._current.payload if self._current is not None else None

    @property
    def current_id(self) -> NodeId | None:
        return self._current.id if self._current is not None else None

    @property
    def current_alias(self) -> Key | None:
        return self._current.alias if self._current is not None else None

    def set_initial(self, key: Key) -> None:
        if self._current is not None:
            raise AlreadyInitialised(
                f"Manager already initialised at state {self._current.id}"
            )
        self._current = self._node(key)
        logger.debug("Initial state %d", self._current.id)

    def jump(self, key: Key, change: ChangeFn | None = None) -> TriggerEvent:
        """Move to *key* unconditionally. The event's trigger is None."""
        current = self._require_current()
        return self._commit(None, current, self._node(key), change)

    def trigger(self, value: Any) -> TriggerEvent | None:
        """Follow the first transition of the current node keyed by *value*.

        Returns the committed event, or None if ``on_empty_transition``
        handled an unmatched trigger without raising.
        """
        current = self._require_current()
        for transition in current.transitions:
            if transition.trigger == value:
                target = self._resolve(current, transition)
                return self._commit(value, current, target, transition.change)
        self.on_empty_transition(value, current.payload)
        return None

    def on_empty_transition(self, trigger: Any, state: Any) -> None:
        """Called when no transition matches. Override to tolerate misses."""
        logger.warning(
            "No transition for trigger %r from state %r", trigger, self.current_id
        )
        raise NoTransitionForTrigger(trigger, state)

    def _require_current(self) -> Node:
        if self._current is None:
            raise NotInitialised("Manager has no current state; call set_initial first")
        return self._current

    def _resolve(self, current: Node, transition: Transition) -> Node:
        if isinstance(transition, ByID):
            return self._node(transition.id)
        if isinstance(transition, ByFinder):
            found = transition.find(current.id, current.payload, self)
            node = self._lookup(found) if found is not None else None
            if node is None:
                raise UnresolvedTransitionTarget(
                    f"Finder for trigger {transition.trigger!r} returned {found!r}"
                )
            return node
        if isinstance(transition, ByRelation):
            return self._resolve_relation(current, transition.relation)
        raise InvalidTransition(f"Unknown transition type {type(transition).__name__}")

    def _resolve_relation(self, current: Node, relation: Relation) -> Node:
        if relation is Relation.SAME:
            return current
        if relation is Relation.PARENT:
            if current.parent is None:
                raise InvalidTransition(f"Root state {current.id} has no parent to target")
            return self._nodes[current.parent]
        if relation is Relation.CHILD:
            if not current.children:
                raise UnresolvedTransitionTarget(f"State {current.id} has no children")
            return self._nodes[current.children[0]]
        if relation is Relation.SIBLING:
            sibling = self._next_sibling(current)
            if sibling is None:
                raise NoMoreSiblings(current.id)
            return sibling
        if relation is Relation.SIBLING_ELSE_UP:
            if current.parent is None:
                raise InvalidTransition(
                    f"Root state {current.id} has no sibling or parent to target"
                )
            sibling = self._next_sibling(current)
            return sibling if sibling is not None else self._nodes[current.parent]
        raise InvalidTransition(f"Unsupported relation {relation!r}")

    def _next_sibling(self, node: Node) -> Node | None:
        if node.parent is None:
            return None
        siblings = self._nodes[node.parent].children
        index = siblings.index(node.id) + 1
        return self._nodes[siblings[index]] if index < len(siblings) else None

    def _commit(
        self, trigger: Any, current: Node, target: Node, change: ChangeFn | None,
    ) -> TriggerEvent:
        event = TriggerEvent(
            trigger=trigger,
            old=current.payload,
            old_id=current.id,
            old_alias=current.alias,
            new=target.payload,
            new_id=target.id,
            new_alias=target.alias,
        )
        self.pre_trigger(event)
        if change is not None:
            change(event, self)
        self.post_trigger(event)
        self._current = target
        logger.debug("Transition %d -> %d on %r", current.id, target.id, trigger)
        return event
