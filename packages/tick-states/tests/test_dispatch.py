"""Tests for trigger dispatch and transition resolution."""
from enum import Enum

import pytest

from tick_states import (
    AlreadyInitialised,
    ByFinder,
    ByID,
    ByRelation,
    InvalidTransition,
    NoMoreSiblings,
    NoSuchState,
    NotInitialised,
    NoTransitionForTrigger,
    Relation,
    StateManager,
    UnresolvedTransitionTarget,
)


class Trigger(Enum):
    PLAY = 1
    NEXT = 2
    BACK = 3
    QUIT = 4


@pytest.fixture
def tree(manager):
    """Parent P with children A then B; A is current."""
    p = manager.add("P", alias="P")
    a = manager.append_child(p, "A")
    b = manager.append_child(p, "B")
    manager.set_initial(a)
    return p, a, b


class TestInitialisation:
    """set_initial and the unset current pointer."""

    def test_current_unset(self, manager):
        manager.add("menu")
        assert manager.current is None
        assert manager.current_id is None
        assert manager.current_alias is None

    def test_set_initial(self, manager):
        nid = manager.add("menu", alias="menu")
        manager.set_initial("menu")
        assert manager.current == "menu"
        assert manager.current_id == nid
        assert manager.current_alias == "menu"

    def test_set_initial_twice(self, manager):
        nid = manager.add("menu")
        manager.set_initial(nid)
        with pytest.raises(AlreadyInitialised):
            manager.set_initial(nid)

    def test_set_initial_unknown_key(self, manager):
        nid = manager.add("menu")
        with pytest.raises(NoSuchState):
            manager.set_initial("missing")
        manager.set_initial(nid)
        assert manager.current == "menu"

    def test_trigger_before_initial(self, manager):
        manager.add("menu", transitions=[ByRelation("go", Relation.SAME)])
        with pytest.raises(NotInitialised):
            manager.trigger("go")

    def test_jump_before_initial(self, manager):
        nid = manager.add("menu")
        with pytest.raises(NotInitialised):
            manager.jump(nid)


class TestRelations:
    """Relation-based targets."""

    def test_child_scenario(self, manager):
        menu = object()
        level = object()
        menu_id = manager.add(menu)
        level_id = manager.add(level, alias="L0", parent=menu_id)
        assert (menu_id, level_id) == (0, 1)
        assert manager.at(1) is manager.at("L0") is level

        manager.set_initial(menu_id)
        manager.add_transitions(menu_id, [ByRelation("play", Relation.CHILD)])
        manager.trigger("play")

        assert manager.current is level

    def test_child_is_first_child(self, manager, tree):
        p, a, b = tree
        manager.add_transitions(p, [ByRelation("down", Relation.CHILD)])
        manager.add_transitions(a, [ByRelation("up", Relation.PARENT)])
        manager.trigger("up")
        manager.trigger("down")
        assert manager.current_id == a

    def test_childless_child_relation(self, manager, tree):
        _, a, _ = tree
        manager.add_transitions(a, [ByRelation("down", Relation.CHILD)])
        with pytest.raises(UnresolvedTransitionTarget):
            manager.trigger("down")
        assert manager.current_id == a

    def test_sibling_then_exhausted(self, manager, tree):
        _, a, b = tree
        sibling = ByRelation(Trigger.NEXT, Relation.SIBLING)
        manager.add_transitions(a, [sibling])
        manager.add_transitions(b, [sibling])

        manager.trigger(Trigger.NEXT)
        assert manager.current_id == b

        with pytest.raises(NoMoreSiblings):
            manager.trigger(Trigger.NEXT)
        assert manager.current_id == b

    def test_sibling_of_root(self, manager):
        root = manager.add("root", transitions=[ByRelation("next", Relation.SIBLING)])
        manager.add("other root")
        manager.set_initial(root)
        with pytest.raises(NoMoreSiblings):
            manager.trigger("next")

    def test_sibling_else_up_moves_to_sibling(self, manager, tree):
        _, a, b = tree
        manager.add_transitions(a, [ByRelation("next", Relation.SIBLING_ELSE_UP)])
        manager.trigger("next")
        assert manager.current_id == b

    def test_sibling_else_up_on_last_child(self, manager, tree):
        p, _, b = tree
        manager.add_transitions(b, [ByRelation("next", Relation.SIBLING_ELSE_UP)])
        manager.jump(b)
        manager.trigger("next")
        assert manager.current_id == p
        assert manager.current == "P"

    def test_sibling_else_up_on_root(self, manager):
        root = manager.add("root", transitions=[ByRelation("next", Relation.SIBLING_ELSE_UP)])
        manager.set_initial(root)
        with pytest.raises(InvalidTransition):
            manager.trigger("next")

    def test_parent(self, manager, tree):
        p, a, _ = tree
        manager.add_transitions(a, [ByRelation(Trigger.BACK, Relation.PARENT)])
        manager.trigger(Trigger.BACK)
        assert manager.current_id == p

    def test_parent_of_root(self, manager, tree):
        p, _, _ = tree
        manager.add_transitions(p, [ByRelation(Trigger.BACK, Relation.PARENT)])
        manager.jump(p)
        with pytest.raises(InvalidTransition):
            manager.trigger(Trigger.BACK)
        assert manager.current_id == p

    def test_same(self, manager, tree):
        _, a, _ = tree
        seen = []
        manager.add_transitions(
            a, [ByRelation("retry", Relation.SAME, change=lambda e, m: seen.append(e))]
        )
        event = manager.trigger("retry")
        assert manager.current_id == a
        assert seen == [event]
        assert event.old_id == event.new_id == a

    def test_unsupported_relation(self, manager, tree):
        _, a, _ = tree
        manager.add_transitions(a, [ByRelation("odd", "child_else_sibling")])
        with pytest.raises(InvalidTransition):
            manager.trigger("odd")


class TestExplicitTargets:
    """ByID and ByFinder targets."""

    def test_by_alias(self, manager, tree):
        p, a, _ = tree
        manager.add_transitions(a, [ByID(Trigger.QUIT, "P")])
        manager.trigger(Trigger.QUIT)
        assert manager.current_id == p

    def test_by_id(self, manager, tree):
        _, a, b = tree
        manager.add_transitions(a, [ByID("skip", b)])
        manager.trigger("skip")
        assert manager.current_id == b

    def test_by_unknown_id(self, manager, tree):
        _, a, _ = tree
        manager.add_transitions(a, [ByID("skip", "nowhere")])
        with pytest.raises(NoSuchState):
            manager.trigger("skip")
        assert manager.current_id == a

    def test_finder_arguments(self, manager, tree):
        _, a, b = tree
        calls = []

        def find(current_id, payload, mgr):
            calls.append((current_id, payload, mgr))
            return b

        manager.add_transitions(a, [ByFinder("find", find)])
        manager.trigger("find")
        assert calls == [(a, "A", manager)]
        assert manager.current_id == b

    def test_finder_may_return_alias(self, manager, tree):
        p, a, _ = tree
        manager.add_transitions(a, [ByFinder("find", lambda i, s, m: "P")])
        manager.trigger("find")
        assert manager.current_id == p

    @pytest.mark.parametrize("result", [None, "nowhere", 999])
    def test_finder_unresolvable(self, manager, tree, result):
        _, a, _ = tree
        manager.add_transitions(a, [ByFinder("find", lambda i, s, m: result)])
        with pytest.raises(UnresolvedTransitionTarget):
            manager.trigger("find")
        assert manager.current_id == a


class TestMatching:
    """Trigger matching and the empty-transition handler."""

    def test_first_match_wins(self, manager, tree):
        p, a, b = tree
        manager.add_transitions(a, [ByID("go", b), ByID("go", p)])
        manager.trigger("go")
        assert manager.current_id == b

    def test_equality_is_strict(self, manager, tree):
        _, a, b = tree
        manager.add_transitions(a, [ByID(1, b)])
        with pytest.raises(NoTransitionForTrigger):
            manager.trigger("1")
        assert manager.current_id == a

    def test_no_match_raises(self, manager, tree):
        _, a, _ = tree
        with pytest.raises(NoTransitionForTrigger) as exc_info:
            manager.trigger(Trigger.PLAY)
        assert exc_info.value.trigger is Trigger.PLAY
        assert exc_info.value.state == "A"
        assert manager.current_id == a

    def test_null_trigger_transition(self, manager, tree):
        _, a, b = tree
        manager.add_transitions(a, [ByID(None, b)])
        manager.trigger(None)
        assert manager.current_id == b

    def test_override_empty_transition(self, registry):
        misses = []

        class Lenient(StateManager):
            def on_empty_transition(self, trigger, state):
                misses.append((trigger, state))

        manager = Lenient(registry=registry)
        nid = manager.add("menu")
        manager.set_initial(nid)
        assert manager.trigger("nothing") is None
        assert misses == [("nothing", "menu")]
        assert manager.current_id == nid


class TestHooks:
    """pre_trigger -> change -> post_trigger -> commit."""

    def test_hook_order(self, registry):
        calls = []
        manager = StateManager(
            pre_trigger=lambda e: calls.append(("pre", manager.current)),
            post_trigger=lambda e: calls.append(("post", manager.current)),
            registry=registry,
        )
        a = manager.add("A")
        b = manager.add("B")
        manager.add_transitions(
            a, [ByID("go", b, change=lambda e, m: calls.append(("change", m.current)))]
        )
        manager.set_initial(a)

        manager.trigger("go")

        # Current only moves after every hook has run.
        assert calls == [("pre", "A"), ("change", "A"), ("post", "A")]
        assert manager.current == "B"

    def test_event_fields(self, registry):
        events = []
        manager = StateManager(post_trigger=events.append, registry=registry)
        a = manager.add("A", alias="a")
        b = manager.add("B")
        manager.add_transitions(a, [ByID(Trigger.PLAY, b)])
        manager.set_initial(a)

        returned = manager.trigger(Trigger.PLAY)

        (event,) = events
        assert event is returned
        assert event.trigger is Trigger.PLAY
        assert (event.old, event.old_id, event.old_alias) == ("A", a, "a")
        assert (event.new, event.new_id, event.new_alias) == ("B", b, None)

    def test_change_receives_manager(self, manager, tree):
        _, a, b = tree
        received = []
        manager.add_transitions(a, [ByID("go", b, change=lambda e, m: received.append(m))])
        manager.trigger("go")
        assert received == [manager]

    @pytest.mark.parametrize("failing", ["pre", "change", "post"])
    def test_hook_exception_aborts(self, registry, failing):
        def boom(*args):
            raise RuntimeError(failing)

        manager = StateManager(
            pre_trigger=boom if failing == "pre" else None,
            post_trigger=boom if failing == "post" else None,
            registry=registry,
        )
        a = manager.add("A")
        b = manager.add("B")
        manager.add_transitions(
            a, [ByID("go", b, change=boom if failing == "change" else None)]
        )
        manager.set_initial(a)

        with pytest.raises(RuntimeError, match=failing):
            manager.trigger("go")
        assert manager.current_id == a

    def test_hooks_not_called_on_resolution_failure(self, registry):
        calls = []
        manager = StateManager(pre_trigger=calls.append, registry=registry)
        a = manager.add("A", transitions=[ByRelation("up", Relation.PARENT)])
        manager.set_initial(a)
        with pytest.raises(InvalidTransition):
            manager.trigger("up")
        assert calls == []

    def test_hooks_are_assignable(self, manager, tree):
        _, a, b = tree
        seen = []
        manager.pre_trigger = seen.append
        manager.jump(b)
        assert seen[0].new_id == b


class TestJump:
    """Unconditional jumps."""

    def test_jump(self, manager, tree):
        p, a, _ = tree
        event = manager.jump("P")
        assert manager.current_id == p
        assert event.trigger is None
        assert event.old_id == a

    def test_jump_with_change(self, manager, tree):
        _, _, b = tree
        seen = []
        manager.jump(b, change=lambda e, m: seen.append(e.new))
        assert seen == ["B"]

    def test_jump_unknown(self, manager, tree):
        _, a, _ = tree
        with pytest.raises(NoSuchState):
            manager.jump("nowhere")
        assert manager.current_id == a
