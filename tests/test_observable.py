"""Tests for change notification."""

from __future__ import annotations

import pytest
from rolegraph import (
    InheritablePermissionStore,
    InvalidArgumentError,
    ObservablePermissionStore,
    PermissionChangedAction,
    PermissionChangedEvent,
    PermissionStore,
)


class Recorder:
    """Listener that records every event."""

    def __init__(self) -> None:
        self.events: list[PermissionChangedEvent] = []

    def __call__(self, event: PermissionChangedEvent) -> None:
        self.events.append(event)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def store(recorder: Recorder) -> ObservablePermissionStore:
    observable = ObservablePermissionStore()
    observable.subscribe(recorder)
    return observable


class TestAddEvents:
    """Grants emit ADD with the roles actually added."""

    def test_add_roles_emits_one_event(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """One ADD event carrying the granted roles."""
        assert store.add_roles("s", "o", {"A", "B"}) is True

        assert len(recorder.events) == 1
        event = recorder.events[0]
        assert event.action is PermissionChangedAction.ADD
        assert event.subject == "s"
        assert event.obj == "o"
        assert event.new_roles == {"A", "B"}
        assert event.old_roles is None
        assert event.source is store

    def test_add_role(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """add_role emits an ADD event for the single role."""
        store.add_role("s", "o", "A")

        assert recorder.events == [
            PermissionChangedEvent(PermissionChangedAction.ADD, "s", "o", new_roles=frozenset({"A"}))
        ]

    def test_add_reports_only_new_roles(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """ADD carries only roles that were not already held."""
        store.add_role("s", "o", "A")

        store.add_roles("s", "o", ["A", "B"])

        assert recorder.events[-1].new_roles == {"B"}

    def test_noop_add_emits_nothing(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Adds that change nothing emit no event."""
        store.add_role("s", "o", "A")
        recorder.events.clear()

        assert store.add_role("s", "o", "A") is False
        assert store.add_roles("s", "o", ["A"]) is False
        assert store.add_roles("s", "o", []) is False

        assert recorder.events == []


class TestRemoveEvents:
    """Revocations emit REMOVE with the roles actually removed."""

    def test_remove_role(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """remove_role emits REMOVE with the revoked role."""
        store.add_roles("s", "o", ["A", "B"])

        assert store.remove_role("s", "o", "A") is True

        event = recorder.events[-1]
        assert event.action is PermissionChangedAction.REMOVE
        assert (event.subject, event.obj) == ("s", "o")
        assert event.old_roles == {"A"}

    def test_remove_roles_reports_only_removed(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """REMOVE carries only roles that were held."""
        store.add_roles("s", "o", ["A", "B"])

        store.remove_roles("s", "o", ["B", "C"])

        assert recorder.events[-1].old_roles == {"B"}

    def test_remove_all_roles(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """remove_all_roles emits REMOVE with every dropped role."""
        store.add_roles("s", "o", ["A", "B"])

        assert store.remove_all_roles("s", "o") is True

        event = recorder.events[-1]
        assert event.action is PermissionChangedAction.REMOVE
        assert event.old_roles == {"A", "B"}

    def test_remove_all_subject_roles(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Subject-wide removal emits REMOVE with the subject only."""
        store.add_role("s", "o", "A")

        assert store.remove_all_subject_roles("s") is True

        event = recorder.events[-1]
        assert event.action is PermissionChangedAction.REMOVE
        assert event.subject == "s"
        assert event.obj is None
        assert event.old_roles is None

    def test_remove_all_object_roles(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Object-wide removal emits REMOVE with the object only."""
        store.add_role("s", "o", "A")

        assert store.remove_all_object_roles("o") is True

        event = recorder.events[-1]
        assert event.action is PermissionChangedAction.REMOVE
        assert event.subject is None
        assert event.obj == "o"

    def test_noop_removals_emit_nothing(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Removals that change nothing emit no event."""
        assert store.remove_role("s", "o", "A") is False
        assert store.remove_roles("s", "o", ["A"]) is False
        assert store.remove_all_roles("s", "o") is False
        assert store.remove_all_subject_roles("s") is False
        assert store.remove_all_object_roles("o") is False

        assert recorder.events == []


class TestResetEvents:
    """Replacement and clearing emit RESET."""

    def test_set_roles_emits_replacement(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """set_roles emits RESET with the full replacement set."""
        store.add_roles("s", "o", ["A", "B"])

        store.set_roles("s", "o", ["C"])

        event = recorder.events[-1]
        assert event.action is PermissionChangedAction.RESET
        assert (event.subject, event.obj) == ("s", "o")
        assert event.new_roles == {"C"}
        assert store.get_roles("s", "o") == {"C"}

    def test_set_roles_always_emits(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """set_roles emits even when nothing changed."""
        store.set_roles("s", "o", [])
        store.set_roles("s", "o", [])

        assert [e.action for e in recorder.events] == [PermissionChangedAction.RESET] * 2

    def test_setitem_emits_reset(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Item assignment goes through set_roles."""
        store["s", "o"] = ["A"]

        assert recorder.events[-1].action is PermissionChangedAction.RESET
        assert store["s", "o"] == {"A"}

    def test_clear_emits_bare_reset(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """clear() emits a RESET without subject, object or roles."""
        store.add_role("s", "o", "A")
        recorder.events.clear()

        store.clear()

        assert recorder.events == [PermissionChangedEvent(PermissionChangedAction.RESET)]

    def test_clear_on_empty_store_emits(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """clear() emits even on an empty store."""
        store.clear()

        assert len(recorder.events) == 1


class TestListeners:
    """Subscription management and delivery order."""

    def test_registration_order(self, store: ObservablePermissionStore) -> None:
        """Listeners run in registration order."""
        calls: list[str] = []
        store.subscribe(lambda event: calls.append("first"))
        store.subscribe(lambda event: calls.append("second"))

        store.add_role("s", "o", "A")

        assert calls == ["first", "second"]

    def test_unsubscribe(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Unsubscribed listeners receive nothing."""
        assert store.unsubscribe(recorder) is True
        assert store.unsubscribe(recorder) is False

        store.add_role("s", "o", "A")

        assert recorder.events == []

    def test_listener_error_propagates_after_commit(self) -> None:
        """The mutation is committed even when a listener fails."""
        store = ObservablePermissionStore()

        def failing(event: PermissionChangedEvent) -> None:
            raise RuntimeError("listener failed")

        store.subscribe(failing)

        with pytest.raises(RuntimeError, match="listener failed"):
            store.add_role("s", "o", "A")

        assert store.has_role("s", "o", "A")

    def test_subscribe_none(self, store: ObservablePermissionStore) -> None:
        """A None listener is rejected."""
        with pytest.raises(InvalidArgumentError):
            store.subscribe(None)  # type: ignore[arg-type]

    def test_invalid_arguments_emit_nothing(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Failed validation emits nothing and changes nothing."""
        with pytest.raises(InvalidArgumentError):
            store.add_roles("s", None, ["A"])  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            store.set_roles("s", "o", None)  # type: ignore[arg-type]

        assert recorder.events == []
        assert len(store) == 0


class TestComposition:
    """The wrapper forwards to whichever store it holds."""

    def test_wraps_inheritable_store(self, recorder: Recorder) -> None:
        """Inheritance operations are forwarded; edges emit no events."""
        store = ObservablePermissionStore(InheritablePermissionStore())
        store.subscribe(recorder)
        store.add_roles("s1", "o", {"Manager", "Owner"})
        store.add_role("s2", "o", "Editor")

        assert store.add_subject_inheritance("s1", "s2") is True
        assert store.get_roles("s1", "o") == {"Manager", "Owner", "Editor"}
        assert store.get_direct_roles("s1", "o") == {"Manager", "Owner"}
        assert store.is_subject_inherits("s1", "s2")
        assert len(recorder.events) == 2

    def test_clear_resets_inheritance(self, recorder: Recorder) -> None:
        """clear() on the wrapper also clears inheritance edges."""
        inner = InheritablePermissionStore()
        store = ObservablePermissionStore(inner)
        store.subscribe(recorder)
        store.add_subject_inheritance("a", "b")

        store.clear()

        assert not inner.is_subject_inherits("a", "b")
        assert recorder.events[-1].action is PermissionChangedAction.RESET

    def test_default_inner_store(self) -> None:
        """Without an argument the wrapper holds a plain PermissionStore."""
        store = ObservablePermissionStore()
        assert isinstance(store.store, PermissionStore)
        with pytest.raises(AttributeError):
            store.add_subject_inheritance("a", "b")

    @pytest.mark.parametrize("name", ["apply_add_roles", "apply_set_roles", "apply_clear", "_storage"])
    def test_trusted_primitives_not_forwarded(self, store: ObservablePermissionStore, name: str) -> None:
        """Unvalidated primitives and internals are not reachable through the wrapper."""
        with pytest.raises(AttributeError):
            getattr(store, name)

    def test_inner_store_mutation_is_explicit(self, store: ObservablePermissionStore, recorder: Recorder) -> None:
        """Unnotified writes go through ``store`` and emit nothing."""
        with pytest.raises(AttributeError):
            store.apply_add_roles("s", "o", {"A"})  # type: ignore[attr-defined]
        assert len(store) == 0

        assert store.store.apply_add_roles("s", "o", {"A"}) == {"A"}
        assert store.get_roles("s", "o") == {"A"}
        assert recorder.events == []


class TestPermissionChangedEvent:
    """Event payload shape is checked per action."""

    def test_add_requires_pair(self) -> None:
        """ADD events need both subject and object."""
        with pytest.raises(InvalidArgumentError):
            PermissionChangedEvent(PermissionChangedAction.ADD, subject="s", new_roles=frozenset({"A"}))

    def test_add_requires_new_roles(self) -> None:
        """ADD events need new_roles."""
        with pytest.raises(InvalidArgumentError):
            PermissionChangedEvent(PermissionChangedAction.ADD, subject="s", obj="o")

    def test_remove_requires_subject_or_object(self) -> None:
        """REMOVE events need a subject or an object."""
        with pytest.raises(InvalidArgumentError):
            PermissionChangedEvent(PermissionChangedAction.REMOVE)

    def test_reset_may_be_bare(self) -> None:
        """RESET events may carry nothing."""
        event = PermissionChangedEvent(PermissionChangedAction.RESET)
        assert event.subject is None
        assert event.new_roles is None
