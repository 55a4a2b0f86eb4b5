"""Tests for conversation memory and single-level undo."""

from plan_editor.db.inmemory import InMemorySessionStore
from plan_editor.models.changes import UndoUnavailable
from plan_editor.models.common import MessageRole
from plan_editor.models.plan import Activity, Plan
from plan_editor.session.manager import SessionManager


def make_manager(max_messages: int = 20) -> SessionManager:
    """Helper to create a manager over an in-memory store."""
    return SessionManager(InMemorySessionStore(), max_messages=max_messages)


def test_history_empty_for_unknown_plan() -> None:
    """Test that a fresh plan has no history."""
    assert make_manager().history("trip-x") == []


def test_history_bounded_to_most_recent() -> None:
    """Test that only the newest messages are kept."""
    manager = make_manager(max_messages=4)

    for i in range(6):
        manager.record_turn("trip-1", MessageRole.user, f"message {i}")

    history = manager.history("trip-1")
    assert [m.content for m in history] == ["message 2", "message 3", "message 4", "message 5"]


def test_history_is_a_copy() -> None:
    """Test that callers cannot mutate stored history."""
    manager = make_manager()
    manager.record_turn("trip-1", MessageRole.user, "hi")

    manager.history("trip-1").clear()

    assert len(manager.history("trip-1")) == 1


def test_undo_without_record_is_unavailable(sample_plan: Plan) -> None:
    """Test undo before any applied change."""
    assert make_manager().undo("trip-1", sample_plan) == UndoUnavailable(plan_id="trip-1")


def test_undo_restores_snapshot_once(sample_plan: Plan) -> None:
    """Test that undo restores the pre-change plan and then becomes unavailable."""
    manager = make_manager()
    after = sample_plan.model_copy(deep=True)
    after.days[0].activities.append(Activity(name="Crepes", cost=8))
    after = after.with_recomputed_costs()

    manager.record_applied("trip-1", "change_1", before=sample_plan, after=after)

    assert manager.undo("trip-1", after) == sample_plan
    assert isinstance(manager.undo("trip-1", after), UndoUnavailable)


def test_snapshot_skips_unchanged_costs(sample_plan: Plan) -> None:
    """Test that costs are only captured when the change moved them."""
    manager = make_manager()
    after = sample_plan.model_copy(deep=True)
    after.days[1].title = "Art"

    manager.record_applied("trip-1", "change_1", before=sample_plan, after=after)

    entry = manager.get_or_create("trip-1").last_change
    assert entry.change_id == "change_1"
    assert entry.costs is None
    assert entry.days == sample_plan.days


def test_later_change_replaces_snapshot(sample_plan: Plan) -> None:
    """Test that only the most recent change can be undone."""
    manager = make_manager()
    middle = sample_plan.model_copy(deep=True)
    middle.days[0].title = "First"
    last = middle.model_copy(deep=True)
    last.days[0].title = "Second"

    manager.record_applied("trip-1", "change_1", before=sample_plan, after=middle)
    manager.record_applied("trip-1", "change_2", before=middle, after=last)

    restored = manager.undo("trip-1", last)
    assert restored.days[0].title == "First"


def test_clear_forgets_history_and_undo(sample_plan: Plan) -> None:
    """Test that clearing removes both messages and the undo record."""
    manager = make_manager()
    manager.record_turn("trip-1", MessageRole.user, "hello")
    manager.record_applied("trip-1", "change_1", before=sample_plan, after=sample_plan)

    manager.clear("trip-1")

    assert manager.history("trip-1") == []
    assert isinstance(manager.undo("trip-1", sample_plan), UndoUnavailable)
