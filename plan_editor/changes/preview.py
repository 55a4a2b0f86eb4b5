"""Human-readable previews for proposed change batches."""

from plan_editor.models.actions import (
    Action,
    AddActivity,
    RemoveActivity,
    ReorderActivities,
    UpdateActivity,
    UpdateDayTitle,
)
from plan_editor.models.changes import ChangePreview
from plan_editor.models.plan import Plan


def _activity_name(plan: Plan | None, day_number: int, index: int | None) -> str | None:
    if plan is None or index is None or index < 0:
        return None
    day = plan.get_day(day_number)
    if day is None or index >= len(day.activities):
        return None
    return day.activities[index].display_name or None


def summarize_action(action: Action, plan: Plan | None = None, time_placeholder: str = "TBD") -> str:
    """One bullet line describing an action."""
    n = action.day_number
    if isinstance(action, AddActivity):
        return f'Add "{action.activity.display_name}" to Day {n} at {action.activity.time or time_placeholder}'
    if isinstance(action, RemoveActivity):
        name = _activity_name(plan, n, action.activity_index)
        return f'Remove "{name}" from Day {n}' if name else f"Remove activity from Day {n}"
    if isinstance(action, UpdateActivity):
        if action.activity_index is None and action.title:
            return f'Rename Day {n} to "{action.title}"'
        name = _activity_name(plan, n, action.activity_index)
        return f'Update "{name}" in Day {n}' if name else f"Update activity in Day {n}"
    if isinstance(action, ReorderActivities):
        return f"Reorder activities in Day {n}"
    if isinstance(action, UpdateDayTitle):
        return f'Rename Day {n} to "{action.title}"'
    raise TypeError(f"Unsupported action type: {type(action).__name__}")


def prospective_cost(action: Action) -> float:
    """Cost an action declares up front (only additions declare one)."""
    if isinstance(action, AddActivity):
        return action.activity.cost_or_zero
    return 0


def build_preview(
    actions: list[Action], plan: Plan | None = None, time_placeholder: str = "TBD"
) -> ChangePreview:
    """Build the preview shown before the user confirms a batch.

    A single action is described by its own summary; larger batches read
    "<n> changes to your plan".
    """
    items = [summarize_action(a, plan, time_placeholder) for a in actions]
    description = items[0] if len(items) == 1 else f"{len(items)} changes to your plan"
    return ChangePreview(
        description=description,
        items=items,
        estimated_cost_change=sum(prospective_cost(a) for a in actions),
    )
