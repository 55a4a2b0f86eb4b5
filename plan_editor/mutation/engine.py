"""Mutation engine - applies validated actions to a plan.

``apply_action`` is a pure function: it works on a deep copy and never mutates
the plan it is given. References to days or activity indices that do not exist
degrade to a no-op with a zero cost delta instead of raising.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import ValidationError

from plan_editor.dedupe.deduplicator import matches_existing, sweep_duplicates
from plan_editor.models.actions import (
    Action,
    AddActivity,
    RemoveActivity,
    ReorderActivities,
    UpdateActivity,
    UpdateDayTitle,
)
from plan_editor.models.plan import Activity, Day, Plan

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def new_activity_id() -> str:
    """Generate a synthetic activity id."""
    return f"act_{uuid.uuid4().hex[:12]}"


@dataclass
class BatchResult:
    """Outcome of applying a change batch."""

    plan: Plan
    cost_delta: float
    applied_count: int
    swept_count: int
    skipped_duplicates: int


def _add(day: Day, action: AddActivity, id_factory: IdFactory) -> float:
    activity = action.activity.model_copy(update={"id": id_factory()}, deep=True)
    day.activities.append(activity)
    logger.info(f"Added activity {activity.display_name!r} to Day {day.day_number}")
    return activity.cost_or_zero


def _remove(day: Day, action: RemoveActivity) -> float:
    index = action.activity_index
    if not 0 <= index < len(day.activities):
        logger.info(f"Remove index {index} out of range for Day {day.day_number}, ignoring")
        return 0
    removed = day.activities.pop(index)
    logger.info(f"Removed activity {removed.display_name!r} from Day {day.day_number}")
    return -removed.cost_or_zero


def _update(day: Day, action: UpdateActivity) -> float:
    if action.title:
        day.title = action.title
        logger.info(f"Updated Day {day.day_number} title to {action.title!r}")

    index = action.activity_index
    if index is None or not action.updates:
        return 0
    if not 0 <= index < len(day.activities):
        logger.info(f"Update index {index} out of range for Day {day.day_number}, ignoring")
        return 0

    old = day.activities[index]
    updates = {k: v for k, v in action.updates.items() if k != "id"}
    if "type" in updates:
        updates["category"] = updates.pop("type")

    try:
        merged = Activity.model_validate({**old.model_dump(), **updates})
    except ValidationError as e:
        logger.warning(f"Rejected activity update on Day {day.day_number}: {e.error_count()} error(s)")
        return 0

    day.activities[index] = merged
    logger.info(f"Updated activity {merged.display_name!r} in Day {day.day_number}")
    if merged.cost_or_zero != old.cost_or_zero:
        return merged.cost_or_zero - old.cost_or_zero
    return 0


def _reorder(day: Day, action: ReorderActivities) -> float:
    activities = day.activities
    picked: list[Activity] = []
    seen: set[int] = set()

    # Indices missing from the permutation are dropped from the day
    for index in action.new_order:
        if 0 <= index < len(activities) and index not in seen:
            picked.append(activities[index])
            seen.add(index)

    day.activities = picked
    logger.info(f"Reordered activities in Day {day.day_number}")
    return 0


def apply_action(
    plan: Plan, action: Action, *, id_factory: IdFactory = new_activity_id
) -> tuple[Plan, float]:
    """Apply one action to a plan.

    Args:
        plan: Current plan (never mutated)
        action: Validated action
        id_factory: Source of synthetic ids for added activities

    Returns:
        Tuple of (new_plan, cost_delta)
    """
    new_plan = plan.model_copy(deep=True)
    day = new_plan.get_day(action.day_number)

    if day is None:
        logger.info(f"Day {action.day_number} not in plan, ignoring {action.kind}")
        return new_plan, 0

    if isinstance(action, AddActivity):
        delta = _add(day, action, id_factory)
    elif isinstance(action, RemoveActivity):
        delta = _remove(day, action)
    elif isinstance(action, UpdateActivity):
        delta = _update(day, action)
    elif isinstance(action, ReorderActivities):
        delta = _reorder(day, action)
    elif isinstance(action, UpdateDayTitle):
        day.title = action.title
        logger.info(f"Updated Day {day.day_number} title to {action.title!r}")
        delta = 0
    else:
        raise TypeError(f"Unsupported action type: {type(action).__name__}")

    return new_plan, delta


def apply_batch(
    plan: Plan, actions: list[Action], *, id_factory: IdFactory = new_activity_id
) -> BatchResult:
    """Apply a confirmed batch in order.

    The plan is swept of existing duplicates first. Each addition is checked
    against the plan as it stands at that point, so earlier actions in the
    batch are taken into account. A closing sweep keeps renames from leaving
    duplicates behind. Cost totals are recomputed at the end.
    """
    current, swept = sweep_duplicates(plan)
    if swept:
        logger.info(f"Cleaned up {swept} existing duplicate(s) before applying new actions")

    cost_delta: float = 0
    applied = 0
    skipped = 0

    for action in actions:
        if isinstance(action, AddActivity) and matches_existing(action, current):
            logger.info(
                f"Skipping duplicate activity {action.activity.display_name!r} in Day {action.day_number}"
            )
            skipped += 1
            continue

        updated, delta = apply_action(current, action, id_factory=id_factory)
        if updated != current:
            applied += 1
        current = updated
        cost_delta += delta

    current, swept_after = sweep_duplicates(current)

    return BatchResult(
        plan=current.with_recomputed_costs(),
        cost_delta=cost_delta,
        applied_count=applied,
        swept_count=swept + swept_after,
        skipped_duplicates=skipped,
    )
