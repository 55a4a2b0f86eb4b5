"""Duplicate detection for activities and proposed actions.

Two activities on the same day are duplicates when their normalized names
(lowercased, trimmed) are equal, or when one name contains the other and their
times match or either time is blank. The first occurrence always wins.
"""

import logging

from plan_editor.models.actions import Action, AddActivity, RemoveActivity
from plan_editor.models.plan import Activity, Plan
from plan_editor.utils.metrics import metrics

logger = logging.getLogger(__name__)


def normalize_name(name: str | None) -> str:
    """Lowercase and trim a name for comparison."""
    return (name or "").strip().lower()


def is_duplicate_activity(first: Activity, second: Activity) -> bool:
    """Check whether two activities of one day describe the same thing."""
    a = normalize_name(first.display_name)
    b = normalize_name(second.display_name)

    # Unnamed activities are never treated as duplicates
    if not a or not b:
        return False
    if a == b:
        return True

    if a in b or b in a:
        a_time = first.time.strip()
        b_time = second.time.strip()
        return a_time == b_time or not a_time or not b_time

    return False


def sweep_duplicates(plan: Plan) -> tuple[Plan, int]:
    """Remove later duplicates from every day of a plan.

    Returns:
        Tuple of (plan, removed_count). The input plan is returned untouched
        when nothing was removed; otherwise a new plan is built.
    """
    removed = 0
    new_days = []

    for day in plan.days:
        kept: list[Activity] = []
        for activity in day.activities:
            if any(is_duplicate_activity(existing, activity) for existing in kept):
                logger.info(
                    f"Removing duplicate activity {activity.display_name!r} from Day {day.day_number}"
                )
                removed += 1
                continue
            kept.append(activity)
        new_days.append(day.model_copy(update={"activities": kept}))

    if removed == 0:
        return plan, 0
    return plan.model_copy(update={"days": new_days}).model_copy(deep=True), removed


def matches_existing(action: AddActivity, plan: Plan) -> bool:
    """Check whether an addition duplicates an activity already on its day."""
    day = plan.get_day(action.day_number)
    if day is None:
        return False
    return any(is_duplicate_activity(existing, action.activity) for existing in day.activities)


def _batch_key(action: Action) -> tuple:
    if isinstance(action, AddActivity):
        return ("add", action.day_number, normalize_name(action.activity.display_name))
    if isinstance(action, RemoveActivity):
        return ("remove", action.day_number, action.activity_index)
    return (action.kind, action.model_dump_json())


def dedupe(batch: list[Action], current_plan: Plan) -> list[Action]:
    """Drop duplicate actions from a batch.

    Intra-batch: the first action per key is kept (additions keyed by day and
    normalized name, removals by day and index, everything else by content).
    Plan-existing: additions matching an activity already on the target day are
    dropped. The plan is swept of its own duplicates before that comparison so
    pre-existing noise cannot mask a real match.

    Args:
        batch: Candidate actions in proposal order
        current_plan: Plan the batch will be applied to

    Returns:
        Surviving actions, in input order
    """
    swept_plan, _ = sweep_duplicates(current_plan)

    seen: set[tuple] = set()
    kept: list[Action] = []

    for action in batch:
        key = _batch_key(action)
        if key in seen:
            logger.info(f"Skipping duplicate action in batch: {key[:3]}")
            metrics.inc_dropped("duplicate")
            continue
        seen.add(key)

        if isinstance(action, AddActivity) and matches_existing(action, swept_plan):
            logger.info(
                f"Skipping {action.activity.display_name!r}: already on Day {action.day_number}"
            )
            metrics.inc_dropped("duplicate")
            continue

        kept.append(action)

    return kept
