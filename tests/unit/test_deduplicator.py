"""Tests for activity and action deduplication."""

from plan_editor.dedupe.deduplicator import (
    dedupe,
    is_duplicate_activity,
    normalize_name,
    sweep_duplicates,
)
from plan_editor.models.actions import (
    AddActivity,
    RemoveActivity,
    UpdateDayTitle,
)
from plan_editor.models.plan import Activity, Day, Plan


def make_add(day: int, name: str, time: str = "", cost: float | None = None) -> AddActivity:
    """Helper to create an add-activity action."""
    return AddActivity(day_number=day, activity=Activity(name=name, time=time, cost=cost))


def single_day_plan(*activities: Activity) -> Plan:
    """Helper to create a one-day plan."""
    return Plan(days=[Day(day_number=1, title="Day 1", activities=list(activities))])


def test_normalize_name() -> None:
    """Test lowercasing and trimming."""
    assert normalize_name("  City Tour ") == "city tour"
    assert normalize_name(None) == ""


def test_duplicate_predicate() -> None:
    """Test exact, substring and time rules."""
    tour = Activity(name="City Tour", time="09:00")

    assert is_duplicate_activity(tour, Activity(name="city tour ", time="14:00"))
    assert is_duplicate_activity(tour, Activity(name="Tour", time="09:00"))
    assert is_duplicate_activity(tour, Activity(name="Guided City Tour", time=""))
    assert not is_duplicate_activity(tour, Activity(name="Guided City Tour", time="15:00"))
    assert not is_duplicate_activity(tour, Activity(name="Boat Ride", time="09:00"))


def test_unnamed_activities_never_duplicates() -> None:
    """Test that blank names are not matched (empty is a substring of everything)."""
    assert not is_duplicate_activity(Activity(name=""), Activity(name="Louvre"))
    assert not is_duplicate_activity(Activity(name=""), Activity(name=""))


def test_sweep_removes_later_case_variant() -> None:
    """Test that the second of two same-named activities is swept."""
    plan = single_day_plan(
        Activity(name="City Tour", time="09:00"),
        Activity(name="city tour", time="09:00"),
    )

    swept, removed = sweep_duplicates(plan)

    assert removed == 1
    assert [a.name for a in swept.days[0].activities] == ["City Tour"]
    # Input untouched
    assert len(plan.days[0].activities) == 2


def test_sweep_without_duplicates_returns_plan() -> None:
    """Test that a clean plan comes back as-is."""
    plan = single_day_plan(Activity(name="Louvre"), Activity(name="Orsay"))

    swept, removed = sweep_duplicates(plan)

    assert removed == 0
    assert swept == plan


def test_intra_batch_duplicate_additions_dropped() -> None:
    """Test that only the first of two same-named additions survives."""
    plan = Plan(days=[Day(day_number=1), Day(day_number=2)])
    first = make_add(2, "Sunset Cruise", "18:00", 60)
    second = make_add(2, "sunset cruise", "19:00", 80)

    assert dedupe([first, second], plan) == [first]


def test_same_name_on_different_days_kept() -> None:
    """Test that additions on different days are independent."""
    plan = Plan(days=[Day(day_number=1), Day(day_number=2)])
    batch = [make_add(1, "Picnic"), make_add(2, "Picnic")]

    assert dedupe(batch, plan) == batch


def test_intra_batch_duplicate_removals_dropped() -> None:
    """Test that removals are keyed by day and index."""
    plan = single_day_plan(Activity(name="A"), Activity(name="B"))
    batch = [
        RemoveActivity(day_number=1, activity_index=0),
        RemoveActivity(day_number=1, activity_index=0),
        RemoveActivity(day_number=1, activity_index=1),
    ]

    assert dedupe(batch, plan) == [batch[0], batch[2]]


def test_identical_other_actions_dropped() -> None:
    """Test that exact repeats of other variants collapse."""
    plan = single_day_plan()
    title = UpdateDayTitle(day_number=1, title="Arrival")

    assert dedupe([title, title], plan) == [title]


def test_addition_matching_existing_activity_dropped() -> None:
    """Test that an addition already present on the day is dropped."""
    plan = single_day_plan(Activity(name="Louvre Museum", time="10:00"))
    batch = [make_add(1, "louvre museum", "15:00"), make_add(1, "Louvre", "10:00"), make_add(1, "Orsay")]

    result = dedupe(batch, plan)

    assert [a.activity.name for a in result] == ["Orsay"]


def test_addition_similar_but_different_time_kept() -> None:
    """Test that a substring match at a different time is not a duplicate."""
    plan = single_day_plan(Activity(name="Dinner", time="19:00"))
    batch = [make_add(1, "Dinner Cruise", "21:00")]

    assert dedupe(batch, plan) == batch


def test_addition_to_missing_day_not_dropped_here() -> None:
    """Test that out-of-range days are left for the engine to ignore."""
    plan = single_day_plan()
    batch = [make_add(5, "Day Trip")]

    assert dedupe(batch, plan) == batch


def test_dedupe_is_idempotent() -> None:
    """Test that deduplicating a deduplicated batch changes nothing."""
    plan = single_day_plan(
        Activity(name="City Tour", time="09:00"),
        Activity(name="city tour", time="09:00"),
    )
    batch = [
        make_add(1, "Wine Tasting", "17:00"),
        make_add(1, "City Tour", "09:00"),
        make_add(1, "wine tasting"),
        RemoveActivity(day_number=1, activity_index=0),
    ]

    once = dedupe(batch, plan)

    assert dedupe(once, plan) == once
    assert [type(a) for a in once] == [AddActivity, RemoveActivity]


def test_dedupe_does_not_mutate_plan() -> None:
    """Test that the sweep inside dedupe leaves the caller's plan alone."""
    plan = single_day_plan(Activity(name="Spa"), Activity(name="spa"))
    snapshot = plan.model_copy(deep=True)

    dedupe([make_add(1, "Gym")], plan)

    assert plan == snapshot
