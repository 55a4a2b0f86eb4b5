"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Iterator
from itertools import count

import pytest

from plan_editor.config import Settings
from plan_editor.db.inmemory import InMemoryPlanStore
from plan_editor.models.plan import Activity, Day, Plan


def make_activity(name: str, time: str = "", cost: float | None = None, **kwargs) -> Activity:
    """Helper to create test activity."""
    return Activity(name=name, time=time, cost=cost, **kwargs)


def make_plan(*days: list[Activity], titles: list[str] | None = None) -> Plan:
    """Helper to create a plan with one Day per activity list."""
    return Plan(
        days=[
            Day(
                day_number=i,
                date=f"2025-06-{9 + i:02d}",
                title=titles[i - 1] if titles else f"Day {i}",
                activities=list(activities),
            )
            for i, activities in enumerate(days, start=1)
        ]
    )


@pytest.fixture
def sample_plan() -> Plan:
    """Two-day Paris plan used across tests."""
    return make_plan(
        [
            make_activity("Eiffel Tower", "09:00", 30),
            make_activity("Lunch at Le Marais", "12:30", 25, type="meal"),
        ],
        [
            make_activity("Louvre Museum", "10:00", 22),
            make_activity("Seine River Walk", "16:00"),
        ],
        titles=["Arrival", "Museums"],
    )


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic activity id source."""
    counter: Iterator[int] = count(1)
    return lambda: f"act_test_{next(counter)}"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(_env_file=None, openai_api_key=None, redis_url=None)


@pytest.fixture
def plan_store(sample_plan: Plan) -> InMemoryPlanStore:
    """Plan store holding the sample plan as 'trip-1'."""
    return InMemoryPlanStore({"trip-1": sample_plan})
