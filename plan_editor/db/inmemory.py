"""In-memory implementations of store interfaces."""

from datetime import datetime

from plan_editor.models.changes import Session, StagedChange
from plan_editor.models.plan import Plan


class InMemoryPlanStore:
    """In-memory implementation of PlanStore."""

    def __init__(self, plans: dict[str, Plan] | None = None) -> None:
        self._plans: dict[str, Plan] = dict(plans or {})

    def get_plan(self, plan_id: str) -> Plan | None:
        """Get plan by ID."""
        plan = self._plans.get(plan_id)
        return plan.model_copy(deep=True) if plan is not None else None

    def put_plan(self, plan_id: str, plan: Plan) -> None:
        """Store a plan."""
        self._plans[plan_id] = plan.model_copy(deep=True)


class InMemoryStagingStore:
    """In-memory implementation of StagingStore."""

    def __init__(self) -> None:
        self._changes: dict[str, StagedChange] = {}

    def put(self, change: StagedChange) -> None:
        """Stage a change."""
        self._changes[change.change_id] = change

    def get(self, change_id: str) -> StagedChange | None:
        """Get staged change by ID."""
        return self._changes.get(change_id)

    def pop(self, change_id: str) -> StagedChange | None:
        """Take a staged change out of the store."""
        return self._changes.pop(change_id, None)

    def delete(self, change_id: str) -> None:
        """Discard a staged change."""
        self._changes.pop(change_id, None)

    def purge_older_than(self, cutoff: datetime) -> int:
        """Discard changes created before cutoff."""
        expired = [cid for cid, change in self._changes.items() if change.created_at < cutoff]
        for change_id in expired:
            del self._changes[change_id]
        return len(expired)


class InMemorySessionStore:
    """In-memory implementation of SessionStore."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def get(self, plan_id: str) -> Session | None:
        """Get session by plan ID."""
        session = self._sessions.get(plan_id)
        return session.model_copy(deep=True) if session is not None else None

    def put(self, session: Session) -> None:
        """Store a session."""
        self._sessions[session.plan_id] = session.model_copy(deep=True)

    def delete(self, plan_id: str) -> None:
        """Forget a session."""
        self._sessions.pop(plan_id, None)
