"""Store protocol interfaces for plans, staged changes and sessions."""

from datetime import datetime
from typing import Protocol

from plan_editor.models.changes import Session, StagedChange
from plan_editor.models.plan import Plan


class PlanStore(Protocol):
    """Persistent plan storage owned by the host."""

    def get_plan(self, plan_id: str) -> Plan | None:
        """Get plan by ID.

        Args:
            plan_id: Plan ID

        Returns:
            Plan or None if not found
        """
        ...

    def put_plan(self, plan_id: str, plan: Plan) -> None:
        """Store a plan, replacing any previous value.

        Args:
            plan_id: Plan ID
            plan: Plan to store
        """
        ...


class StagingStore(Protocol):
    """Keyed store of change batches awaiting confirmation."""

    def put(self, change: StagedChange) -> None:
        """Stage a change under its change_id."""
        ...

    def get(self, change_id: str) -> StagedChange | None:
        """Look at a staged change without consuming it."""
        ...

    def pop(self, change_id: str) -> StagedChange | None:
        """Atomically take a staged change out of the store.

        Returns:
            The staged change, or None if unknown or already taken
        """
        ...

    def delete(self, change_id: str) -> None:
        """Discard a staged change; unknown IDs are ignored."""
        ...

    def purge_older_than(self, cutoff: datetime) -> int:
        """Discard staged changes created before ``cutoff``.

        Returns:
            Number of changes discarded
        """
        ...


class SessionStore(Protocol):
    """Per-plan conversation memory and undo record."""

    def get(self, plan_id: str) -> Session | None:
        """Get session by plan ID."""
        ...

    def put(self, session: Session) -> None:
        """Store a session under its plan_id."""
        ...

    def delete(self, plan_id: str) -> None:
        """Forget a plan's session; unknown IDs are ignored."""
        ...
