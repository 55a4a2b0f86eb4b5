"""Per-plan conversation memory and single-level undo."""

import logging
from datetime import datetime

from plan_editor.db.repositories import SessionStore
from plan_editor.models.changes import HistoryEntry, Message, Session, UndoUnavailable
from plan_editor.models.common import MessageRole
from plan_editor.models.plan import Plan

logger = logging.getLogger(__name__)


class SessionManager:
    """Keeps bounded chat history and the last applied change for each plan."""

    def __init__(self, store: SessionStore, max_messages: int = 20) -> None:
        """Initialize session manager.

        Args:
            store: Session store implementation
            max_messages: Messages retained per plan; older ones are dropped
        """
        self._store = store
        self._max_messages = max_messages

    def get_or_create(self, plan_id: str) -> Session:
        """Get the plan's session, creating an empty one if needed."""
        session = self._store.get(plan_id)
        if session is None:
            session = Session(plan_id=plan_id, updated_at=datetime.now())
        return session

    def history(self, plan_id: str) -> list[Message]:
        """Get retained conversation messages, oldest first."""
        session = self._store.get(plan_id)
        return list(session.messages) if session else []

    def record_turn(self, plan_id: str, role: MessageRole, content: str) -> None:
        """Append a message and drop anything beyond the retention bound."""
        session = self.get_or_create(plan_id)
        session.messages.append(Message(role=role, content=content))
        if len(session.messages) > self._max_messages:
            session.messages = session.messages[-self._max_messages :]
        session.updated_at = datetime.now()
        self._store.put(session)

    def clear(self, plan_id: str) -> None:
        """Forget history and undo record for a plan."""
        self._store.delete(plan_id)

    def record_applied(self, plan_id: str, change_id: str, before: Plan, after: Plan) -> None:
        """Snapshot the pre-change fragment, replacing any earlier snapshot.

        The day tree is always captured; the cost summary only when the change
        moved it.
        """
        session = self.get_or_create(plan_id)
        session.last_change = HistoryEntry(
            change_id=change_id,
            applied_at=datetime.now(),
            days=[day.model_copy(deep=True) for day in before.days],
            costs=before.costs.model_copy(deep=True) if before.costs != after.costs else None,
        )
        session.updated_at = datetime.now()
        self._store.put(session)

    def undo(self, plan_id: str, current: Plan) -> Plan | UndoUnavailable:
        """Restore the snapshot onto the current plan and clear it.

        Returns:
            The restored plan, or UndoUnavailable when no snapshot exists
        """
        session = self._store.get(plan_id)
        if session is None or session.last_change is None:
            return UndoUnavailable(plan_id=plan_id)

        entry = session.last_change
        restored = Plan(
            days=entry.days,
            currency=current.currency,
            costs=entry.costs if entry.costs is not None else current.costs,
        )

        session.last_change = None
        session.updated_at = datetime.now()
        self._store.put(session)
        logger.info(f"Reverted change {entry.change_id} on plan {plan_id}")
        return restored
