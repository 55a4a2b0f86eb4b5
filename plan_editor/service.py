"""Plan editing service - propose, confirm, reject and undo changes.

Flow for one turn:
    generated text -> extract -> dedupe against the plan -> preview -> staged
    confirm -> apply batch in order -> plan stored -> undo snapshot recorded

Nothing is applied until a staged change is confirmed, so rejecting or simply
abandoning a proposal needs no rollback. Operations on one plan must be
serialized by the host; different plans share no mutable state here.
"""

import logging
import uuid
from datetime import datetime, timedelta

from plan_editor.actions.extractor import extract
from plan_editor.changes.preview import build_preview
from plan_editor.config import Settings, get_settings
from plan_editor.db.inmemory import InMemorySessionStore, InMemoryStagingStore
from plan_editor.db.redis_store import RedisSessionStore, RedisStagingStore, create_redis_client
from plan_editor.db.repositories import PlanStore, SessionStore, StagingStore
from plan_editor.dedupe.deduplicator import dedupe, sweep_duplicates
from plan_editor.llm.client import TextGenerator, get_text_generator
from plan_editor.models.changes import (
    AppliedResult,
    ChangeNotFound,
    ChatReply,
    Message,
    ProposalResult,
    StagedChange,
    UndoUnavailable,
)
from plan_editor.models.common import MessageRole
from plan_editor.models.plan import Plan
from plan_editor.mutation.engine import IdFactory, apply_batch, new_activity_id
from plan_editor.session.manager import SessionManager
from plan_editor.utils.logging import StructuredChangeLogger
from plan_editor.utils.metrics import metrics

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "Sorry, I couldn't reach the planning assistant just now. "
    "Your plan hasn't changed - please try again in a moment."
)


def new_change_id() -> str:
    """Generate an opaque, globally unique change ID."""
    return f"change_{uuid.uuid4().hex}"


class PlanEditorService:
    """Confirmation API surface over the extraction and mutation core."""

    def __init__(
        self,
        plan_store: PlanStore,
        *,
        staging_store: StagingStore | None = None,
        session_store: SessionStore | None = None,
        generator: TextGenerator | None = None,
        settings: Settings | None = None,
        id_factory: IdFactory = new_activity_id,
    ) -> None:
        """Initialize service.

        Args:
            plan_store: Host-owned plan storage
            staging_store: Staged change store (in-memory if omitted)
            session_store: Session store (in-memory if omitted)
            generator: Text generator used by chat (from settings if omitted)
            settings: Settings (cached settings if omitted)
            id_factory: Source of synthetic activity ids
        """
        self._settings = settings or get_settings()
        self._plans = plan_store
        self._staging = staging_store if staging_store is not None else InMemoryStagingStore()
        self._sessions = SessionManager(
            session_store if session_store is not None else InMemorySessionStore(),
            max_messages=self._settings.history_max_messages,
        )
        self._generator = generator
        self._id_factory = id_factory
        self._events = StructuredChangeLogger()

    @classmethod
    def from_settings(
        cls,
        plan_store: PlanStore,
        settings: Settings | None = None,
        generator: TextGenerator | None = None,
    ) -> "PlanEditorService":
        """Build a service whose staging and session stores follow settings.

        Redis-backed stores are used when ``redis_url`` is configured; staged
        changes then also expire through the key TTL.
        """
        settings = settings or get_settings()
        if not settings.redis_url:
            return cls(plan_store, generator=generator, settings=settings)

        client = create_redis_client(settings.redis_url)
        logger.info("Using Redis staging and session stores")
        return cls(
            plan_store,
            staging_store=RedisStagingStore(client, ttl_seconds=settings.staging_retention_seconds),
            session_store=RedisSessionStore(client),
            generator=generator,
            settings=settings,
        )

    @property
    def generator(self) -> TextGenerator:
        """Text generator, created from settings on first use."""
        if self._generator is None:
            self._generator = get_text_generator(self._settings)
        return self._generator

    def propose_change(self, plan_id: str, raw_text: str) -> ProposalResult:
        """Extract, deduplicate and stage the changes in generated text.

        Returns:
            ProposalResult with the prose for display; change_id and preview
            are set only when at least one action survived
        """
        extraction = extract(raw_text, default_time=self._settings.default_activity_time)
        cleaned = extraction.cleaned_text

        if not extraction.actions:
            return ProposalResult(cleaned_message=cleaned)

        plan = self._plans.get_plan(plan_id)
        if plan is None:
            logger.warning(f"Plan {plan_id} not found, dropping {len(extraction.actions)} action(s)")
            return ProposalResult(cleaned_message=cleaned)

        actions = dedupe(extraction.actions, plan)
        if not actions:
            logger.info(f"No changes left to propose for plan {plan_id} after deduplication")
            return ProposalResult(cleaned_message=cleaned)

        preview = build_preview(actions, plan, self._settings.preview_time_placeholder)
        change = StagedChange(
            change_id=new_change_id(),
            plan_id=plan_id,
            actions=actions,
            preview=preview,
            created_at=datetime.now(),
        )
        self._staging.put(change)

        self._events.log_event(
            "proposed", plan_id=plan_id, change_id=change.change_id, action_count=len(actions)
        )
        metrics.inc_change("proposed")
        return ProposalResult(cleaned_message=cleaned, change_id=change.change_id, preview=preview)

    def confirm_change(self, change_id: str) -> AppliedResult | ChangeNotFound:
        """Apply a staged change; a second confirm of the same ID finds nothing."""
        staged = self._staging.pop(change_id)
        if staged is None:
            self._events.log_event("not_found", plan_id=None, change_id=change_id)
            metrics.inc_change("not_found")
            return ChangeNotFound(change_id=change_id)

        plan = self._plans.get_plan(staged.plan_id)
        if plan is None:
            self._events.log_event(
                "not_found", plan_id=staged.plan_id, change_id=change_id, reason="plan missing"
            )
            metrics.inc_change("not_found")
            return ChangeNotFound(change_id=change_id)

        result = apply_batch(plan, staged.actions, id_factory=self._id_factory)
        self._plans.put_plan(staged.plan_id, result.plan)
        self._sessions.record_applied(staged.plan_id, change_id, before=plan, after=result.plan)

        self._events.log_event(
            "confirmed",
            plan_id=staged.plan_id,
            change_id=change_id,
            action_count=result.applied_count,
            cost_delta=result.cost_delta,
        )
        metrics.inc_change("confirmed")
        metrics.inc_dropped("duplicate", result.skipped_duplicates)

        return AppliedResult(
            change_id=change_id,
            plan=result.plan,
            cost_delta=result.cost_delta,
            total_cost=result.plan.costs.total,
            applied_count=result.applied_count,
            swept_count=result.swept_count,
        )

    def reject_change(self, change_id: str) -> None:
        """Discard a staged change; unknown IDs are ignored."""
        self._staging.delete(change_id)
        self._events.log_event("rejected", plan_id=None, change_id=change_id)
        metrics.inc_change("rejected")

    def undo(self, plan_id: str) -> Plan | UndoUnavailable:
        """Revert the last applied change of a plan (one level only)."""
        plan = self._plans.get_plan(plan_id)
        if plan is None:
            return UndoUnavailable(plan_id=plan_id)

        restored = self._sessions.undo(plan_id, plan)
        if isinstance(restored, UndoUnavailable):
            return restored

        self._plans.put_plan(plan_id, restored)
        self._events.log_event("undone", plan_id=plan_id, change_id=None)
        metrics.inc_change("undone")
        return restored

    async def chat(self, plan_id: str, user_message: str) -> ChatReply:
        """Run one conversation turn and stage any changes the reply asks for."""
        history = self._sessions.history(plan_id)
        history.append(Message(role=MessageRole.user, content=user_message))

        try:
            raw_reply = await self.generator.generate(history)
        except Exception as e:
            logger.error(f"Text generator failed for plan {plan_id}: {e}")
            return ChatReply(message=FALLBACK_REPLY)

        proposal = self.propose_change(plan_id, raw_reply)

        self._sessions.record_turn(plan_id, MessageRole.user, user_message)
        self._sessions.record_turn(plan_id, MessageRole.assistant, proposal.cleaned_message)

        return ChatReply(
            message=proposal.cleaned_message,
            change_id=proposal.change_id,
            preview=proposal.preview,
        )

    def get_pending_change(self, change_id: str) -> StagedChange | None:
        """Look at a staged change without consuming it."""
        return self._staging.get(change_id)

    def get_chat_history(self, plan_id: str) -> list[Message]:
        """Get retained conversation messages for a plan."""
        return self._sessions.history(plan_id)

    def clear_chat_history(self, plan_id: str) -> None:
        """Forget a plan's conversation and undo record."""
        self._sessions.clear(plan_id)

    def cleanup_plan(self, plan_id: str) -> int:
        """Remove duplicate activities from a stored plan.

        Returns:
            Number of activities removed (0 when the plan is unknown)
        """
        plan = self._plans.get_plan(plan_id)
        if plan is None:
            return 0

        cleaned, removed = sweep_duplicates(plan)
        if removed:
            self._plans.put_plan(plan_id, cleaned.with_recomputed_costs())
            logger.info(f"Removed {removed} duplicate activit(ies) from plan {plan_id}")
        return removed

    def expire_staged_changes(self, now: datetime | None = None) -> int:
        """Discard staged changes older than the retention window.

        Intended to be called periodically by the host; nothing here calls it.
        """
        cutoff = (now or datetime.now()) - timedelta(
            seconds=self._settings.staging_retention_seconds
        )
        removed = self._staging.purge_older_than(cutoff)
        if removed:
            logger.info(f"Expired {removed} staged change(s)")
            metrics.inc_change("expired")
        return removed
