"""Change lifecycle models - staging, application, history and conversation."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field

from plan_editor.models.actions import Action
from plan_editor.models.common import MessageRole
from plan_editor.models.plan import CostSummary, Day, Plan


class ChangePreview(BaseModel):
    """Human-readable summary of a proposed change batch."""

    description: str
    items: list[str]
    estimated_cost_change: float


class StagedChange(BaseModel):
    """A deduplicated change batch awaiting confirmation."""

    change_id: str
    plan_id: str
    actions: list[Action]
    preview: ChangePreview
    created_at: datetime


class ProposalResult(BaseModel):
    """Outcome of proposing changes from generated text."""

    cleaned_message: str
    change_id: str | None = None
    preview: ChangePreview | None = None


class ChatReply(BaseModel):
    """Assistant reply for one conversation turn."""

    message: str
    change_id: str | None = None
    preview: ChangePreview | None = None


class AppliedResult(BaseModel):
    """Outcome of confirming a staged change."""

    change_id: str
    plan: Plan
    cost_delta: float
    total_cost: float
    applied_count: int
    swept_count: int = 0


class HistoryEntry(BaseModel):
    """Pre-application fragment of the plan used for one level of undo."""

    change_id: str
    applied_at: datetime
    days: list[Day]
    costs: CostSummary | None = None


class Message(BaseModel):
    """One conversation turn."""

    role: MessageRole
    content: str


class Session(BaseModel):
    """Per-plan conversation memory and undo record."""

    plan_id: str
    messages: list[Message] = Field(default_factory=list)
    last_change: HistoryEntry | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ChangeNotFound:
    """Confirm target is unknown, already applied, or discarded."""

    change_id: str


@dataclass(frozen=True)
class UndoUnavailable:
    """No applied change is recorded for the plan."""

    plan_id: str
