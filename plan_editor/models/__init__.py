"""Models package - re-exports for convenience."""

from plan_editor.models.actions import (
    Action,
    ActionKind,
    AddActivity,
    ReorderActivities,
    RemoveActivity,
    UpdateActivity,
    UpdateDayTitle,
    parse_action,
)
from plan_editor.models.changes import (
    AppliedResult,
    ChangeNotFound,
    ChangePreview,
    ChatReply,
    HistoryEntry,
    Message,
    ProposalResult,
    Session,
    StagedChange,
    UndoUnavailable,
)
from plan_editor.models.common import ActivityCategory, Location, MessageRole
from plan_editor.models.plan import Activity, CostSummary, Day, Plan

__all__ = [
    # Common
    "ActivityCategory",
    "Location",
    "MessageRole",
    # Plan
    "Plan",
    "Day",
    "Activity",
    "CostSummary",
    # Actions
    "Action",
    "ActionKind",
    "AddActivity",
    "RemoveActivity",
    "UpdateActivity",
    "ReorderActivities",
    "UpdateDayTitle",
    "parse_action",
    # Changes
    "ChangePreview",
    "StagedChange",
    "ProposalResult",
    "ChatReply",
    "AppliedResult",
    "HistoryEntry",
    "Message",
    "Session",
    "ChangeNotFound",
    "UndoUnavailable",
]
