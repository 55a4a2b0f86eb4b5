"""Action models - one atomic requested edit to a plan.

Field aliases follow the camelCase keys the text generator emits inside action
blocks (``dayNumber``, ``activityIndex``, ...). Actions are frozen once built and
carry no reference to the plan they target.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from plan_editor.models.plan import Activity


class _ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    day_number: int = Field(..., alias="dayNumber")


class AddActivity(_ActionBase):
    """Append an activity to a day."""

    kind: Literal["add_activity"] = "add_activity"
    activity: Activity

    @field_validator("activity")
    @classmethod
    def require_display_name(cls, v: Activity) -> Activity:
        """An added activity needs a name or description to show."""
        if not v.display_name.strip():
            raise ValueError("activity needs a name or description")
        return v


class RemoveActivity(_ActionBase):
    """Remove the activity at an index of a day."""

    kind: Literal["remove_activity"] = "remove_activity"
    activity_index: int = Field(..., alias="activityIndex")


class UpdateActivity(_ActionBase):
    """Rename a day and/or shallow-merge fields onto one activity."""

    kind: Literal["update_activity"] = "update_activity"
    activity_index: int | None = Field(default=None, alias="activityIndex")
    updates: dict[str, Any] = Field(default_factory=dict)
    title: str | None = None

    @model_validator(mode="after")
    def require_edit(self) -> "UpdateActivity":
        """Carry a title, or an activity index together with updates."""
        if not self.title and (self.activity_index is None or not self.updates):
            raise ValueError("update needs a title or activityIndex with updates")
        return self


class ReorderActivities(_ActionBase):
    """Replace a day's activities with a permutation of them."""

    kind: Literal["reorder_activities"] = "reorder_activities"
    new_order: list[int] = Field(..., alias="newOrder")


class UpdateDayTitle(_ActionBase):
    """Set a day's title."""

    kind: Literal["update_day_title"] = "update_day_title"
    title: str


Action = Annotated[
    AddActivity | RemoveActivity | UpdateActivity | ReorderActivities | UpdateDayTitle,
    Field(discriminator="kind"),
]

ActionKind = Literal[
    "add_activity",
    "remove_activity",
    "update_activity",
    "reorder_activities",
    "update_day_title",
]

action_adapter: TypeAdapter[Action] = TypeAdapter(Action)
action_list_adapter: TypeAdapter[list[Action]] = TypeAdapter(list[Action])


def parse_action(kind: ActionKind, payload: dict[str, Any]) -> Action:
    """Validate a decoded payload as the action variant named by ``kind``.

    Raises:
        pydantic.ValidationError: If the payload lacks the variant's required fields
    """
    return action_adapter.validate_python({**payload, "kind": kind})
