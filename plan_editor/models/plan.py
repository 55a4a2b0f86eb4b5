"""Plan models - the nested travel itinerary being edited."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from plan_editor.models.common import ActivityCategory, Location, coerce_category


class Activity(BaseModel):
    """Single activity in a day."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    time: str = ""
    name: str = ""
    description: str | None = None
    category: ActivityCategory = Field(default=ActivityCategory.sightseeing, alias="type")
    cost: float | None = Field(default=None, ge=0)
    location: Location | None = None
    tip: str | None = None
    duration: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: object) -> ActivityCategory:
        """Accept the generator's loose category labels."""
        return coerce_category(v)

    @field_validator("time", mode="before")
    @classmethod
    def blank_time_for_none(cls, v: object) -> object:
        """Treat a null time as blank."""
        return "" if v is None else v

    @property
    def display_name(self) -> str:
        """Name shown to the user, falling back to the description."""
        return self.name or self.description or ""

    @property
    def cost_or_zero(self) -> float:
        """Cost with an absent value counted as zero."""
        return self.cost or 0


class Day(BaseModel):
    """One calendar day of the plan."""

    model_config = ConfigDict(populate_by_name=True)

    day_number: int = Field(..., ge=1, alias="day")
    date: str | None = None
    title: str = ""
    activities: list[Activity] = Field(default_factory=list)


class CostSummary(BaseModel):
    """Cost totals derived from the plan's activities."""

    total: float = 0
    by_category: dict[str, float] = Field(default_factory=dict)


class Plan(BaseModel):
    """Complete itinerary: ordered days of activities plus cost totals."""

    days: list[Day] = Field(default_factory=list)
    currency: str = "USD"
    costs: CostSummary = Field(default_factory=CostSummary)

    @model_validator(mode="after")
    def validate_contiguous_days(self) -> "Plan":
        """Ensure day numbers run 1..n in list order."""
        for position, day in enumerate(self.days, start=1):
            if day.day_number != position:
                raise ValueError(
                    f"day numbers must be contiguous from 1; found {day.day_number} "
                    f"at position {position}"
                )
        return self

    def get_day(self, day_number: int) -> Day | None:
        """Return the day with this number, or None when out of range."""
        if 1 <= day_number <= len(self.days):
            return self.days[day_number - 1]
        return None

    def total_cost(self) -> float:
        """Sum of every activity cost in the plan."""
        return sum(a.cost_or_zero for day in self.days for a in day.activities)

    def cost_summary(self) -> CostSummary:
        """Compute cost totals from the current activities."""
        by_category: dict[str, float] = {}
        for day in self.days:
            for activity in day.activities:
                key = activity.category.value
                by_category[key] = by_category.get(key, 0) + activity.cost_or_zero
        return CostSummary(total=self.total_cost(), by_category=by_category)

    def with_recomputed_costs(self) -> "Plan":
        """Return a copy whose cost summary matches its activities."""
        return self.model_copy(update={"costs": self.cost_summary()})
