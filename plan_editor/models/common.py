"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class ActivityCategory(str, Enum):
    """Type of activity in a day."""

    sightseeing = "sightseeing"
    meal = "meal"
    transport = "transport"
    lodging = "lodging"


# Labels the text generator uses for categories, mapped onto the closed set above.
CATEGORY_ALIASES: dict[str, ActivityCategory] = {
    "activity": ActivityCategory.sightseeing,
    "attraction": ActivityCategory.sightseeing,
    "sightseeing": ActivityCategory.sightseeing,
    "tour": ActivityCategory.sightseeing,
    "meal": ActivityCategory.meal,
    "food": ActivityCategory.meal,
    "restaurant": ActivityCategory.meal,
    "dining": ActivityCategory.meal,
    "transport": ActivityCategory.transport,
    "transit": ActivityCategory.transport,
    "travel": ActivityCategory.transport,
    "lodging": ActivityCategory.lodging,
    "hotel": ActivityCategory.lodging,
    "accommodation": ActivityCategory.lodging,
}


def coerce_category(value: object) -> ActivityCategory:
    """Map a free-form category label to ActivityCategory (unknown -> sightseeing)."""
    if isinstance(value, ActivityCategory):
        return value
    if isinstance(value, str):
        return CATEGORY_ALIASES.get(value.strip().lower(), ActivityCategory.sightseeing)
    return ActivityCategory.sightseeing


class Location(BaseModel):
    """Where an activity happens: a street address, coordinates, or both."""

    address: str | None = None
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="before")
    @classmethod
    def accept_plain_address(cls, data: object) -> object:
        """Allow a bare string to stand in for an address."""
        if isinstance(data, str):
            return {"address": data}
        return data

    @model_validator(mode="after")
    def validate_coordinate_pair(self) -> "Location":
        """Latitude and longitude come together or not at all."""
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self


class MessageRole(str, Enum):
    """Conversation message author."""

    user = "user"
    assistant = "assistant"
    system = "system"
