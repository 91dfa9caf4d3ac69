from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from eventpages.models.event import EventType

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"
DEFAULT_PRIMARY_COLOR = "#3B82F6"
DEFAULT_SECONDARY_COLOR = "#1E40AF"


class EventNotFoundError(Exception):
    """Raised when an event is absent, not owned by the caller, or not public."""

    def __init__(self, event_id: UUID) -> None:
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' not found")


class EventForbiddenError(Exception):
    """Raised when the store refuses an event operation for the caller."""

    def __init__(self, event_id: UUID, reason: str = "") -> None:
        self.event_id = event_id
        self.reason = reason
        super().__init__(f"Not allowed to modify event '{event_id}'")


class GiftUnavailableError(Exception):
    """Raised when a gift cannot be reserved."""

    def __init__(self, gift_id: UUID, reason: str) -> None:
        self.gift_id = gift_id
        self.reason = reason
        super().__init__(f"Gift '{gift_id}' is {reason}")


class EventFields(BaseModel):
    """Fields a caller may supply when creating an event.

    Anything else, ``is_public`` included, is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=255)
    type: EventType
    description: str | None = None
    event_date: date
    location: str | None = Field(default=None, max_length=500)
    primary_color: str = Field(default=DEFAULT_PRIMARY_COLOR, pattern=HEX_COLOR)
    secondary_color: str = Field(default=DEFAULT_SECONDARY_COLOR, pattern=HEX_COLOR)


class EventChanges(BaseModel):
    """Partial update of an event. Visibility changes go through publishing."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    type: EventType | None = None
    description: str | None = None
    event_date: date | None = None
    location: str | None = Field(default=None, max_length=500)
    primary_color: str | None = Field(default=None, pattern=HEX_COLOR)
    secondary_color: str | None = Field(default=None, pattern=HEX_COLOR)

    def to_values(self) -> dict[str, Any]:
        values = self.model_dump(exclude_unset=True)
        # explicit nulls only clear the optional columns
        return {
            key: value
            for key, value in values.items()
            if value is not None or key in ("description", "location")
        }


@dataclass(frozen=True)
class Event:
    """DTO for an event row."""

    id: UUID
    owner_id: UUID
    title: str
    type: EventType
    event_date: date
    primary_color: str
    secondary_color: str
    is_public: bool
    created_at: datetime
    description: str | None = None
    location: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Event":
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            type=EventType(row["type"]),
            event_date=row["event_date"],
            primary_color=row["primary_color"],
            secondary_color=row["secondary_color"],
            is_public=bool(row["is_public"]),
            created_at=row["created_at"],
            description=row.get("description"),
            location=row.get("location"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class GuestDTO:
    id: UUID
    event_id: UUID
    name: str
    confirmed: bool
    plus_one: bool = False
    email: str | None = None
    phone: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "GuestDTO":
        return cls(
            id=row["id"],
            event_id=row["event_id"],
            name=row["name"],
            confirmed=bool(row.get("confirmed")),
            plus_one=bool(row.get("plus_one")),
            email=row.get("email"),
            phone=row.get("phone"),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class GiftDTO:
    id: UUID
    event_id: UUID
    name: str
    purchased: bool = False
    description: str | None = None
    price: Decimal | None = None
    image: str | None = None
    reserved_by: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any], reserved_by: str | None = None) -> "GiftDTO":
        return cls(
            id=row["id"],
            event_id=row["event_id"],
            name=row["name"],
            purchased=bool(row.get("purchased")),
            description=row.get("description"),
            price=row.get("price"),
            image=row.get("image"),
            reserved_by=reserved_by,
        )
