"""Response models and the ``{data, notifications}`` envelope."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from eventpages.events.lifecycle import ErrorKind, OperationResult
from eventpages.events.notifications import CollectingNotificationSink, NotificationKind
from eventpages.models.event import EventType

STATUS_BY_ERROR = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.BUSY: status.HTTP_409_CONFLICT,
    ErrorKind.STORE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.CANCELLED: status.HTTP_200_OK,
}


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: NotificationKind
    title: str
    detail: str | None = None


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    type: EventType
    description: str | None = None
    event_date: date
    location: str | None = None
    primary_color: str
    secondary_color: str
    is_public: bool
    created_at: datetime
    updated_at: datetime | None = None


class GuestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    plus_one: bool


class OwnerGuestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str | None = None
    phone: str | None = None
    confirmed: bool
    plus_one: bool
    created_at: datetime | None = None


class GuestListStatsResponse(BaseModel):
    total: int
    confirmed: int
    pending: int
    plus_ones: int
    expected_attendees: int


class GiftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    price: Decimal | None = None
    image: str | None = None
    purchased: bool
    reserved: bool


def envelope(
    data: Any,
    sink: CollectingNotificationSink | None = None,
    status_code: int = status.HTTP_200_OK,
    location: str | None = None,
) -> JSONResponse:
    notifications = sink.drain() if sink is not None else []
    body = {
        "data": data,
        "notifications": [NotificationResponse.model_validate(n).model_dump() for n in notifications],
    }
    headers = {"Location": location} if location else None
    return JSONResponse(content=jsonable_encoder(body), status_code=status_code, headers=headers)


def result_response(
    result: OperationResult,
    sink: CollectingNotificationSink,
    data: Any = None,
    success_status: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Envelope for a lifecycle result, with the status its outcome maps to."""
    if result.redirect_to:
        return envelope(None, sink, status.HTTP_303_SEE_OTHER, location=result.redirect_to)
    if not result.ok:
        return envelope(None, sink, STATUS_BY_ERROR[result.error])
    return envelope(data, sink, success_status)


def event_data(event) -> dict:
    return EventResponse.model_validate(event).model_dump()


def guest_list_data(guest_list) -> dict:
    stats = guest_list.stats
    return {
        "event": event_data(guest_list.event),
        "guests": [OwnerGuestResponse.model_validate(guest).model_dump() for guest in guest_list.guests],
        "stats": GuestListStatsResponse(
            total=stats.total,
            confirmed=stats.confirmed,
            pending=stats.pending,
            plus_ones=stats.plus_ones,
            expected_attendees=stats.expected_attendees,
        ).model_dump(),
    }


def gift_data(gift) -> dict:
    return GiftResponse.model_validate(
        {
            "id": gift.id,
            "name": gift.name,
            "description": gift.description,
            "price": gift.price,
            "image": gift.image,
            "purchased": gift.purchased,
            "reserved": gift.reserved_by is not None,
        }
    ).model_dump()
