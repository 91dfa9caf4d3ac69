from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field

from eventpages.events.dependencies import get_public_event_service
from eventpages.events.dtos import EventNotFoundError, GiftUnavailableError
from eventpages.events.notifications import CollectingNotificationSink, NotificationEvent
from eventpages.events.public_page import PublicEventService
from eventpages.events.schemas import (
    GuestResponse,
    envelope,
    event_data,
    gift_data,
)
from eventpages.store.client import StoreError
from eventpages.urls import PUBLIC_EVENT_URL, PUBLIC_RSVP_URL, RESERVE_GIFT_URL

router = APIRouter()


class RSVPSubmit(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    plus_one: bool = False


class GiftReservationSubmit(BaseModel):
    reserved_by: str = Field(min_length=1, max_length=255)


def _not_found(event_id: UUID) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Event {event_id} not found")


@router.get(PUBLIC_EVENT_URL)
async def public_event(
    event_id: UUID,
    service: PublicEventService = Depends(get_public_event_service),
):
    """
    The public page of an event: details, confirmed guests and the gift list.
    Private events are reported as missing.
    """
    try:
        page = await service.load(event_id)
    except EventNotFoundError:
        raise _not_found(event_id)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return envelope(
        {
            "event": event_data(page.event),
            "guests": [GuestResponse.model_validate(guest).model_dump() for guest in page.guests],
            "gifts": [gift_data(gift) for gift in page.gifts],
        }
    )


@router.post(PUBLIC_RSVP_URL)
async def submit_rsvp(
    event_id: UUID,
    rsvp_data: RSVPSubmit,
    service: PublicEventService = Depends(get_public_event_service),
):
    try:
        guest = await service.rsvp(
            event_id,
            name=rsvp_data.name,
            email=rsvp_data.email,
            phone=rsvp_data.phone,
            plus_one=rsvp_data.plus_one,
        )
    except EventNotFoundError:
        raise _not_found(event_id)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    sink = CollectingNotificationSink()
    sink(NotificationEvent.success("Attendance confirmed", f"See you there, {guest.name}!"))
    return envelope(
        GuestResponse.model_validate(guest).model_dump(), sink, status_code=status.HTTP_201_CREATED
    )


@router.post(RESERVE_GIFT_URL)
async def reserve_gift(
    event_id: UUID,
    gift_id: UUID,
    reservation: GiftReservationSubmit,
    service: PublicEventService = Depends(get_public_event_service),
):
    try:
        gift = await service.reserve_gift(event_id, gift_id, reservation.reserved_by)
    except EventNotFoundError:
        raise _not_found(event_id)
    except GiftUnavailableError as e:
        if e.reason == "not found":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    sink = CollectingNotificationSink()
    sink(NotificationEvent.success("Gift reserved", gift.name))
    return envelope(gift_data(gift), sink)
