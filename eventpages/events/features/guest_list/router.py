from uuid import UUID

from fastapi import APIRouter, Depends

from eventpages.events.dependencies import get_lifecycle_service, get_notification_sink
from eventpages.events.guest_list import GuestFilter
from eventpages.events.lifecycle import EventLifecycleService
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.schemas import guest_list_data, result_response
from eventpages.urls import EVENT_GUESTS_URL

router = APIRouter()


@router.get(EVENT_GUESTS_URL)
async def list_guests(
    event_id: UUID,
    status: GuestFilter = GuestFilter.ALL,
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    Everyone who answered the invitation, newest first, with RSVP counts.
    ``status`` narrows the list to confirmed or pending guests; the counts
    always cover the whole list.
    """
    result = await service.list_guests(event_id, status)
    data = guest_list_data(result.value) if result.ok else None
    return result_response(result, sink, data)
