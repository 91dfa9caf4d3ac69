from uuid import UUID

from fastapi import APIRouter, Body, Depends

from eventpages.events.dependencies import get_lifecycle_service, get_notification_sink
from eventpages.events.lifecycle import EventLifecycleService
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.schemas import event_data, result_response
from eventpages.urls import PUBLISH_EVENT_URL

router = APIRouter()


@router.post(PUBLISH_EVENT_URL)
async def toggle_publish(
    event_id: UUID,
    is_public: bool | None = Body(default=None, embed=True),
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    Flip the event's visibility. ``is_public`` is the state the caller last
    saw; when omitted the stored state is used.
    """
    result = await service.toggle_publish(event_id, current_is_public=is_public)
    data = event_data(result.value) if result.ok else None
    return result_response(result, sink, data)
