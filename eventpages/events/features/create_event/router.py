from fastapi import APIRouter, Depends, status

from eventpages.events.dependencies import get_lifecycle_service, get_notification_sink
from eventpages.events.dtos import EventFields
from eventpages.events.lifecycle import EventLifecycleService
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.schemas import event_data, result_response
from eventpages.urls import CREATE_EVENT_URL

router = APIRouter()


@router.post(CREATE_EVENT_URL)
async def create_event(
    fields: EventFields,
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    Create an event owned by the caller. New events are always private.
    """
    result = await service.create_event(fields)
    data = event_data(result.value) if result.ok else None
    return result_response(result, sink, data, success_status=status.HTTP_201_CREATED)
