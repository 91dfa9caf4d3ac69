from uuid import UUID

from fastapi import APIRouter, Depends

from eventpages.events.dependencies import get_lifecycle_service, get_notification_sink
from eventpages.events.dtos import EventChanges
from eventpages.events.lifecycle import EventLifecycleService
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.schemas import event_data, result_response
from eventpages.urls import EDIT_EVENT_URL

router = APIRouter()


@router.get(EDIT_EVENT_URL)
async def load_event_for_edit(
    event_id: UUID,
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    Current values for the edit form. A missing or foreign event sends the
    user back to the dashboard.
    """
    result = await service.load_event_for_edit(event_id)
    data = event_data(result.value) if result.ok else None
    return result_response(result, sink, data)


@router.post(EDIT_EVENT_URL)
async def update_event(
    event_id: UUID,
    changes: EventChanges,
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    result = await service.update_event(event_id, changes)
    data = event_data(result.value) if result.ok else None
    return result_response(result, sink, data)
