from uuid import UUID

from fastapi import APIRouter, Depends, Query

from eventpages.events.dependencies import get_lifecycle_service, get_notification_sink
from eventpages.events.lifecycle import EventLifecycleService
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.schemas import result_response
from eventpages.urls import DELETE_EVENT_URL

router = APIRouter()


@router.get(DELETE_EVENT_URL)
async def describe_deletion(
    event_id: UUID,
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    The confirmation to show before deleting: what else goes with the event.
    """
    result = await service.describe_deletion(event_id)
    data = None
    if result.ok:
        confirmation = result.value
        data = {
            "event_id": confirmation.event.id,
            "title": confirmation.event.title,
            "dependents": {table.value: count for table, count in confirmation.dependents.items()},
            "confirmation": confirmation.text,
        }
    return result_response(result, sink, data)


@router.post(DELETE_EVENT_URL)
async def delete_event(
    event_id: UUID,
    confirm: bool = Query(default=False),
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    Delete the event and every record attached to it. Without
    ``confirm=true`` the request counts as a declined confirmation.
    """
    result = await service.delete_event(event_id, confirm=lambda _: confirm)
    data = None
    if result.ok:
        report = result.value
        data = {
            "event_id": report.event_id,
            "steps": [
                {"table": outcome.table.value, "status": outcome.status.value, "deleted": outcome.deleted}
                for outcome in report.outcomes
            ],
        }
    return result_response(result, sink, data)
