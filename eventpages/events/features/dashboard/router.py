from dataclasses import asdict

from fastapi import APIRouter, Depends

from eventpages.events.dependencies import get_lifecycle_service, get_notification_sink
from eventpages.events.lifecycle import EventLifecycleService
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.schemas import event_data, result_response
from eventpages.urls import DASHBOARD_URL

router = APIRouter()


@router.get(DASHBOARD_URL)
async def dashboard(
    service: EventLifecycleService = Depends(get_lifecycle_service),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
):
    """
    The signed-in user's events, newest first, with the dashboard counters.
    """
    result = await service.list_my_events()
    data = {
        "events": [event_data(event) for event in result.value or []],
        "stats": asdict(service.stats()),
    }
    return result_response(result, sink, data)
