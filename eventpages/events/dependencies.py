from fastapi import Depends

from eventpages.auth.dependencies import protected_session
from eventpages.auth.session import SessionStore
from eventpages.events.lifecycle import EventLifecycleService, InFlightGuard
from eventpages.events.notifications import CollectingNotificationSink
from eventpages.events.public_page import PublicEventService
from eventpages.events.repository import EventRepository
from eventpages.store.client import StoreClient
from eventpages.store.sql_client import SqlStoreClient

# shared by every request so a second submission of a running action is refused
in_flight_guard = InFlightGuard()


def get_store_client() -> StoreClient:
    """Dependency to get the store client instance."""
    return SqlStoreClient()


def get_event_repository(store: StoreClient = Depends(get_store_client)) -> EventRepository:
    return EventRepository(store)


def get_in_flight_guard() -> InFlightGuard:
    return in_flight_guard


def get_notification_sink() -> CollectingNotificationSink:
    """A fresh sink per request; its contents go out with the response."""
    return CollectingNotificationSink()


def get_lifecycle_service(
    session: SessionStore = Depends(protected_session),
    repository: EventRepository = Depends(get_event_repository),
    sink: CollectingNotificationSink = Depends(get_notification_sink),
    guard: InFlightGuard = Depends(get_in_flight_guard),
) -> EventLifecycleService:
    return EventLifecycleService(session=session, repository=repository, notify=sink, guard=guard)


def get_public_event_service(
    repository: EventRepository = Depends(get_event_repository),
) -> PublicEventService:
    return PublicEventService(repository)
