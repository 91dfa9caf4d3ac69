"""Create, list, edit, publish and delete events for the signed-in user, and read their guest lists.

Components below this layer raise; this is the one place where a failure is
classified and turned into a notification. Every operation ends with exactly
one notification handed to the sink and returns an ``OperationResult``
describing what happened.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

from eventpages.auth.dtos import NotAuthenticatedError
from eventpages.auth.session import SessionStore
from eventpages.config.settings import settings
from eventpages.config.table_names import TableNames
from eventpages.events.cascade import (
    CascadeAbortedError,
    CascadeDeletionCoordinator,
    CascadeReport,
)
from eventpages.events.dtos import (
    Event,
    EventChanges,
    EventFields,
    EventForbiddenError,
    EventNotFoundError,
)
from eventpages.events.guest_list import GuestFilter, GuestList, GuestListStats
from eventpages.events.notifications import NotificationEvent, NotificationSink
from eventpages.events.repository import DEPENDENT_TABLES, EventRepository
from eventpages.events.visibility import VisibilityController
from eventpages.store.client import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EDIT_LOAD_FAILED_MESSAGE = "Event not found or you do not have permission to edit it"

DEPENDENT_LABELS = {
    TableNames.GUEST_MESSAGES: ("guest message", "guest messages"),
    TableNames.GIFT_RESERVATIONS: ("gift reservation", "gift reservations"),
    TableNames.GIFTS: ("gift", "gifts"),
    TableNames.GUESTS: ("guest", "guests"),
}


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    AUTH = "auth"
    STORE = "store"
    BUSY = "busy"
    CANCELLED = "cancelled"


class OperationInFlightError(Exception):
    def __init__(self, action: Action, key: UUID | None) -> None:
        self.action = action
        self.key = key
        super().__init__(f"'{action.value}' is already running for {key}")


class InFlightGuard:
    """Tracks running operations per (action, event) so a control can be disabled.

    Not a lock: a second submission with the same key is rejected outright.
    """

    def __init__(self) -> None:
        self._running: set[tuple[Action, UUID | None]] = set()

    def is_busy(self, action: Action, key: UUID | None = None) -> bool:
        return (action, key) in self._running

    @contextmanager
    def hold(self, action: Action, key: UUID | None = None) -> Iterator[None]:
        if (action, key) in self._running:
            raise OperationInFlightError(action, key)
        self._running.add((action, key))
        try:
            yield
        finally:
            self._running.discard((action, key))


class EventCollection:
    """The client's view of the owner's events.

    Deletions confirmed by the coordinator are remembered, so a list response
    that was already in flight cannot bring a deleted event back.
    """

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events: list[Event] = list(events)
        self._deleted: set[UUID] = set()

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return any(event.id == event_id for event in self._events)

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def get(self, event_id: UUID) -> Event | None:
        return next((event for event in self._events if event.id == event_id), None)

    def replace(self, events: Iterable[Event]) -> None:
        self._events = [event for event in events if event.id not in self._deleted]

    def add(self, event: Event) -> None:
        self._events.insert(0, event)

    def upsert(self, event: Event) -> None:
        if event.id in self._deleted:
            return
        for index, current in enumerate(self._events):
            if current.id == event.id:
                self._events[index] = event
                return
        self.add(event)

    def remove(self, event_id: UUID) -> None:
        self._deleted.add(event_id)
        self._events = [event for event in self._events if event.id != event_id]


@dataclass(frozen=True)
class DeletionConfirmation:
    """What a deletion will destroy. ``None`` marks a count that could not be read."""

    event: Event
    dependents: dict[TableNames, int | None] = field(default_factory=dict)

    @property
    def text(self) -> str:
        lost = []
        for table, count in self.dependents.items():
            singular, plural = DEPENDENT_LABELS[table]
            if count is None:
                lost.append(f"all {plural}")
            elif count:
                lost.append(f"{count} {singular if count == 1 else plural}")

        text = f'Delete "{self.event.title}"?'
        if lost:
            text += " This also permanently removes " + ", ".join(lost) + "."
        return text + " This cannot be undone."


@dataclass(frozen=True)
class DashboardStats:
    total: int
    public: int
    upcoming: int


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    notification: NotificationEvent | None = None
    value: T | None = None
    error: ErrorKind | None = None
    redirect_to: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


ConfirmCallback = Callable[[DeletionConfirmation], bool | Awaitable[bool]]

LIFECYCLE_ERRORS = (
    NotAuthenticatedError,
    OperationInFlightError,
    EventNotFoundError,
    EventForbiddenError,
    CascadeAbortedError,
    StoreError,
)


def classify(error: Exception) -> tuple[ErrorKind, str]:
    """Map a failure to its kind and the best message available for a person."""
    if isinstance(error, CascadeAbortedError):
        return classify(error.cause)
    if isinstance(error, EventNotFoundError):
        return ErrorKind.NOT_FOUND, "Event not found."
    if isinstance(error, EventForbiddenError):
        return ErrorKind.FORBIDDEN, "You do not have permission to change this event."
    if isinstance(error, NotAuthenticatedError):
        return ErrorKind.AUTH, "Sign in to continue."
    if isinstance(error, OperationInFlightError):
        return ErrorKind.BUSY, "This action is already in progress."
    if isinstance(error, StoreError):
        return ErrorKind.STORE, error.message or "Unexpected error talking to the server."
    return ErrorKind.STORE, str(error) or "Unexpected error."


class EventLifecycleService:
    def __init__(
        self,
        session: SessionStore,
        repository: EventRepository,
        notify: NotificationSink,
        coordinator: CascadeDeletionCoordinator | None = None,
        visibility: VisibilityController | None = None,
        guard: InFlightGuard | None = None,
        collection: EventCollection | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.session = session
        self.repository = repository
        self.notify = notify
        self.coordinator = coordinator or CascadeDeletionCoordinator(repository)
        self.visibility = visibility or VisibilityController(repository)
        self.guard = guard or InFlightGuard()
        self.collection = collection if collection is not None else EventCollection()
        self.today = today

    def is_busy(self, action: Action, event_id: UUID | None = None) -> bool:
        return self.guard.is_busy(action, event_id)

    def _emit(self, result: OperationResult[T]) -> OperationResult[T]:
        if result.notification is not None:
            self.notify(result.notification)
        return result

    def _succeed(self, value: T, title: str, detail: str | None = None) -> OperationResult[T]:
        return self._emit(OperationResult(NotificationEvent.success(title, detail), value))

    def _fail(self, title: str, error: Exception, redirect_to: str | None = None) -> OperationResult:
        kind, message = classify(error)
        if kind is ErrorKind.BUSY:
            logger.info(f"{title}: {error}")
            notification = NotificationEvent.warning(title, message)
        else:
            logger.warning(f"{title}: {error}")
            notification = NotificationEvent.error(title, message)
        return self._emit(OperationResult(notification, error=kind, redirect_to=redirect_to))

    async def create_event(self, fields: EventFields) -> OperationResult[Event]:
        try:
            identity = self.session.require_identity()
            # creates have no event id yet, so they are keyed by owner
            with self.guard.hold(Action.CREATE, identity.id):
                event = await self.repository.create(identity.id, fields)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not create event", e)

        self.collection.add(event)
        return self._succeed(event, "Event created", f'"{event.title}" is saved as a private draft.')

    async def list_my_events(self) -> OperationResult[list[Event]]:
        try:
            identity = self.session.require_identity()
            events = await self.repository.list_owned(identity.id)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not load events", e)

        self.collection.replace(events)
        count = len(self.collection)
        return self._succeed(self.collection.events, "Events loaded", f"{count} event{'s' if count != 1 else ''}")

    async def load_event_for_edit(self, event_id: UUID) -> OperationResult[Event]:
        """Read an owned event for the edit form. Only failures are notified."""
        try:
            identity = self.session.require_identity()
            event = await self.repository.get_owned(identity.id, event_id)
        except LIFECYCLE_ERRORS as e:
            kind, _ = classify(e)
            if kind in (ErrorKind.NOT_FOUND, ErrorKind.FORBIDDEN):
                logger.warning(f"Edit load of event {event_id} failed: {e}")
                return self._emit(
                    OperationResult(
                        NotificationEvent.error("Could not open event", EDIT_LOAD_FAILED_MESSAGE),
                        error=kind,
                        redirect_to=settings.default_route,
                    )
                )
            return self._fail("Could not open event", e, redirect_to=settings.default_route)
        return OperationResult(value=event)

    async def update_event(self, event_id: UUID, changes: EventChanges) -> OperationResult[Event]:
        try:
            identity = self.session.require_identity()
            with self.guard.hold(Action.UPDATE, event_id):
                event = await self.repository.update(identity.id, event_id, changes)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not save event", e)

        self.collection.upsert(event)
        return self._succeed(event, "Event updated", f'"{event.title}" was saved.')

    async def describe_deletion(self, event_id: UUID) -> OperationResult[DeletionConfirmation]:
        """Build the confirmation text for a deletion. Only failures are notified."""
        try:
            identity = self.session.require_identity()
            confirmation = await self._describe(identity.id, event_id)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not prepare deletion", e)
        return OperationResult(value=confirmation)

    async def _describe(self, owner_id: UUID, event_id: UUID) -> DeletionConfirmation:
        event = await self.repository.get_owned(owner_id, event_id)
        dependents: dict[TableNames, int | None] = {}
        for table in DEPENDENT_TABLES:
            try:
                dependents[table] = await self.repository.count_dependents(table, event_id)
            except StoreError as e:
                if e.is_missing_relation:
                    continue
                logger.warning(f"Could not count {table.value} of event {event_id}: {e}")
                dependents[table] = None
        return DeletionConfirmation(event=event, dependents=dependents)

    async def delete_event(self, event_id: UUID, confirm: ConfirmCallback) -> OperationResult[CascadeReport]:
        """Delete an event and its dependents once ``confirm`` accepts the confirmation.

        The event leaves the collection only after the cascade returned.
        """
        try:
            identity = self.session.require_identity()
            with self.guard.hold(Action.DELETE, event_id):
                confirmation = await self._describe(identity.id, event_id)
                accepted = confirm(confirmation)
                if inspect.isawaitable(accepted):
                    accepted = await accepted
                if not accepted:
                    logger.info(f"Deletion of event {event_id} declined")
                    return self._emit(
                        OperationResult(
                            NotificationEvent.info("Deletion cancelled", f'"{confirmation.event.title}" was kept.'),
                            error=ErrorKind.CANCELLED,
                        )
                    )
                report = await self.coordinator.delete(identity.id, event_id)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not delete event", e)

        self.collection.remove(event_id)
        detail = f'"{confirmation.event.title}" was deleted.'
        if report.failed_steps:
            tables = ", ".join(outcome.table.value for outcome in report.failed_steps)
            detail += f" Some related records could not be removed ({tables})."
        return self._succeed(report, "Event deleted", detail)

    async def toggle_publish(
        self, event_id: UUID, current_is_public: bool | None = None
    ) -> OperationResult[Event]:
        """Flip visibility relative to ``current_is_public``.

        When the caller does not say what it last saw, the collection is asked
        first and the store second.
        """
        try:
            identity = self.session.require_identity()
            with self.guard.hold(Action.PUBLISH, event_id):
                if current_is_public is None:
                    known = self.collection.get(event_id)
                    if known is None:
                        known = await self.repository.get_owned(identity.id, event_id)
                    current_is_public = known.is_public
                event = await self.visibility.toggle(identity.id, event_id, current_is_public)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not change visibility", e)

        self.collection.upsert(event)
        if event.is_public:
            return self._succeed(event, "Event published", f'"{event.title}" is now public.')
        return self._succeed(event, "Event unpublished", f'"{event.title}" is now private.')

    async def list_guests(
        self, event_id: UUID, status: GuestFilter = GuestFilter.ALL
    ) -> OperationResult[GuestList]:
        """The owner's guest list. Stats always count every guest, ``status`` only
        narrows the rows returned. Only failures are notified.
        """
        try:
            identity = self.session.require_identity()
            event = await self.repository.get_owned(identity.id, event_id)
            guests = await self.repository.list_guests(identity.id, event_id)
        except LIFECYCLE_ERRORS as e:
            return self._fail("Could not load guests", e)

        return OperationResult(
            value=GuestList(
                event=event,
                guests=[guest for guest in guests if status.matches(guest)],
                stats=GuestListStats.from_guests(guests),
            )
        )

    def stats(self) -> DashboardStats:
        """Counts for the dashboard, taken from the collection."""
        today = self.today()
        events = self.collection.events
        return DashboardStats(
            total=len(events),
            public=sum(1 for event in events if event.is_public),
            upcoming=sum(1 for event in events if event.event_date > today),
        )
