"""Tests for EventLifecycleService: one notification per operation, guards and races."""

import asyncio
from datetime import date
from uuid import uuid4

import pytest

from eventpages.auth.session import SessionStore
from eventpages.auth.tests.inmemory_backend import InMemoryAuthBackend
from eventpages.config.table_names import TableNames
from eventpages.events.dtos import EventChanges
from eventpages.events.guest_list import GuestFilter
from eventpages.events.lifecycle import (
    EDIT_LOAD_FAILED_MESSAGE,
    Action,
    ErrorKind,
    EventLifecycleService,
)
from eventpages.events.notifications import CollectingNotificationSink, NotificationKind
from eventpages.events.repository import EventRepository
from eventpages.store.client import StoreError
from eventpages.store.tests.inmemory_store import InMemoryStoreClient
from eventpages.events.tests.helpers import event_fields, seed_dependents


class GatedListStore(InMemoryStoreClient):
    """Holds the dashboard listing query open until released."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.hold_listing = False
        self.listing_started = asyncio.Event()
        self.release_listing = asyncio.Event()

    async def select(self, table, *, filters=None, order_by=None, descending=False):
        response = await super().select(table, filters=filters, order_by=order_by, descending=descending)
        if self.hold_listing and table == "events" and order_by == "created_at":
            self.listing_started.set()
            await self.release_listing.wait()
        return response


async def make_service(store=None, signed_in=True, today=date(2030, 1, 1)):
    store = store if store is not None else InMemoryStoreClient()
    backend = InMemoryAuthBackend()
    backend.add_user("owner@example.com", "secret-password")
    session = SessionStore(backend)
    if signed_in:
        await session.sign_in("owner@example.com", "secret-password")
    else:
        await session.restore(None)
    sink = CollectingNotificationSink()
    service = EventLifecycleService(
        session=session,
        repository=EventRepository(store),
        notify=sink,
        today=lambda: today,
    )
    return service, sink, store


@pytest.mark.asyncio
async def test_create_event_notifies_once_and_adds_private_event():
    service, sink, _ = await make_service()

    result = await service.create_event(event_fields())

    assert result.ok
    assert result.value.is_public is False
    assert service.collection.events == [result.value]
    notifications = sink.drain()
    assert len(notifications) == 1
    assert notifications[0].kind is NotificationKind.SUCCESS


@pytest.mark.asyncio
async def test_operations_without_identity_fail_as_auth_errors():
    service, sink, store = await make_service(signed_in=False)

    result = await service.create_event(event_fields())

    assert result.error is ErrorKind.AUTH
    assert store.calls == []
    assert [n.kind for n in sink.drain()] == [NotificationKind.ERROR]


@pytest.mark.asyncio
async def test_list_my_events_replaces_collection_and_notifies_once():
    service, sink, store = await make_service()
    own = await service.repository.create(service.session.identity.id, event_fields("mine"))
    await service.repository.create(uuid4(), event_fields("not mine"))

    result = await service.list_my_events()

    assert [event.id for event in result.value] == [own.id]
    assert [event.id for event in service.collection] == [own.id]
    assert len(sink.drain()) == 1


@pytest.mark.asyncio
async def test_store_failure_is_classified_with_best_message():
    service, sink, store = await make_service()
    store.fail_on("select", "events", StoreError("upstream timed out"))

    result = await service.list_my_events()

    assert result.error is ErrorKind.STORE
    notifications = sink.drain()
    assert len(notifications) == 1
    assert notifications[0].kind is NotificationKind.ERROR
    assert notifications[0].detail == "upstream timed out"


@pytest.mark.asyncio
async def test_update_of_foreign_event_is_not_found():
    service, sink, _ = await make_service()
    foreign = await service.repository.create(uuid4(), event_fields())

    result = await service.update_event(foreign.id, EventChanges(title="mine now"))

    assert result.error is ErrorKind.NOT_FOUND
    assert len(sink.drain()) == 1


@pytest.mark.asyncio
async def test_update_refused_by_store_is_forbidden():
    service, sink, store = await make_service()
    created = (await service.create_event(event_fields())).value
    sink.drain()
    store.fail_on("update", "events")

    result = await service.update_event(created.id, EventChanges(title="new"))

    assert result.error is ErrorKind.FORBIDDEN
    assert [n.kind for n in sink.drain()] == [NotificationKind.ERROR]


@pytest.mark.asyncio
async def test_update_replaces_event_in_collection():
    service, sink, _ = await make_service()
    created = (await service.create_event(event_fields())).value

    result = await service.update_event(created.id, EventChanges(title="Renamed"))

    assert result.ok
    assert service.collection.get(created.id).title == "Renamed"
    assert len(sink.drain()) == 2


@pytest.mark.asyncio
async def test_load_for_edit_failure_redirects_to_dashboard():
    service, sink, _ = await make_service()

    result = await service.load_event_for_edit(uuid4())

    assert result.error is ErrorKind.NOT_FOUND
    assert result.redirect_to == "/dashboard"
    notifications = sink.drain()
    assert len(notifications) == 1
    assert notifications[0].detail == EDIT_LOAD_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_load_for_edit_success_is_silent():
    service, sink, _ = await make_service()
    created = (await service.create_event(event_fields())).value
    sink.drain()

    result = await service.load_event_for_edit(created.id)

    assert result.value == created
    assert sink.drain() == []


@pytest.mark.asyncio
async def test_delete_confirmation_lists_what_will_be_lost():
    service, sink, store = await make_service()
    created = (await service.create_event(event_fields("Ana's 30th"))).value
    seed_dependents(store, created.id, guests=2, gifts=1, messages=1, reservations=1)
    seen = []

    result = await service.delete_event(created.id, confirm=lambda c: seen.append(c) or True)

    assert result.ok
    text = seen[0].text
    assert text.startswith('Delete "Ana\'s 30th"?')
    assert "2 guests" in text
    assert "1 gift," in text
    assert "1 guest message" in text
    assert "1 gift reservation" in text
    assert "cannot be undone" in text
    assert created.id not in service.collection


@pytest.mark.asyncio
async def test_delete_confirmation_skips_missing_tables_and_flags_unknown_counts():
    store = InMemoryStoreClient(missing_tables=("guest_messages",))
    service, sink, _ = await make_service(store)
    created = (await service.create_event(event_fields())).value
    store.fail_on("select", "gifts", StoreError("timeout"))

    result = await service.describe_deletion(created.id)

    assert TableNames.GUEST_MESSAGES not in result.value.dependents
    assert result.value.dependents[TableNames.GIFTS] is None
    assert "all gifts" in result.value.text


@pytest.mark.asyncio
async def test_declined_deletion_keeps_event_and_notifies_info():
    service, sink, store = await make_service()
    created = (await service.create_event(event_fields())).value
    sink.drain()

    result = await service.delete_event(created.id, confirm=lambda _: False)

    assert result.error is ErrorKind.CANCELLED
    assert [n.kind for n in sink.drain()] == [NotificationKind.INFO]
    assert created.id in service.collection
    assert not any(operation == "delete" for operation, _ in store.calls)


@pytest.mark.asyncio
async def test_async_confirmation_callback_is_awaited():
    service, sink, _ = await make_service()
    created = (await service.create_event(event_fields())).value

    async def confirm(_confirmation):
        return True

    result = await service.delete_event(created.id, confirm=confirm)

    assert result.ok
    assert await service.repository.list_owned(service.session.identity.id) == []


@pytest.mark.asyncio
async def test_fatal_cascade_failure_keeps_event_in_collection():
    service, sink, store = await make_service()
    created = (await service.create_event(event_fields())).value
    sink.drain()
    store.fail_on("delete", "events")

    result = await service.delete_event(created.id, confirm=lambda _: True)

    assert result.error is ErrorKind.FORBIDDEN
    assert created.id in service.collection
    notifications = sink.drain()
    assert len(notifications) == 1
    assert notifications[0].kind is NotificationKind.ERROR


@pytest.mark.asyncio
async def test_best_effort_failure_still_reports_success():
    service, sink, store = await make_service()
    created = (await service.create_event(event_fields())).value
    seed_dependents(store, created.id)
    sink.drain()
    store.fail_on("delete", "guests", StoreError("lock timeout"))

    result = await service.delete_event(created.id, confirm=lambda _: True)

    assert result.ok
    notifications = sink.drain()
    assert [n.kind for n in notifications] == [NotificationKind.SUCCESS]
    assert "guests" in notifications[0].detail


@pytest.mark.asyncio
async def test_second_submission_while_in_flight_is_rejected():
    service, sink, store = await make_service()
    created = (await service.create_event(event_fields())).value
    sink.drain()
    inner_results = []

    async def confirm(_confirmation):
        assert service.is_busy(Action.DELETE, created.id)
        inner_results.append(await service.delete_event(created.id, confirm=lambda _: True))
        return True

    result = await service.delete_event(created.id, confirm=confirm)

    assert result.ok
    assert inner_results[0].error is ErrorKind.BUSY
    assert [n.kind for n in sink.drain()] == [NotificationKind.WARNING, NotificationKind.SUCCESS]
    assert not service.is_busy(Action.DELETE, created.id)
    assert [t for op, t in store.calls if op == "delete"].count("events") == 1


@pytest.mark.asyncio
async def test_refresh_in_flight_during_delete_does_not_resurrect_event():
    store = GatedListStore()
    service, sink, _ = await make_service(store)
    created = (await service.create_event(event_fields())).value
    kept = (await service.create_event(event_fields("kept"))).value

    store.hold_listing = True
    listing = asyncio.create_task(service.list_my_events())
    await store.listing_started.wait()

    deletion = await service.delete_event(created.id, confirm=lambda _: True)
    store.release_listing.set()
    refreshed = await listing

    assert deletion.ok
    assert refreshed.ok
    assert [event.id for event in service.collection] == [kept.id]


@pytest.mark.asyncio
async def test_toggle_publish_uses_known_state_and_reports_direction():
    service, sink, _ = await make_service()
    created = (await service.create_event(event_fields())).value
    sink.drain()

    published = await service.toggle_publish(created.id)
    unpublished = await service.toggle_publish(created.id, current_is_public=True)

    assert published.value.is_public is True
    assert unpublished.value.is_public is False
    assert [n.title for n in sink.drain()] == ["Event published", "Event unpublished"]


@pytest.mark.asyncio
async def test_toggle_publish_reads_state_when_unknown_locally():
    service, sink, _ = await make_service()
    owner_id = service.session.identity.id
    created = await service.repository.create(owner_id, event_fields())
    await service.repository.set_visibility(owner_id, created.id, True)

    result = await service.toggle_publish(created.id)

    assert result.value.is_public is False


@pytest.mark.asyncio
async def test_stats_count_total_public_and_upcoming():
    service, sink, _ = await make_service(today=date(2030, 1, 1))
    owner_id = service.session.identity.id
    past = await service.repository.create(owner_id, event_fields("past", event_date=date(2029, 6, 1)))
    await service.repository.create(owner_id, event_fields("future", event_date=date(2030, 6, 1)))
    await service.repository.set_visibility(owner_id, past.id, True)
    await service.list_my_events()

    stats = service.stats()

    assert (stats.total, stats.public, stats.upcoming) == (2, 1, 1)


@pytest.mark.asyncio
async def test_guest_list_counts_every_guest_and_filters_rows():
    service, sink, store = await make_service()
    event = await service.repository.create(service.session.identity.id, event_fields())
    store.insert_row("guests", event_id=event.id, name="Ana", confirmed=True, plus_one=True)
    store.insert_row("guests", event_id=event.id, name="Ben", confirmed=True, plus_one=False)
    # a pending guest's plus one is not counted yet
    store.insert_row("guests", event_id=event.id, name="Cy", confirmed=False, plus_one=True)

    result = await service.list_guests(event.id, GuestFilter.PENDING)

    assert result.ok
    assert [guest.name for guest in result.value.guests] == ["Cy"]
    stats = result.value.stats
    assert (stats.total, stats.confirmed, stats.pending, stats.plus_ones) == (3, 2, 1, 1)
    assert stats.expected_attendees == 3
    assert sink.drain() == []


@pytest.mark.asyncio
async def test_guest_list_of_foreign_event_is_not_found():
    service, sink, store = await make_service()
    foreign = await service.repository.create(uuid4(), event_fields())
    seed_dependents(store, foreign.id, guests=2)

    result = await service.list_guests(foreign.id)

    assert result.error is ErrorKind.NOT_FOUND
    assert result.value is None
    assert [n.kind for n in sink.drain()] == [NotificationKind.ERROR]
