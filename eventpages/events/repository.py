"""Typed façade over the store for events and the records hanging off them.

Ownership is enforced by the filter predicate sent to the store, never by
checking rows after the fact: a non-owner simply matches nothing.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from eventpages.config.table_names import TableNames
from eventpages.events.dtos import (
    Event,
    EventChanges,
    EventFields,
    EventForbiddenError,
    EventNotFoundError,
    GiftDTO,
    GiftUnavailableError,
    GuestDTO,
)
from eventpages.store.client import Row, StoreClient, StoreResponse

EVENTS = TableNames.EVENTS.value

# Tables holding records that reference an event, least referenced first
DEPENDENT_TABLES = (
    TableNames.GUEST_MESSAGES,
    TableNames.GIFT_RESERVATIONS,
    TableNames.GIFTS,
    TableNames.GUESTS,
)


class EventRepository:
    def __init__(self, store: StoreClient) -> None:
        self.store = store

    def _rows(self, response: StoreResponse, event_id: UUID | None = None) -> list[Row]:
        error = response.error
        if error is not None and error.is_permission_denied and event_id is not None:
            raise EventForbiddenError(event_id, error.message) from error
        return response.rows()

    async def create(self, owner_id: UUID, fields: EventFields) -> Event:
        values = fields.model_dump()
        values["owner_id"] = owner_id
        values["is_public"] = False
        rows = self._rows(await self.store.insert(EVENTS, values))
        return Event.from_row(rows[0])

    async def list_owned(self, owner_id: UUID) -> list[Event]:
        """Return the owner's events, newest first."""
        response = await self.store.select(
            EVENTS, filters={"owner_id": owner_id}, order_by="created_at", descending=True
        )
        return [Event.from_row(row) for row in self._rows(response)]

    async def get_owned(self, owner_id: UUID, event_id: UUID) -> Event:
        response = await self.store.select(EVENTS, filters={"id": event_id, "owner_id": owner_id})
        rows = self._rows(response, event_id)
        if not rows:
            raise EventNotFoundError(event_id)
        return Event.from_row(rows[0])

    async def get_public(self, event_id: UUID) -> Event:
        response = await self.store.select(EVENTS, filters={"id": event_id, "is_public": True})
        rows = self._rows(response, event_id)
        if not rows:
            raise EventNotFoundError(event_id)
        return Event.from_row(rows[0])

    async def update(
        self, owner_id: UUID, event_id: UUID, changes: EventChanges | Mapping[str, Any]
    ) -> Event:
        if not isinstance(changes, EventChanges):
            changes = EventChanges(**changes)
        values = changes.to_values()
        if not values:
            return await self.get_owned(owner_id, event_id)
        return await self._update_owned(owner_id, event_id, values)

    async def set_visibility(self, owner_id: UUID, event_id: UUID, is_public: bool) -> Event:
        return await self._update_owned(owner_id, event_id, {"is_public": is_public})

    async def _update_owned(self, owner_id: UUID, event_id: UUID, values: dict[str, Any]) -> Event:
        response = await self.store.update(
            EVENTS, values, filters={"id": event_id, "owner_id": owner_id}
        )
        rows = self._rows(response, event_id)
        if not rows:
            raise EventNotFoundError(event_id)
        return Event.from_row(rows[0])

    async def delete_owned(self, owner_id: UUID, event_id: UUID) -> None:
        response = await self.store.delete(EVENTS, filters={"id": event_id, "owner_id": owner_id})
        if not self._rows(response, event_id):
            raise EventNotFoundError(event_id)

    # -------- dependent records --------

    async def count_dependents(self, table: TableNames, event_id: UUID) -> int:
        response = await self.store.select(table.value, filters={"event_id": event_id})
        return len(response.rows())

    async def delete_dependents(self, table: TableNames, event_id: UUID) -> int:
        """Delete every row of ``table`` pointing at the event; returns the count."""
        response = await self.store.delete(table.value, filters={"event_id": event_id})
        return len(response.rows())

    async def list_confirmed_guests(self, event_id: UUID) -> list[GuestDTO]:
        response = await self.store.select(
            TableNames.GUESTS.value,
            filters={"event_id": event_id, "confirmed": True},
            order_by="created_at",
        )
        return [GuestDTO.from_row(row) for row in response.rows()]

    async def list_guests(self, owner_id: UUID, event_id: UUID) -> list[GuestDTO]:
        """Every guest of an owned event, confirmed or not, newest first.

        Raises EventNotFoundError when the caller does not own the event.
        """
        await self.get_owned(owner_id, event_id)
        response = await self.store.select(
            TableNames.GUESTS.value,
            filters={"event_id": event_id},
            order_by="created_at",
            descending=True,
        )
        if response.error is not None and response.error.is_missing_relation:
            return []
        return [GuestDTO.from_row(row) for row in self._rows(response, event_id)]

    async def add_guest(
        self,
        event_id: UUID,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        plus_one: bool = False,
    ) -> GuestDTO:
        response = await self.store.insert(
            TableNames.GUESTS.value,
            {
                "event_id": event_id,
                "name": name,
                "email": email,
                "phone": phone,
                "plus_one": plus_one,
                "confirmed": True,
            },
        )
        return GuestDTO.from_row(response.rows()[0])

    async def list_gifts(self, event_id: UUID) -> list[GiftDTO]:
        """Return the gift list, oldest first, with who reserved each gift."""
        response = await self.store.select(
            TableNames.GIFTS.value, filters={"event_id": event_id}, order_by="created_at"
        )
        gifts = response.rows()
        reservations = await self._reservations_by_gift(event_id)
        return [GiftDTO.from_row(row, reserved_by=reservations.get(row["id"])) for row in gifts]

    async def _reservations_by_gift(self, event_id: UUID) -> dict[UUID, str]:
        response = await self.store.select(
            TableNames.GIFT_RESERVATIONS.value, filters={"event_id": event_id}
        )
        if response.error is not None and response.error.is_missing_relation:
            return {}
        return {row["gift_id"]: row["reserved_by"] for row in response.rows()}

    async def reserve_gift(self, event_id: UUID, gift_id: UUID, reserved_by: str) -> GiftDTO:
        response = await self.store.select(
            TableNames.GIFTS.value, filters={"id": gift_id, "event_id": event_id}
        )
        rows = response.rows()
        if not rows:
            raise GiftUnavailableError(gift_id, "not found")
        gift = rows[0]
        if gift.get("purchased"):
            raise GiftUnavailableError(gift_id, "already purchased")

        reservations = await self._reservations_by_gift(event_id)
        if gift_id in reservations:
            raise GiftUnavailableError(gift_id, "already reserved")

        response = await self.store.insert(
            TableNames.GIFT_RESERVATIONS.value,
            {
                "event_id": event_id,
                "gift_id": gift_id,
                "reserved_by": reserved_by,
                "reserved_at": datetime.now(UTC),
            },
        )
        if response.error is not None and response.error.is_unique_violation:
            # another guest reserved it between the check and the insert
            raise GiftUnavailableError(gift_id, "already reserved") from response.error
        response.rows()
        return GiftDTO.from_row(gift, reserved_by=reserved_by)
