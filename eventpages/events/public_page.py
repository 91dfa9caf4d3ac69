"""What a visitor sees at /event/{id}: only public events, never drafts."""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

from eventpages.events.dtos import Event, GiftDTO, GuestDTO
from eventpages.events.repository import EventRepository
from eventpages.store.client import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PublicEventPage:
    event: Event
    guests: list[GuestDTO]
    gifts: list[GiftDTO]


class PublicEventService:
    """Every call checks ``is_public`` first, so a draft id behaves like an unknown one."""

    def __init__(self, repository: EventRepository) -> None:
        self.repository = repository

    async def load(self, event_id: UUID) -> PublicEventPage:
        event = await self.repository.get_public(event_id)
        guests = await self._section(event_id, self.repository.list_confirmed_guests(event_id))
        gifts = await self._section(event_id, self.repository.list_gifts(event_id))
        return PublicEventPage(event=event, guests=guests, gifts=gifts)

    async def _section(self, event_id: UUID, rows: Awaitable[list[T]]) -> list[T]:
        """A section whose table this deployment lacks renders empty."""
        try:
            return await rows
        except StoreError as e:
            if not e.is_missing_relation:
                raise
            logger.warning(f"Public page of event {event_id} skips {e.table}: {e}")
            return []

    async def rsvp(
        self,
        event_id: UUID,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        plus_one: bool = False,
    ) -> GuestDTO:
        await self.repository.get_public(event_id)
        guest = await self.repository.add_guest(event_id, name, email=email, phone=phone, plus_one=plus_one)
        logger.info(f"Guest {guest.id} confirmed attendance to event {event_id}")
        return guest

    async def reserve_gift(self, event_id: UUID, gift_id: UUID, reserved_by: str) -> GiftDTO:
        await self.repository.get_public(event_id)
        gift = await self.repository.reserve_gift(event_id, gift_id, reserved_by)
        logger.info(f"Gift {gift_id} of event {event_id} reserved")
        return gift
