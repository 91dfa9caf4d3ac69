"""The owner's view of who answered an invitation."""

from dataclasses import dataclass
from enum import Enum

from eventpages.events.dtos import Event, GuestDTO


class GuestFilter(str, Enum):
    ALL = "all"
    CONFIRMED = "confirmed"
    PENDING = "pending"

    def matches(self, guest: GuestDTO) -> bool:
        if self is GuestFilter.CONFIRMED:
            return guest.confirmed
        if self is GuestFilter.PENDING:
            return not guest.confirmed
        return True


@dataclass(frozen=True)
class GuestListStats:
    total: int
    confirmed: int
    pending: int
    plus_ones: int

    @property
    def expected_attendees(self) -> int:
        """Confirmed guests and the companions they bring."""
        return self.confirmed + self.plus_ones

    @classmethod
    def from_guests(cls, guests: list[GuestDTO]) -> "GuestListStats":
        confirmed = [guest for guest in guests if guest.confirmed]
        return cls(
            total=len(guests),
            confirmed=len(confirmed),
            pending=len(guests) - len(confirmed),
            # a plus one only counts once the guest confirmed
            plus_ones=sum(1 for guest in confirmed if guest.plus_one),
        )


@dataclass(frozen=True)
class GuestList:
    event: Event
    guests: list[GuestDTO]
    stats: GuestListStats
