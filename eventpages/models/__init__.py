from .base import Base, BaseModel, TimeStamp
from .user import User
from .event import Event, EventType
from .guest import Guest, GuestMessage
from .gift import Gift, GiftReservation
from .revoked_token import RevokedToken

__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "User",
    "Event",
    "EventType",
    "Guest",
    "GuestMessage",
    "Gift",
    "GiftReservation",
    "RevokedToken",
]
