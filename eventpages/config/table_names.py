from enum import Enum


class TableNames(str, Enum):
    USERS = "users"
    EVENTS = "events"
    GUESTS = "guests"
    GIFTS = "gifts"
    GIFT_RESERVATIONS = "gift_reservations"
    GUEST_MESSAGES = "guest_messages"
    REVOKED_TOKENS = "revoked_tokens"
