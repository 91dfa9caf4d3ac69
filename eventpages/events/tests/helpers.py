from datetime import date

from eventpages.events.dtos import EventFields
from eventpages.models.event import EventType


def event_fields(title: str = "Ana's 30th", **overrides) -> EventFields:
    values = {
        "title": title,
        "type": EventType.BIRTHDAY,
        "event_date": date(2030, 5, 17),
        "location": "Rooftop bar",
    }
    values.update(overrides)
    return EventFields(**values)


def seed_dependents(store, event_id, guests=2, gifts=1, messages=1, reservations=0) -> None:
    """Attach dependent records to an event directly in the in-memory store."""
    guest_ids = [
        store.insert_row("guests", event_id=event_id, name=f"Guest {i}", confirmed=True, plus_one=False)["id"]
        for i in range(guests)
    ]
    gift_ids = [
        store.insert_row("gifts", event_id=event_id, name=f"Gift {i}", purchased=False)["id"]
        for i in range(gifts)
    ]
    for i in range(messages):
        store.insert_row(
            "guest_messages",
            event_id=event_id,
            guest_id=guest_ids[0] if guest_ids else None,
            author_name="Guest",
            body=f"Congrats {i}",
        )
    for gift_id in gift_ids[:reservations]:
        store.insert_row("gift_reservations", event_id=event_id, gift_id=gift_id, reserved_by="Someone")
