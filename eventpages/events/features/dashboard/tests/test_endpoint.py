from datetime import date, timedelta

import pytest

from eventpages.models.event import EventType
from eventpages.urls import DASHBOARD_URL


def _seed_event(store, owner_id, title, event_date, is_public=False):
    return store.insert_row(
        "events",
        owner_id=owner_id,
        title=title,
        type=EventType.WEDDING,
        event_date=event_date,
        primary_color="#3B82F6",
        secondary_color="#1E40AF",
        is_public=is_public,
    )


@pytest.mark.asyncio
async def test_dashboard_lists_own_events_with_stats(client, owner_headers, owner, store):
    today = date.today()
    old = _seed_event(store, owner.id, "Last year", today - timedelta(days=365), is_public=True)
    new = _seed_event(store, owner.id, "Next month", today + timedelta(days=30))
    store.insert_row(
        "events",
        owner_id="someone-else",
        title="Not mine",
        type=EventType.BIRTHDAY,
        event_date=today,
        primary_color="#3B82F6",
        secondary_color="#1E40AF",
        is_public=True,
    )

    response = await client.get(DASHBOARD_URL, headers=owner_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert [event["id"] for event in data["events"]] == [str(new["id"]), str(old["id"])]
    assert data["stats"] == {"total": 2, "public": 1, "upcoming": 1}
    assert len(response.json()["notifications"]) == 1
