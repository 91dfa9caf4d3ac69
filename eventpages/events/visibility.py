from uuid import UUID

from eventpages.events.dtos import Event
from eventpages.events.repository import EventRepository


class VisibilityController:
    """Publishes and unpublishes events.

    A toggle writes the inverse of the state the caller last saw. There is no
    version check, so when two toggles race the last write wins.
    """

    def __init__(self, repository: EventRepository) -> None:
        self.repository = repository

    async def toggle(self, owner_id: UUID, event_id: UUID, current_is_public: bool) -> Event:
        return await self.repository.set_visibility(owner_id, event_id, not current_is_public)
