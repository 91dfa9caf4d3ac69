from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventpages.config.table_names import TableNames
from eventpages.models.base import Base, EventDependent, TimeStamp


class Guest(EventDependent, Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    plus_one: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Guest {self.name} for event {self.event_id}>"


class GuestMessage(EventDependent, Base, TimeStamp):
    __tablename__ = TableNames.GUEST_MESSAGES.value

    guest_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.id", ondelete="SET NULL"),
        nullable=True,
    )
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<GuestMessage from {self.author_name}>"
