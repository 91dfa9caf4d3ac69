from datetime import date
from enum import Enum as PyEnum
from uuid import UUID

from sqlalchemy import Boolean, Date, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventpages.config.table_names import TableNames
from eventpages.models.base import Base, TimeStamp


class EventType(str, PyEnum):
    BIRTHDAY = "birthday"
    WEDDING = "wedding"


class Event(Base, TimeStamp):
    __tablename__ = TableNames.EVENTS.value

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.USERS.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(
        Enum(EventType, name="event_type_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    primary_color: Mapped[str] = mapped_column(String(7), nullable=False, default="#3B82F6")
    secondary_color: Mapped[str] = mapped_column(String(7), nullable=False, default="#1E40AF")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Event {self.title} on {self.event_date}>"
