from datetime import datetime
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, declarative_base, declared_attr, mapped_column
from sqlalchemy_utils import UUIDType

from eventpages.config.table_names import TableNames

BaseModel = declarative_base()


class Base(BaseModel):
    __abstract__ = True

    type_annotation_map = {
        UUID: UUIDType,
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TimeStamp(BaseModel):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        onupdate=sa.func.current_timestamp(),
        nullable=False,
    )


class EventDependent:
    """Rows that belong to one event.

    The database removes them together with the event row, so a dependent
    table the application failed to clear never blocks deleting the event.
    """

    @declared_attr
    def event_id(cls) -> Mapped[UUID]:
        return mapped_column(
            sa.ForeignKey(f"{TableNames.EVENTS.value}.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
