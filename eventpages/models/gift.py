from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventpages.config.table_names import TableNames
from eventpages.models.base import Base, EventDependent, TimeStamp


class Gift(EventDependent, Base, TimeStamp):
    __tablename__ = TableNames.GIFTS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    purchased: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Gift {self.name}>"


class GiftReservation(EventDependent, Base, TimeStamp):
    __tablename__ = TableNames.GIFT_RESERVATIONS.value

    gift_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GIFTS.value}.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    reserved_by: Mapped[str] = mapped_column(String(255), nullable=False)
    reserved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<GiftReservation {self.gift_id} by {self.reserved_by}>"
