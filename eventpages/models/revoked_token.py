from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from eventpages.config.table_names import TableNames
from eventpages.models.base import Base, TimeStamp


class RevokedToken(Base, TimeStamp):
    """An access token ended by sign-out before it expired."""

    __tablename__ = TableNames.REVOKED_TOKENS.value

    jti: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.USERS.value}.id", ondelete="CASCADE"),
        nullable=False,
    )
    # rows past this point can be purged, the token is dead anyway
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<RevokedToken {self.jti}>"
