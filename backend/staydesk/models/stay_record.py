"""Stay record model: append-only archive of a guest's past occupancies."""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    event,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, object_session, relationship

from staydesk.database import Base
from staydesk.exceptions import InvalidStateError


class StayRecord(Base):
    """One archived stay. Written once on checkout and never edited."""

    __tablename__ = "stay_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guests.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based, oldest first
    room_number: Mapped[str] = mapped_column(String(20), nullable=False)
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_nights: Mapped[int] = mapped_column(Integer, nullable=False)
    archived_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    guest: Mapped["Guest"] = relationship(back_populates="stay_history")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        # Two sessions archiving the same guest concurrently collide here.
        UniqueConstraint("guest_id", "sequence", name="uq_stay_records_guest_sequence"),
        CheckConstraint("number_of_nights >= 0", name="ck_stay_records_nights_non_negative"),
        CheckConstraint("check_in_date <= check_out_date", name="ck_stay_records_dates_ordered"),
    )

    def __repr__(self) -> str:
        return f"<StayRecord(guest_id={self.guest_id}, sequence={self.sequence}, room={self.room_number})>"


@event.listens_for(StayRecord, "before_update")
def _reject_stay_record_update(mapper, connection, target: StayRecord) -> None:
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise InvalidStateError("Stay history entries cannot be modified")


@event.listens_for(StayRecord, "before_delete")
def _reject_stay_record_delete(mapper, connection, target: StayRecord) -> None:
    raise InvalidStateError("Stay history entries cannot be removed")
