"""Guest aggregate model: occupancy, loyalty membership and stay history."""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staydesk.database import Base
from staydesk.domain import (
    ActiveOccupancy,
    Enrolled,
    InactiveOccupancy,
    LoyaltyStatus,
    LoyaltyTier,
    NotEnrolled,
    Occupancy,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Guest(Base):
    """A hotel guest. Never hard-deleted: checkout is a state transition."""

    __tablename__ = "guests"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    hotel_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)

    # Profile
    first_name: Mapped[str] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(255), index=True)  # unique per hotel, not globally
    phone: Mapped[str | None] = mapped_column(String(20))

    # Occupancy: room and dates are set iff is_active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    room_number: Mapped[str | None] = mapped_column(String(20))
    check_in_date: Mapped[date | None] = mapped_column(Date)
    check_out_date: Mapped[date | None] = mapped_column(Date)

    # Loyalty: tier is NULL when not enrolled
    loyalty_tier: Mapped[LoyaltyTier | None] = mapped_column(
        Enum(LoyaltyTier, native_enum=False, length=20),
        nullable=True,
    )
    loyalty_points: Mapped[int] = mapped_column(Integer, default=0)
    available_loyalty_points: Mapped[int] = mapped_column(Integer, default=0)
    loyalty_enrolled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Optimistic lock counter, bumped by the ORM on every UPDATE
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    stay_history: Mapped[list["StayRecord"]] = relationship(  # noqa: F821
        back_populates="guest",
        lazy="selectin",
        order_by="StayRecord.sequence",
        cascade="save-update, merge",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("hotel_id", "email", name="uq_guests_hotel_email"),
        CheckConstraint(
            "(is_active AND room_number IS NOT NULL AND check_in_date IS NOT NULL"
            " AND check_out_date IS NOT NULL AND check_in_date <= check_out_date)"
            " OR (NOT is_active AND room_number IS NULL AND check_in_date IS NULL"
            " AND check_out_date IS NULL)",
            name="ck_guests_occupancy_consistent",
        ),
        CheckConstraint(
            "loyalty_points >= 0 AND available_loyalty_points >= 0",
            name="ck_guests_loyalty_points_non_negative",
        ),
        CheckConstraint(
            "loyalty_tier IS NOT NULL OR (loyalty_points = 0 AND available_loyalty_points = 0)",
            name="ck_guests_loyalty_points_require_membership",
        ),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def occupancy(self) -> Occupancy:
        if not self.is_active:
            return InactiveOccupancy()
        return ActiveOccupancy(
            room_number=self.room_number,
            check_in_date=self.check_in_date,
            check_out_date=self.check_out_date,
        )

    @occupancy.setter
    def occupancy(self, value: Occupancy) -> None:
        if isinstance(value, ActiveOccupancy):
            self.is_active = True
            self.room_number = value.room_number
            self.check_in_date = value.check_in_date
            self.check_out_date = value.check_out_date
        else:
            self.is_active = False
            self.room_number = None
            self.check_in_date = None
            self.check_out_date = None

    @property
    def loyalty(self) -> LoyaltyStatus:
        if self.loyalty_tier is None:
            return NotEnrolled()
        return Enrolled(
            tier=self.loyalty_tier,
            points=self.loyalty_points,
            available_points=self.available_loyalty_points,
            enrolled_at=self.loyalty_enrolled_at,
        )

    @loyalty.setter
    def loyalty(self, value: LoyaltyStatus) -> None:
        if isinstance(value, Enrolled):
            self.loyalty_tier = value.tier
            self.loyalty_points = value.points
            self.available_loyalty_points = value.available_points
            self.loyalty_enrolled_at = value.enrolled_at
        else:
            self.loyalty_tier = None
            self.loyalty_points = 0
            self.available_loyalty_points = 0
            self.loyalty_enrolled_at = None

    @property
    def total_nights_stayed(self) -> int:
        """Nights across archived stays plus the current stay, if any."""
        nights = sum(stay.number_of_nights for stay in self.stay_history)
        occupancy = self.occupancy
        if isinstance(occupancy, ActiveOccupancy):
            nights += occupancy.number_of_nights
        return nights

    def __repr__(self) -> str:
        return f"<Guest(id={self.id}, email={self.email}, is_active={self.is_active})>"
