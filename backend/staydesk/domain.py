"""Domain value types for guest occupancy and loyalty membership.

Occupancy and loyalty are two-variant tagged unions: a guest is either
``ActiveOccupancy`` or ``InactiveOccupancy``, and either ``Enrolled`` or
``NotEnrolled``. The ORM model stores them as flat columns and exposes them
through these types.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar

from staydesk.exceptions import ValidationError


class OccupancyStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class LoyaltyTier(str, enum.Enum):
    """Ordinal loyalty levels, lowest first."""

    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


def nights_between(check_in_date: date, check_out_date: date) -> int:
    """Whole nights between two dates, never negative."""
    return max((check_out_date - check_in_date).days, 0)


@dataclass(frozen=True)
class ActiveOccupancy:
    status: ClassVar[OccupancyStatus] = OccupancyStatus.ACTIVE

    room_number: str
    check_in_date: date
    check_out_date: date

    @property
    def number_of_nights(self) -> int:
        return nights_between(self.check_in_date, self.check_out_date)


@dataclass(frozen=True)
class InactiveOccupancy:
    status: ClassVar[OccupancyStatus] = OccupancyStatus.INACTIVE


Occupancy = ActiveOccupancy | InactiveOccupancy


@dataclass(frozen=True)
class Enrolled:
    tier: LoyaltyTier
    points: int
    available_points: int
    enrolled_at: datetime | None = None


@dataclass(frozen=True)
class NotEnrolled:
    pass


LoyaltyStatus = Enrolled | NotEnrolled


def build_active_occupancy(
    room_number: str | None,
    check_in_date: date | None,
    check_out_date: date | None,
) -> ActiveOccupancy:
    """Validate raw stay input and return the occupancy it describes.

    Raises:
        ValidationError: room number is missing/blank, a date is missing,
            or check-out falls before check-in.
    """
    room = (room_number or "").strip()
    if not room:
        raise ValidationError("Room number is required")
    if check_in_date is None or check_out_date is None:
        raise ValidationError("Check-in and check-out dates are required")
    if check_in_date > check_out_date:
        raise ValidationError("Check-out date cannot be before check-in date")
    return ActiveOccupancy(
        room_number=room,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
    )
