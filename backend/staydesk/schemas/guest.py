"""Pydantic v2 request/response schemas for guest endpoints."""

import uuid
from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from staydesk.domain import ActiveOccupancy, Enrolled, LoyaltyTier
from staydesk.models.guest import Guest

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class GuestCreate(BaseModel):
    """Schema for registering a guest (QR-code sign-up or front desk)."""

    hotel_id: uuid.UUID
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    email: EmailStr
    phone: str | None = Field(None, pattern=r"^\+?[\d\s\-().]{7,20}$")
    room_number: str = Field(..., max_length=20)
    check_in_date: date
    check_out_date: date


class GuestProfileUpdate(BaseModel):
    """Schema for correcting profile fields. All fields optional."""

    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    email: EmailStr | None = None
    phone: str | None = Field(None, pattern=r"^\+?[\d\s\-().]{7,20}$")


class GuestOccupancyUpdate(BaseModel):
    """Schema for editing the current stay, optionally reactivating the guest."""

    room_number: str | None = Field(None, max_length=20)
    check_in_date: date | None = None
    check_out_date: date | None = None
    is_active: bool | None = None

    def has_stay_fields(self) -> bool:
        return any(
            value is not None for value in (self.room_number, self.check_in_date, self.check_out_date)
        )


class GuestStatusUpdate(BaseModel):
    """Schema for switching a guest between active and inactive.

    Activating needs the new stay; deactivating ignores the stay fields.
    """

    is_active: bool
    room_number: str | None = Field(None, max_length=20)
    check_in_date: date | None = None
    check_out_date: date | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ActiveOccupancyResponse(BaseModel):
    status: Literal["active"] = "active"
    room_number: str
    check_in_date: date
    check_out_date: date
    number_of_nights: int


class InactiveOccupancyResponse(BaseModel):
    status: Literal["inactive"] = "inactive"


OccupancyResponse = Annotated[
    ActiveOccupancyResponse | InactiveOccupancyResponse,
    Field(discriminator="status"),
]


class EnrolledLoyaltyResponse(BaseModel):
    status: Literal["enrolled"] = "enrolled"
    tier: LoyaltyTier
    points: int
    available_points: int
    enrolled_at: datetime | None = None


class NotEnrolledLoyaltyResponse(BaseModel):
    status: Literal["not_enrolled"] = "not_enrolled"


LoyaltyResponse = Annotated[
    EnrolledLoyaltyResponse | NotEnrolledLoyaltyResponse,
    Field(discriminator="status"),
]


class StayRecordResponse(BaseModel):
    """One archived stay."""

    sequence: int
    room_number: str
    check_in_date: date
    check_out_date: date
    number_of_nights: int
    archived_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GuestResponse(BaseModel):
    """Full guest representation returned by every guest endpoint."""

    id: uuid.UUID
    hotel_id: uuid.UUID
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str | None = None
    is_active: bool
    occupancy: OccupancyResponse
    loyalty: LoyaltyResponse
    stay_history: list[StayRecordResponse]
    total_nights_stayed: int
    created_at: datetime
    last_login: datetime | None = None

    @classmethod
    def from_guest(cls, guest: Guest) -> "GuestResponse":
        occupancy = guest.occupancy
        if isinstance(occupancy, ActiveOccupancy):
            occupancy_out = ActiveOccupancyResponse(
                room_number=occupancy.room_number,
                check_in_date=occupancy.check_in_date,
                check_out_date=occupancy.check_out_date,
                number_of_nights=occupancy.number_of_nights,
            )
        else:
            occupancy_out = InactiveOccupancyResponse()

        loyalty = guest.loyalty
        if isinstance(loyalty, Enrolled):
            loyalty_out = EnrolledLoyaltyResponse(
                tier=loyalty.tier,
                points=loyalty.points,
                available_points=loyalty.available_points,
                enrolled_at=loyalty.enrolled_at,
            )
        else:
            loyalty_out = NotEnrolledLoyaltyResponse()

        return cls(
            id=guest.id,
            hotel_id=guest.hotel_id,
            first_name=guest.first_name,
            last_name=guest.last_name,
            full_name=guest.full_name,
            email=guest.email,
            phone=guest.phone,
            is_active=guest.is_active,
            occupancy=occupancy_out,
            loyalty=loyalty_out,
            stay_history=[StayRecordResponse.model_validate(stay) for stay in guest.stay_history],
            total_nights_stayed=guest.total_nights_stayed,
            created_at=guest.created_at,
            last_login=guest.last_login,
        )


class GuestListResponse(BaseModel):
    """Paginated list of guests."""

    items: list[GuestResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
