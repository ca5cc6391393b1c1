"""Guests API router: registration, directory, occupancy lifecycle and loyalty.

Every mutating endpoint returns the authoritative post-write guest, so the
admin UI never has to reconcile optimistic local state with a re-fetch.
Lifecycle errors are mapped to HTTP status codes by the handlers in
``staydesk.main``.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status

from staydesk.api.deps import get_guest_store
from staydesk.domain import OccupancyStatus
from staydesk.exceptions import ValidationError
from staydesk.repositories.guest_store import GuestFilter, GuestStore
from staydesk.schemas.guest import (
    GuestCreate,
    GuestListResponse,
    GuestOccupancyUpdate,
    GuestProfileUpdate,
    GuestResponse,
    GuestStatusUpdate,
    StayRecordResponse,
)
from staydesk.services import directory_service, guest_service, loyalty_service, occupancy_service

router = APIRouter(prefix="/api/v1/guests", tags=["guests"])


@router.post(
    "",
    response_model=GuestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new guest",
)
async def register_guest(
    body: GuestCreate,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    """Register a guest checked in with their initial stay.

    Raises 409 if the hotel already has a guest with the same email.
    """
    guest = await guest_service.register_guest(store, **body.model_dump())
    return GuestResponse.from_guest(guest)


@router.get(
    "",
    response_model=GuestListResponse,
    summary="Search guests",
)
async def list_guests(
    search: str | None = Query(None, description="Match first/last/full name or email (case-insensitive)"),
    status_filter: OccupancyStatus | None = Query(None, alias="status", description="Filter by occupancy"),
    hotel_id: uuid.UUID | None = Query(None, description="Only guests of this hotel"),
    page: int = Query(1, description="1-based page; values below 1 fall back to 1"),
    limit: int | None = Query(None, description="Page size; clamped to the configured bounds"),
    newest_first: bool = Query(False, description="Most recently registered first"),
    store: GuestStore = Depends(get_guest_store),
) -> GuestListResponse:
    """Return a page of guests matching the filters."""
    result = await directory_service.search(
        store,
        GuestFilter(text=search, status=status_filter, hotel_id=hotel_id),
        page=page,
        page_size=limit,
        newest_first=newest_first,
    )
    return GuestListResponse(
        items=[GuestResponse.from_guest(guest) for guest in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get(
    "/{guest_id}",
    response_model=GuestResponse,
    summary="Get a guest by ID",
)
async def get_guest(
    guest_id: uuid.UUID,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    guest = await guest_service.get_guest(store, guest_id)
    return GuestResponse.from_guest(guest)


@router.get(
    "/{guest_id}/stay-history",
    response_model=list[StayRecordResponse],
    summary="List a guest's archived stays, oldest first",
)
async def get_stay_history(
    guest_id: uuid.UUID,
    store: GuestStore = Depends(get_guest_store),
) -> list[StayRecordResponse]:
    guest = await guest_service.get_guest(store, guest_id)
    return [StayRecordResponse.model_validate(stay) for stay in guest.stay_history]


@router.patch(
    "/{guest_id}",
    response_model=GuestResponse,
    summary="Edit the current stay, or reactivate with a new one",
)
async def update_guest_occupancy(
    guest_id: uuid.UUID,
    body: GuestOccupancyUpdate,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    """Apply the admin "edit guest" form.

    - ``is_active: true`` on an inactive guest activates them with the stay
      in the body (all three stay fields required).
    - ``is_active: false`` checks the guest out; stay fields must be absent.
    - Otherwise the current stay is edited in place.
    """
    if body.is_active is False:
        if body.has_stay_fields():
            raise ValidationError("Cannot edit the stay while deactivating the guest")
        guest = await occupancy_service.deactivate(store, guest_id)
        return GuestResponse.from_guest(guest)

    if body.is_active is True:
        current = await guest_service.get_guest(store, guest_id)
        if not current.is_active:
            guest = await occupancy_service.activate(
                store, guest_id, body.room_number, body.check_in_date, body.check_out_date
            )
            return GuestResponse.from_guest(guest)

    guest = await occupancy_service.update_occupancy(
        store,
        guest_id,
        room_number=body.room_number,
        check_in_date=body.check_in_date,
        check_out_date=body.check_out_date,
    )
    return GuestResponse.from_guest(guest)


@router.patch(
    "/{guest_id}/status",
    response_model=GuestResponse,
    summary="Activate or deactivate a guest",
)
async def update_guest_status(
    guest_id: uuid.UUID,
    body: GuestStatusUpdate,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    """Check a guest out (archiving the stay) or back in with a new stay.

    The new stay is validated before the guest's state is checked, so
    activating without a valid room and dates is a 400 even for an active
    guest. A well-formed request for the state the guest is already in is a 409.
    """
    if body.is_active:
        guest = await occupancy_service.activate(
            store, guest_id, body.room_number, body.check_in_date, body.check_out_date
        )
    else:
        guest = await occupancy_service.deactivate(store, guest_id)
    return GuestResponse.from_guest(guest)


@router.patch(
    "/{guest_id}/profile",
    response_model=GuestResponse,
    summary="Correct a guest's profile",
)
async def update_guest_profile(
    guest_id: uuid.UUID,
    body: GuestProfileUpdate,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    """Partially update profile fields. Only explicitly provided fields are changed."""
    guest = await guest_service.update_profile(store, guest_id, **body.model_dump(exclude_unset=True))
    return GuestResponse.from_guest(guest)


@router.post(
    "/{guest_id}/loyalty/activate",
    response_model=GuestResponse,
    summary="Enroll a guest in the loyalty program",
)
async def activate_guest_loyalty(
    guest_id: uuid.UUID,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    guest = await loyalty_service.enroll(store, guest_id)
    return GuestResponse.from_guest(guest)


@router.post(
    "/{guest_id}/loyalty/deactivate",
    response_model=GuestResponse,
    summary="Remove a guest from the loyalty program",
)
async def deactivate_guest_loyalty(
    guest_id: uuid.UUID,
    store: GuestStore = Depends(get_guest_store),
) -> GuestResponse:
    guest = await loyalty_service.unenroll(store, guest_id)
    return GuestResponse.from_guest(guest)
