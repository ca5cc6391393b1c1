"""Guest registration and profile corrections."""

import logging
import uuid
from datetime import date, datetime, timezone

from staydesk.domain import NotEnrolled, build_active_occupancy
from staydesk.exceptions import DuplicateGuestError, ValidationError
from staydesk.models.guest import Guest
from staydesk.repositories.guest_store import GuestStore

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("first_name", "last_name", "email", "phone")


def _clean_name(value: str | None, label: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{label} is required")
    return name


async def register_guest(
    store: GuestStore,
    hotel_id: uuid.UUID,
    first_name: str,
    last_name: str,
    email: str,
    room_number: str | None,
    check_in_date: date | None,
    check_out_date: date | None,
    phone: str | None = None,
) -> Guest:
    """Register a guest for a hotel, checked in with the given stay.

    New guests start active and outside the loyalty program.

    Raises:
        ValidationError: blank name, or invalid room/dates.
        DuplicateGuestError: the hotel already has a guest with this email.
    """
    occupancy = build_active_occupancy(room_number, check_in_date, check_out_date)
    first_name = _clean_name(first_name, "First name")
    last_name = _clean_name(last_name, "Last name")
    email = email.strip().lower()

    if await store.find_by_email(hotel_id, email) is not None:
        raise DuplicateGuestError()

    now = datetime.now(timezone.utc)
    guest = Guest(
        hotel_id=hotel_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        created_at=now,
        last_login=now,
    )
    guest.occupancy = occupancy
    guest.loyalty = NotEnrolled()
    await store.add(guest)

    logger.info("Registered guest %s for hotel %s in room %s", guest.id, hotel_id, occupancy.room_number)
    return guest


async def get_guest(store: GuestStore, guest_id: uuid.UUID) -> Guest:
    return await store.get(guest_id)


async def update_profile(store: GuestStore, guest_id: uuid.UUID, **changes: str | None) -> Guest:
    """Apply an admin correction to profile fields.

    Only ``first_name``, ``last_name``, ``email`` and ``phone`` may change;
    occupancy and loyalty are never touched here.
    """
    unknown = set(changes) - set(_PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    guest = await store.get_for_update(guest_id)

    if "first_name" in changes:
        changes["first_name"] = _clean_name(changes["first_name"], "First name")
    if "last_name" in changes:
        changes["last_name"] = _clean_name(changes["last_name"], "Last name")
    if "email" in changes:
        if not changes["email"]:
            raise ValidationError("Email is required")
        changes["email"] = changes["email"].strip().lower()
        if changes["email"] != guest.email:
            existing = await store.find_by_email(guest.hotel_id, changes["email"])
            if existing is not None and existing.id != guest.id:
                raise DuplicateGuestError()

    for field, value in changes.items():
        setattr(guest, field, value)

    await store.save(guest)
    logger.info("Updated profile of guest %s: %s", guest_id, ", ".join(sorted(changes)) or "no changes")
    return guest
