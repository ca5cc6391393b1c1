"""Occupancy lifecycle: check a guest in (activate), out (deactivate), or edit the stay.

Deactivation is destructive: the live stay is archived to ``stay_history``
before room and dates are cleared, and both happen in a single flush.
Activation is constructive: it always takes a fresh room and date range and
never looks at the history.
"""

import logging
import uuid
from datetime import date

from staydesk.domain import ActiveOccupancy, InactiveOccupancy, build_active_occupancy
from staydesk.exceptions import InvalidStateError
from staydesk.models.guest import Guest
from staydesk.models.stay_record import StayRecord
from staydesk.repositories.guest_store import GuestStore

logger = logging.getLogger(__name__)


async def deactivate(store: GuestStore, guest_id: uuid.UUID) -> Guest:
    """Check the guest out, archiving the current stay.

    Not idempotent: a second call raises ``InvalidStateError`` and leaves the
    stay history untouched.
    """
    guest = await store.get_for_update(guest_id)
    occupancy = guest.occupancy
    if not isinstance(occupancy, ActiveOccupancy):
        logger.info("Rejected deactivate for guest %s: already inactive", guest_id)
        raise InvalidStateError("Guest is already inactive")

    guest.stay_history.append(
        StayRecord(
            sequence=len(guest.stay_history) + 1,
            room_number=occupancy.room_number,
            check_in_date=occupancy.check_in_date,
            check_out_date=occupancy.check_out_date,
            number_of_nights=occupancy.number_of_nights,
        )
    )
    guest.occupancy = InactiveOccupancy()
    await store.save(guest)

    logger.info(
        "Deactivated guest %s: archived room %s (%d nights), %d stays on record",
        guest_id,
        occupancy.room_number,
        occupancy.number_of_nights,
        len(guest.stay_history),
    )
    return guest


async def activate(
    store: GuestStore,
    guest_id: uuid.UUID,
    room_number: str | None,
    check_in_date: date | None,
    check_out_date: date | None,
) -> Guest:
    """Check an inactive guest in with a new stay.

    Raises:
        ValidationError: room or dates missing/blank, or check-out before check-in.
        NotFoundError: no such guest.
        InvalidStateError: the guest already has an active stay.
    """
    new_occupancy = build_active_occupancy(room_number, check_in_date, check_out_date)

    guest = await store.get_for_update(guest_id)
    if guest.is_active:
        logger.info("Rejected activate for guest %s: already active", guest_id)
        raise InvalidStateError("Guest is already active; edit the current stay instead")

    guest.occupancy = new_occupancy
    await store.save(guest)

    logger.info(
        "Activated guest %s in room %s (%s to %s)",
        guest_id,
        new_occupancy.room_number,
        new_occupancy.check_in_date,
        new_occupancy.check_out_date,
    )
    return guest


async def update_occupancy(
    store: GuestStore,
    guest_id: uuid.UUID,
    room_number: str | None = None,
    check_in_date: date | None = None,
    check_out_date: date | None = None,
) -> Guest:
    """Edit the current stay in place. ``None`` keeps the current value.

    Only legal while the guest is active; inactive guests go through
    ``activate``. Never touches the stay history.
    """
    guest = await store.get_for_update(guest_id)
    current = guest.occupancy
    if not isinstance(current, ActiveOccupancy):
        logger.info("Rejected occupancy edit for guest %s: guest is inactive", guest_id)
        raise InvalidStateError("Guest is inactive; activate with a new stay instead")

    updated = build_active_occupancy(
        current.room_number if room_number is None else room_number,
        current.check_in_date if check_in_date is None else check_in_date,
        current.check_out_date if check_out_date is None else check_out_date,
    )
    if updated == current:
        return guest

    guest.occupancy = updated
    await store.save(guest)

    logger.info(
        "Updated stay for guest %s: room %s, %s to %s",
        guest_id,
        updated.room_number,
        updated.check_in_date,
        updated.check_out_date,
    )
    return guest
