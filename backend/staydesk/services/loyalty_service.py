"""Loyalty enrollment: independent of the guest's occupancy."""

import logging
import uuid
from datetime import datetime, timezone

from staydesk.domain import Enrolled, LoyaltyTier, NotEnrolled
from staydesk.exceptions import InvalidStateError
from staydesk.models.guest import Guest
from staydesk.repositories.guest_store import GuestStore

logger = logging.getLogger(__name__)


async def enroll(store: GuestStore, guest_id: uuid.UUID) -> Guest:
    """Enroll the guest at Bronze with an empty balance."""
    guest = await store.get_for_update(guest_id)
    if isinstance(guest.loyalty, Enrolled):
        logger.info("Rejected loyalty enroll for guest %s: already enrolled", guest_id)
        raise InvalidStateError("Guest is already enrolled in the loyalty program")

    guest.loyalty = Enrolled(
        tier=LoyaltyTier.BRONZE,
        points=0,
        available_points=0,
        enrolled_at=datetime.now(timezone.utc),
    )
    await store.save(guest)

    logger.info("Enrolled guest %s in loyalty program at %s", guest_id, LoyaltyTier.BRONZE.value)
    return guest


async def unenroll(store: GuestStore, guest_id: uuid.UUID) -> Guest:
    """Remove the guest from the program. Tier and points are discarded."""
    guest = await store.get_for_update(guest_id)
    loyalty = guest.loyalty
    if not isinstance(loyalty, Enrolled):
        logger.info("Rejected loyalty unenroll for guest %s: not enrolled", guest_id)
        raise InvalidStateError("Guest is not enrolled in the loyalty program")

    guest.loyalty = NotEnrolled()
    await store.save(guest)

    logger.info(
        "Unenrolled guest %s from loyalty program (discarded %s tier, %d points)",
        guest_id,
        loyalty.tier.value,
        loyalty.points,
    )
    return guest
