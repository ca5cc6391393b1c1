"""Guest record store: all database access for the guest aggregate.

The lifecycle and loyalty engines only talk to ``GuestStore``; SQLAlchemy
errors are translated here into the errors of ``staydesk.exceptions``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from staydesk.domain import OccupancyStatus
from staydesk.exceptions import (
    ConcurrentModificationError,
    DuplicateGuestError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from staydesk.models.guest import Guest

logger = logging.getLogger(__name__)

_STORE_DOWN_ERRORS = (OperationalError, InterfaceError, OSError)

# PostgreSQL reports the constraint name, SQLite only the columns.
_DUPLICATE_EMAIL_MARKERS = ("uq_guests_hotel_email", "guests.hotel_id, guests.email")
_STAY_SEQUENCE_MARKERS = ("uq_stay_records_guest_sequence", "stay_records.guest_id, stay_records.sequence")


def _translate_integrity_error(exc: IntegrityError) -> Exception:
    detail = str(exc.orig)
    if any(marker in detail for marker in _DUPLICATE_EMAIL_MARKERS):
        return DuplicateGuestError()
    if any(marker in detail for marker in _STAY_SEQUENCE_MARKERS):
        # Another session archived a stay for this guest first.
        return ConcurrentModificationError()
    return ValidationError("Guest record violates a store constraint")


@dataclass(frozen=True)
class GuestFilter:
    """Directory filter. ``None`` fields do not filter."""

    text: str | None = None
    status: OccupancyStatus | None = None
    hotel_id: uuid.UUID | None = None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filter(query: Select, guest_filter: GuestFilter) -> Select:
    if guest_filter.hotel_id is not None:
        query = query.where(Guest.hotel_id == guest_filter.hotel_id)

    if guest_filter.status is not None:
        query = query.where(Guest.is_active == (guest_filter.status is OccupancyStatus.ACTIVE))

    text = (guest_filter.text or "").strip()
    if text:
        pattern = f"%{_escape_like(text)}%"
        full_name = Guest.first_name + " " + Guest.last_name
        query = query.where(
            or_(
                Guest.first_name.ilike(pattern, escape="\\"),
                Guest.last_name.ilike(pattern, escape="\\"),
                full_name.ilike(pattern, escape="\\"),
                Guest.email.ilike(pattern, escape="\\"),
            )
        )
    return query


class GuestStore:
    """Repository over the ``guests`` / ``stay_records`` tables for one session."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @property
    def session(self) -> AsyncSession:
        return self._db

    async def get(self, guest_id: uuid.UUID) -> Guest:
        """Return the guest or raise ``NotFoundError``."""
        guest = await self._scalar(select(Guest).where(Guest.id == guest_id))
        if guest is None:
            raise NotFoundError()
        return guest

    async def get_for_update(self, guest_id: uuid.UUID) -> Guest:
        """Load the guest for a read-modify-write.

        Takes a row lock where the database supports it and always refreshes
        the identity-mapped instance, so the version used by the optimistic
        check is the one currently stored.
        """
        query = (
            select(Guest)
            .where(Guest.id == guest_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        guest = await self._scalar(query)
        if guest is None:
            raise NotFoundError()
        return guest

    async def find_by_email(self, hotel_id: uuid.UUID, email: str) -> Guest | None:
        return await self._scalar(
            select(Guest).where(Guest.hotel_id == hotel_id, Guest.email == email.lower())
        )

    async def add(self, guest: Guest) -> Guest:
        self._db.add(guest)
        return await self.save(guest)

    async def save(self, guest: Guest) -> Guest:
        """Flush pending changes of the guest aggregate as one unit.

        Returns the authoritative post-write record.
        """
        # Read before flushing; a failed flush expires the instance.
        guest_id = guest.id
        try:
            await self._db.flush()
            await self._db.refresh(guest)
        except StaleDataError:
            logger.info("Version conflict while saving guest %s", guest_id)
            raise ConcurrentModificationError() from None
        except IntegrityError as exc:
            logger.info("Constraint violation while saving guest %s: %s", guest_id, exc.orig)
            raise _translate_integrity_error(exc) from exc
        except _STORE_DOWN_ERRORS as exc:
            logger.warning("Guest store unavailable while saving guest %s: %s", guest_id, exc)
            raise StoreUnavailableError() from exc
        return guest

    async def search(
        self,
        guest_filter: GuestFilter,
        offset: int,
        limit: int,
        newest_first: bool = False,
    ) -> tuple[Sequence[Guest], int]:
        """Return one page of matching guests and the total match count."""
        count_query = _apply_filter(select(func.count()).select_from(Guest), guest_filter)
        if newest_first:
            ordering = (Guest.created_at.desc(), Guest.id.desc())
        else:
            ordering = (Guest.created_at.asc(), Guest.id.asc())
        items_query = (
            _apply_filter(select(Guest), guest_filter)
            .order_by(*ordering)
            .offset(offset)
            .limit(limit)
        )
        try:
            total = (await self._db.execute(count_query)).scalar_one()
            items = (await self._db.execute(items_query)).scalars().all()
        except _STORE_DOWN_ERRORS as exc:
            logger.warning("Guest store unavailable during search: %s", exc)
            raise StoreUnavailableError() from exc
        return items, total

    async def _scalar(self, query: Select) -> Guest | None:
        try:
            result = await self._db.execute(query)
        except _STORE_DOWN_ERRORS as exc:
            logger.warning("Guest store unavailable: %s", exc)
            raise StoreUnavailableError() from exc
        return result.scalar_one_or_none()
