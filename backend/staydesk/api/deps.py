"""Shared API dependencies: single import point for all routers.

Re-exports the database session and builds the guest store so that router
modules can import everything they need from one place::

    from staydesk.api.deps import get_db, get_guest_store
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.database import get_db
from staydesk.repositories.guest_store import GuestStore


async def get_guest_store(db: AsyncSession = Depends(get_db)) -> GuestStore:
    """Return a ``GuestStore`` bound to the request's session."""
    return GuestStore(db)


__all__ = [
    "get_db",
    "get_guest_store",
]
