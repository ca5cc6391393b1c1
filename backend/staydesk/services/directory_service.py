"""Guest directory: search, filter and paginate guests for the admin UI."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from staydesk.config import settings
from staydesk.models.guest import Guest
from staydesk.repositories.guest_store import GuestFilter, GuestStore

# Largest OFFSET a database BIGINT can hold.
_MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class GuestPage:
    items: Sequence[Guest]
    total: int
    page: int
    page_size: int
    total_pages: int


def clamp_pagination(page: int | None, page_size: int | None) -> tuple[int, int]:
    """Coerce bad pagination input instead of rejecting it.

    Page falls back to 1 and is capped so its offset stays a valid BIGINT;
    page size falls back to the configured default when missing and is
    clamped to ``[1, max_page_size]`` otherwise.
    """
    if page_size is None:
        page_size = settings.default_page_size
    page_size = min(max(page_size, 1), settings.max_page_size)
    page = page if page is not None and page >= 1 else 1
    page = min(page, _MAX_OFFSET // page_size + 1)
    return page, page_size


async def search(
    store: GuestStore,
    guest_filter: GuestFilter,
    page: int | None = 1,
    page_size: int | None = None,
    newest_first: bool = False,
) -> GuestPage:
    """Return one page of guests matching ``guest_filter``.

    Text matches first name, last name, full name or email, case-insensitive
    substring. Ordering is registration order (oldest first) unless
    ``newest_first`` is set.
    """
    page, page_size = clamp_pagination(page, page_size)
    items, total = await store.search(
        guest_filter,
        offset=(page - 1) * page_size,
        limit=page_size,
        newest_first=newest_first,
    )
    return GuestPage(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )
