"""Errors raised by the guest lifecycle and loyalty engines.

Every error carries a human-readable ``message`` and a stable ``code`` the
admin UI can switch on::

    try:
        await occupancy_service.deactivate(store, guest_id)
    except InvalidStateError as e:
        show_inline(e.message)  # "Guest is already inactive"

``NotFoundError``, ``InvalidStateError`` and ``ValidationError`` are terminal:
the caller has to change its request. ``StoreUnavailableError`` and
``ConcurrentModificationError`` may be retried (after re-reading the guest).
"""


class GuestLifecycleError(Exception):
    """Base class for all guest lifecycle errors."""

    code = "GUEST_LIFECYCLE_ERROR"
    default_message = "Guest operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(GuestLifecycleError):
    """The guest id does not resolve to a stored guest."""

    code = "GUEST_NOT_FOUND"
    default_message = "Guest not found"


class InvalidStateError(GuestLifecycleError):
    """The operation is not legal from the guest's current state."""

    code = "INVALID_STATE"
    default_message = "Operation not allowed in the guest's current state"


class ValidationError(GuestLifecycleError):
    """Malformed input: empty room number, check-out before check-in, etc."""

    code = "VALIDATION_FAILED"
    default_message = "Invalid guest data"


class DuplicateGuestError(GuestLifecycleError):
    """Another guest of the same hotel already uses this email."""

    code = "DUPLICATE_GUEST"
    default_message = "Guest with this email already exists"


class ConcurrentModificationError(GuestLifecycleError):
    """The guest changed between read and write (optimistic version check)."""

    code = "CONCURRENT_MODIFICATION"
    default_message = "Guest was modified by another session, reload and try again"


class StoreUnavailableError(GuestLifecycleError):
    """The record store could not be reached."""

    code = "STORE_UNAVAILABLE"
    default_message = "Guest store is temporarily unavailable"
