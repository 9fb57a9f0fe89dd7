# backend/booking_engine/errors.py
"""
Domain errors raised by the engine.

Every error carries an HTTP status code and a machine-readable code so the
API layer can render it without knowing the individual classes.
"""

from typing import Optional


class BookingEngineError(Exception):
    status_code: int = 400
    code: str = "booking_engine_error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class ValidationError(BookingEngineError):
    """Malformed input."""

    status_code = 422
    code = "validation_error"


class BlockConflictError(ValidationError):
    """Block overlaps an active booking."""

    status_code = 409
    code = "block_conflict"


class NotFoundError(BookingEngineError):
    """Not found."""

    status_code = 404
    code = "not_found"


class PermissionDeniedError(BookingEngineError):
    """Actor is not allowed to perform this action."""

    status_code = 403
    code = "permission_denied"


class SlotUnavailableError(BookingEngineError):
    """The requested slot is not available."""

    status_code = 409
    code = "slot_unavailable"

    def __init__(self, reason: Optional[str] = None, detail: Optional[str] = None):
        self.reason = reason
        if detail is None and reason is not None:
            detail = f"The requested slot is not available ({reason})"
        super().__init__(detail)


class StaleTransitionError(BookingEngineError):
    """Booking is already in a state incompatible with the transition."""

    status_code = 409
    code = "stale_transition"

    def __init__(self, booking_id: str, current: str, requested: str):
        self.booking_id = booking_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Booking {booking_id} is {current}, cannot move to {requested}"
        )
