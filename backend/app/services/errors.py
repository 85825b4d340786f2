class ReservationError(Exception):
    """Base class for every failure the booking engine reports."""

    code = "reservation_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class InvalidRangeError(ReservationError):
    """Check-in date must be before check-out date."""

    code = "invalid_range"


class InvalidCapacityError(ReservationError):
    """Guest capacity must be a positive integer."""

    code = "invalid_capacity"


class UnknownRoomTypeError(ReservationError):
    """Room type does not exist."""

    code = "unknown_room_type"


class NotFoundError(ReservationError):
    """Reservation not found."""

    code = "not_found"


class NoRoomAvailableError(ReservationError):
    """No rooms available for the given dates and type."""

    code = "no_room_available"


class ConflictError(NoRoomAvailableError):
    """Room was taken by a concurrent booking."""

    code = "conflict"


class BusyError(ReservationError):
    """Room is being booked by another request; retry shortly."""

    code = "busy"


class StoreUnavailableError(ReservationError):
    """Backing store unavailable."""

    code = "store_unavailable"
