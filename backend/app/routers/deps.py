from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.core import redis_client as redis_module
from backend.app.core.room_lock import RoomLocks
from backend.app.db.session import get_sessionmaker
from backend.app.services.availability import AvailabilityEngine
from backend.app.services.booking import BookingOrchestrator
from backend.app.services.errors import (
    BusyError,
    ConflictError,
    InvalidCapacityError,
    InvalidRangeError,
    NoRoomAvailableError,
    NotFoundError,
    ReservationError,
    StoreUnavailableError,
    UnknownRoomTypeError,
)
from backend.app.services.lifecycle import ReservationLifecycle


def get_room_locks() -> RoomLocks:
    if redis_module.redis_client is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Redis unavailable")
    return RoomLocks(redis_module.redis_client)


def get_availability(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
) -> AvailabilityEngine:
    return AvailabilityEngine(sessions)


def get_orchestrator(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
    locks: RoomLocks = Depends(get_room_locks),
) -> BookingOrchestrator:
    return BookingOrchestrator(sessions, locks)


def get_lifecycle(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
    locks: RoomLocks = Depends(get_room_locks),
) -> ReservationLifecycle:
    return ReservationLifecycle(sessions, locks)


# Order matters: ConflictError is a NoRoomAvailableError.
_STATUS_BY_ERROR: tuple[tuple[type[ReservationError], int], ...] = (
    (InvalidRangeError, status.HTTP_400_BAD_REQUEST),
    (InvalidCapacityError, status.HTTP_400_BAD_REQUEST),
    (UnknownRoomTypeError, status.HTTP_404_NOT_FOUND),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (BusyError, status.HTTP_409_CONFLICT),
    (NoRoomAvailableError, status.HTTP_404_NOT_FOUND),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def http_error(exc: ReservationError) -> HTTPException:
    """Translate a core error into the HTTP response the client sees."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code, detail={"code": exc.code, "message": exc.message})
