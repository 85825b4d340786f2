from __future__ import annotations

import logging
import time
from datetime import date
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.core.room_lock import RoomLocks
from backend.app.services.availability import AvailabilityEngine
from backend.app.services.domain import DateRange, Reservation, UserRef
from backend.app.services.errors import (
    BusyError,
    ConflictError,
    NoRoomAvailableError,
    UnknownRoomTypeError,
)
from backend.app.services.store import InventoryStore, ReservationStore, translate_store_errors

logger = logging.getLogger(__name__)


class BookingOrchestrator:
    """Turns an availability answer into a reservation without double-booking.

    Candidates come from an unlocked availability read. Each candidate is then
    claimed under its room's write scope: the Redis room lock, a transaction
    holding the room row lock, and a fresh overlap check before the insert.
    A candidate lost to a concurrent booking is skipped in favour of the next
    one; only when every candidate is lost does the caller see the failure.
    """

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        locks: RoomLocks,
        availability: AvailabilityEngine | None = None,
    ) -> None:
        self.sessions = sessions
        self.locks = locks
        self.availability = availability or AvailabilityEngine(sessions)

    async def book(self, checkin: date, checkout: date, room_type_name: str, user: UserRef) -> Reservation:
        stay = DateRange.of(checkin, checkout)

        with translate_store_errors():
            async with self.sessions() as session:
                room_type = await InventoryStore(session).find_room_type(room_type_name)
        if room_type is None:
            raise UnknownRoomTypeError(f"Room type {room_type_name!r} does not exist")

        candidates = await self.availability.rooms_available(checkin, checkout, room_type_name)
        if not candidates:
            raise NoRoomAvailableError()

        lost: ConflictError | None = None
        busy: BusyError | None = None
        # one lock wait budget for the whole call, not per candidate
        deadline = time.monotonic() + self.locks.wait_seconds
        for candidate in candidates:
            try:
                return await self._claim(candidate.number, stay, user, deadline - time.monotonic())
            except ConflictError as exc:
                logger.info("Room %s lost to a concurrent booking; trying next", candidate.number)
                lost = exc
            except BusyError as exc:
                busy = exc

        raise lost or busy

    async def _claim(self, room_number: int, stay: DateRange, user: UserRef, wait_seconds: float) -> Reservation:
        async with self.locks.hold(room_number, wait_seconds):
            with translate_store_errors():
                async with self.sessions() as session, session.begin():
                    await InventoryStore(session).lock_room(room_number)
                    reservations = ReservationStore(session)
                    if await reservations.find_overlapping(room_number, stay):
                        raise ConflictError(f"Room {room_number} was booked by a concurrent request")
                    created = await reservations.insert(
                        Reservation(
                            id=uuid4(),
                            room=room_number,
                            checkin_date=stay.checkin,
                            checkout_date=stay.checkout,
                            user=user,
                        )
                    )

        logger.info(
            "Reservation %s booked room %s for %s..%s",
            created.id, room_number, stay.checkin, stay.checkout,
        )
        return created
