from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.core.room_lock import RoomLocks
from backend.app.services.domain import DateRange, Reservation
from backend.app.services.errors import NoRoomAvailableError, NotFoundError
from backend.app.services.store import InventoryStore, ReservationStore, translate_store_errors

logger = logging.getLogger(__name__)


class ReservationLifecycle:
    """Reads, reschedules and cancels existing reservations."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession], locks: RoomLocks) -> None:
        self.sessions = sessions
        self.locks = locks

    async def get(self, reservation_id: UUID) -> Reservation:
        with translate_store_errors():
            async with self.sessions() as session:
                found = await ReservationStore(session).find_by_id(reservation_id)
        if found is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return found

    async def list_for_user(self, user_id: str) -> list[Reservation]:
        with translate_store_errors():
            async with self.sessions() as session:
                return await ReservationStore(session).find_by_user(user_id)

    async def reschedule(self, reservation_id: UUID, checkin: date, checkout: date) -> Reservation:
        """Move a reservation to new dates on the room it already holds.

        The reservation's own current booking is left out of the overlap check,
        so shifting a stay by a night never conflicts with itself.
        """
        stay = DateRange.of(checkin, checkout)
        current = await self.get(reservation_id)

        async with self.locks.hold(current.room):
            with translate_store_errors():
                async with self.sessions() as session, session.begin():
                    await InventoryStore(session).lock_room(current.room)
                    reservations = ReservationStore(session)
                    # status may have changed while we waited for the lock
                    current = await reservations.find_by_id(reservation_id)
                    if current is None or not current.is_active:
                        raise NotFoundError(f"Reservation {reservation_id} not found")
                    clashes = await reservations.find_overlapping(current.room, stay, exclude_id=current.id)
                    if clashes:
                        raise NoRoomAvailableError(
                            f"Room {current.room} is taken between {checkin.isoformat()} "
                            f"and {checkout.isoformat()}"
                        )
                    updated = await reservations.update_dates(current.id, stay)

        logger.info("Reservation %s rescheduled to %s..%s", reservation_id, checkin, checkout)
        return updated

    async def cancel(self, reservation_id: UUID) -> Reservation:
        with translate_store_errors():
            async with self.sessions() as session, session.begin():
                reservations = ReservationStore(session)
                current = await reservations.find_by_id(reservation_id)
                if current is None:
                    raise NotFoundError(f"Reservation {reservation_id} not found")
                if not current.is_active:
                    return current
                cancelled = await reservations.mark_cancelled(reservation_id)

        logger.info("Reservation %s cancelled, room %s released", reservation_id, cancelled.room)
        return cancelled
