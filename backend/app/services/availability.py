from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import exists
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.db.tables import reservation, room, room_type
from backend.app.services.domain import DateRange, Room, RoomType, require_capacity
from backend.app.services.store import (
    InventoryStore,
    room_from_row,
    room_type_from_row,
    overlaps_clause,
    room_select,
    room_type_select,
    translate_store_errors,
)

logger = logging.getLogger(__name__)


def _room_is_free(stay: DateRange):
    return ~exists().where(
        reservation.c.room == room.c.number,
        overlaps_clause(stay.checkin, stay.checkout),
    )


async def free_rooms(session: AsyncSession, stay: DateRange, room_type_name: str) -> list[Room]:
    """Rooms of ``room_type_name`` with no active reservation overlapping ``stay``."""
    result = await session.execute(
        room_select()
        .where(room_type.c.name == room_type_name, _room_is_free(stay))
        .order_by(room.c.number)
    )
    return [room_from_row(row) for row in result]


async def free_room_types(session: AsyncSession, stay: DateRange, min_capacity: int) -> list[RoomType]:
    has_free_room = exists().where(room.c.type_id == room_type.c.id, _room_is_free(stay))
    result = await session.execute(
        room_type_select()
        .where(room_type.c.guest_capacity >= min_capacity, has_free_room)
        .order_by(room_type.c.id)
    )
    return [room_type_from_row(row) for row in result]


class AvailabilityEngine:
    """Read-only availability queries over committed reservations.

    Nothing here takes a lock, so a room reported free may be gone by the time
    the caller acts on it; ``BookingOrchestrator`` re-checks under the room's
    write scope.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self.sessions = sessions

    async def room_types_available(
        self, checkin: date, checkout: date, min_capacity: int
    ) -> list[RoomType]:
        stay = DateRange.of(checkin, checkout)
        require_capacity(min_capacity)
        with translate_store_errors():
            async with self.sessions() as session:
                room_types = await free_room_types(session, stay, min_capacity)
        logger.debug(
            "%d room types free for %s..%s (capacity >= %d)",
            len(room_types), checkin, checkout, min_capacity,
        )
        return room_types

    async def rooms_available(self, checkin: date, checkout: date, room_type_name: str) -> list[Room]:
        stay = DateRange.of(checkin, checkout)
        with translate_store_errors():
            async with self.sessions() as session:
                return await free_rooms(session, stay, room_type_name)

    async def list_rooms(self) -> list[Room]:
        with translate_store_errors():
            async with self.sessions() as session:
                return await InventoryStore(session).list_rooms()

    async def list_room_types(self) -> list[RoomType]:
        with translate_store_errors():
            async with self.sessions() as session:
                return await InventoryStore(session).list_room_types()
