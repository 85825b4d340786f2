from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from uuid import UUID

from sqlalchemy import ColumnElement, and_, func, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.tables import reservation, room, room_type
from backend.app.services.domain import (
    STATUS_ACTIVE,
    STATUS_CANCELLED,
    DateRange,
    Reservation,
    Room,
    RoomType,
    UserRef,
)
from backend.app.services.errors import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)


def overlaps_clause(checkin: date, checkout: date) -> ColumnElement[bool]:
    """Active reservations sharing at least one night with ``[checkin, checkout)``."""
    return and_(
        reservation.c.status == STATUS_ACTIVE,
        reservation.c.checkin_date < checkout,
        reservation.c.checkout_date > checkin,
    )


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Map driver failures onto the engine's error kinds."""
    try:
        yield
    except IntegrityError as exc:
        logger.info("Store rejected write: %s", exc.orig)
        raise ConflictError() from exc
    except DBAPIError as exc:
        logger.error("Store unavailable: %s", exc.orig)
        raise StoreUnavailableError() from exc
    except (OSError, asyncio.TimeoutError) as exc:
        # the driver raises these unwrapped when the initial connect fails
        logger.error("Store unreachable: %r", exc)
        raise StoreUnavailableError() from exc


def room_type_from_row(row) -> RoomType:
    return RoomType(
        id=row.type_id,
        name=row.type_name,
        guest_capacity=row.guest_capacity,
        price=row.price,
    )


def room_from_row(row) -> Room:
    return Room(number=row.number, type=room_type_from_row(row))


def _reservation_from_row(row) -> Reservation:
    return Reservation(
        id=row.id,
        room=row.room,
        checkin_date=row.checkin_date,
        checkout_date=row.checkout_date,
        user=UserRef(
            id=row.user_id,
            name=row.user_name,
            email=row.user_email,
            contact_number=row.user_contact_number,
        ),
        status=row.status,
    )


_room_type_columns = (
    room_type.c.id.label("type_id"),
    room_type.c.name.label("type_name"),
    room_type.c.guest_capacity,
    room_type.c.price,
)


def room_type_select():
    return select(*_room_type_columns)


def room_select():
    return select(room.c.number, *_room_type_columns).join_from(
        room, room_type, room.c.type_id == room_type.c.id
    )


class InventoryStore:
    """Read access to rooms and room types."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_room_types(self) -> list[RoomType]:
        result = await self.session.execute(room_type_select().order_by(room_type.c.id))
        return [room_type_from_row(row) for row in result]

    async def list_rooms(self) -> list[Room]:
        result = await self.session.execute(room_select().order_by(room.c.number))
        return [room_from_row(row) for row in result]

    async def find_room_type(self, name: str) -> RoomType | None:
        result = await self.session.execute(
            room_type_select().where(room_type.c.name == name)
        )
        row = result.one_or_none()
        return room_type_from_row(row) if row is not None else None

    async def lock_room(self, number: int) -> None:
        """Take the row lock on ``room`` for the rest of the transaction."""
        await self.session.execute(
            select(room.c.number).where(room.c.number == number).with_for_update()
        )


class ReservationStore:
    """The reservation ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_overlapping(
        self,
        room_number: int,
        stay: DateRange,
        exclude_id: UUID | None = None,
    ) -> list[Reservation]:
        query = select(reservation).where(
            reservation.c.room == room_number,
            overlaps_clause(stay.checkin, stay.checkout),
        )
        if exclude_id is not None:
            query = query.where(reservation.c.id != exclude_id)
        result = await self.session.execute(query.order_by(reservation.c.checkin_date))
        return [_reservation_from_row(row) for row in result]

    async def insert(self, new: Reservation) -> Reservation:
        await self.session.execute(
            reservation.insert().values(
                id=new.id,
                room=new.room,
                checkin_date=new.checkin_date,
                checkout_date=new.checkout_date,
                user_id=new.user.id,
                user_name=new.user.name,
                user_email=new.user.email,
                user_contact_number=new.user.contact_number,
                status=new.status,
            )
        )
        return new

    async def update_dates(self, reservation_id: UUID, stay: DateRange) -> Reservation | None:
        await self.session.execute(
            update(reservation)
            .where(reservation.c.id == reservation_id)
            .values(
                checkin_date=stay.checkin,
                checkout_date=stay.checkout,
                updated_at=func.now(),
            )
        )
        return await self.find_by_id(reservation_id)

    async def mark_cancelled(self, reservation_id: UUID) -> Reservation | None:
        await self.session.execute(
            update(reservation)
            .where(reservation.c.id == reservation_id)
            .values(status=STATUS_CANCELLED, updated_at=func.now())
        )
        return await self.find_by_id(reservation_id)

    async def find_by_id(self, reservation_id: UUID) -> Reservation | None:
        result = await self.session.execute(
            select(reservation).where(reservation.c.id == reservation_id)
        )
        row = result.one_or_none()
        return _reservation_from_row(row) if row is not None else None

    async def find_by_user(self, user_id: str) -> list[Reservation]:
        result = await self.session.execute(
            select(reservation)
            .where(reservation.c.user_id == user_id)
            .order_by(reservation.c.checkin_date, reservation.c.id)
        )
        return [_reservation_from_row(row) for row in result]
