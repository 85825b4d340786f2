from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from backend.app.routers.deps import get_availability, http_error
from backend.app.routers.schemas import RoomOut, RoomTypeOut
from backend.app.services.availability import AvailabilityEngine
from backend.app.services.errors import ReservationError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/rooms", response_model=list[RoomOut])
async def list_rooms(engine: AvailabilityEngine = Depends(get_availability)) -> list[RoomOut]:
    try:
        rooms = await engine.list_rooms()
    except ReservationError as exc:
        raise http_error(exc) from exc
    return [RoomOut.model_validate(r) for r in rooms]


@router.get("/reservations/roomTypes", response_model=list[RoomTypeOut])
async def available_room_types(
    checkin_date: date = Query(alias="checkinDate"),
    checkout_date: date = Query(alias="checkoutDate"),
    guest_capacity: int = Query(alias="guestCapacity"),
    engine: AvailabilityEngine = Depends(get_availability),
) -> list[RoomTypeOut]:
    logger.info(
        "Request received by GET /reservations/roomTypes %s..%s capacity=%s",
        checkin_date, checkout_date, guest_capacity,
    )
    try:
        room_types = await engine.room_types_available(checkin_date, checkout_date, guest_capacity)
    except ReservationError as exc:
        raise http_error(exc) from exc
    return [RoomTypeOut.model_validate(rt) for rt in room_types]


@router.get("/reservations/rooms", response_model=list[RoomOut])
async def available_rooms(
    checkin_date: date = Query(alias="checkinDate"),
    checkout_date: date = Query(alias="checkoutDate"),
    room_type: str = Query(alias="roomType", min_length=1),
    engine: AvailabilityEngine = Depends(get_availability),
) -> list[RoomOut]:
    logger.info(
        "Request received by GET /reservations/rooms %s..%s type=%s",
        checkin_date, checkout_date, room_type,
    )
    try:
        rooms = await engine.rooms_available(checkin_date, checkout_date, room_type)
    except ReservationError as exc:
        raise http_error(exc) from exc
    return [RoomOut.model_validate(r) for r in rooms]
