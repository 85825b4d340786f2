import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from backend.app.routers.deps import get_lifecycle, get_orchestrator, http_error
from backend.app.routers.schemas import NewReservationIn, ReservationOut, UpdateReservationIn
from backend.app.services.booking import BookingOrchestrator
from backend.app.services.domain import UserRef
from backend.app.services.errors import ReservationError
from backend.app.services.lifecycle import ReservationLifecycle

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reservations", response_model=ReservationOut, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: NewReservationIn,
    orchestrator: BookingOrchestrator = Depends(get_orchestrator),
) -> ReservationOut:
    logger.info(
        "Request received by POST /reservations type=%s %s..%s user=%s",
        payload.room_type, payload.checkin_date, payload.checkout_date, payload.user.id,
    )
    try:
        reservation = await orchestrator.book(
            payload.checkin_date,
            payload.checkout_date,
            payload.room_type,
            UserRef(**payload.user.model_dump()),
        )
    except ReservationError as exc:
        raise http_error(exc) from exc
    return ReservationOut.model_validate(reservation)


@router.get("/reservations/users/{user_id}", response_model=list[ReservationOut])
async def user_reservations(
    user_id: str,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
) -> list[ReservationOut]:
    logger.info("Request received by GET /reservations/users/%s", user_id)
    try:
        reservations = await lifecycle.list_for_user(user_id)
    except ReservationError as exc:
        raise http_error(exc) from exc
    return [ReservationOut.model_validate(r) for r in reservations]


@router.get("/reservations/{reservation_id}", response_model=ReservationOut)
async def get_reservation(
    reservation_id: UUID,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
) -> ReservationOut:
    try:
        reservation = await lifecycle.get(reservation_id)
    except ReservationError as exc:
        raise http_error(exc) from exc
    return ReservationOut.model_validate(reservation)


@router.put("/reservations/{reservation_id}", response_model=ReservationOut)
async def reschedule_reservation(
    reservation_id: UUID,
    payload: UpdateReservationIn,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
) -> ReservationOut:
    logger.info(
        "Request received by PUT /reservations/%s %s..%s",
        reservation_id, payload.checkin_date, payload.checkout_date,
    )
    try:
        reservation = await lifecycle.reschedule(reservation_id, payload.checkin_date, payload.checkout_date)
    except ReservationError as exc:
        raise http_error(exc) from exc
    return ReservationOut.model_validate(reservation)


@router.delete("/reservations/{reservation_id}", response_model=ReservationOut)
async def cancel_reservation(
    reservation_id: UUID,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
) -> ReservationOut:
    logger.info("Request received by DELETE /reservations/%s", reservation_id)
    try:
        reservation = await lifecycle.cancel(reservation_id)
    except ReservationError as exc:
        raise http_error(exc) from exc
    return ReservationOut.model_validate(reservation)
