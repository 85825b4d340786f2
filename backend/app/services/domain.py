from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backend.app.services.errors import InvalidCapacityError, InvalidRangeError

STATUS_ACTIVE = "active"
STATUS_CANCELLED = "cancelled"


class DateRange(BaseModel):
    """Half-open stay interval: the guest leaves on ``checkout`` morning."""

    model_config = ConfigDict(frozen=True)

    checkin: date
    checkout: date

    @classmethod
    def of(cls, checkin: date, checkout: date) -> DateRange:
        if checkin >= checkout:
            raise InvalidRangeError(
                f"Check-in {checkin.isoformat()} must be before check-out {checkout.isoformat()}"
            )
        return cls(checkin=checkin, checkout=checkout)

    def overlaps(self, other: DateRange) -> bool:
        # touching boundaries (checkout == other.checkin) are a same-day turnover
        return self.checkin < other.checkout and other.checkin < self.checkout


def require_capacity(guest_capacity: int) -> int:
    if guest_capacity <= 0:
        raise InvalidCapacityError(f"Guest capacity must be positive, got {guest_capacity}")
    return guest_capacity


class RoomType(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    guest_capacity: int = Field(gt=0)
    price: Decimal = Field(gt=0)


class Room(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    type: RoomType


class UserRef(BaseModel):
    """Copy of the requesting user taken at booking time."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    contact_number: str


class Reservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    room: int
    checkin_date: date
    checkout_date: date
    user: UserRef
    status: str = STATUS_ACTIVE

    @property
    def stay(self) -> DateRange:
        return DateRange(checkin=self.checkin_date, checkout=self.checkout_date)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
