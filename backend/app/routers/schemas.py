from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    # Wire format is camelCase (checkinDate, guestCapacity, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RoomTypeOut(ApiModel):
    id: int
    name: str
    guest_capacity: int
    price: Decimal


class RoomOut(ApiModel):
    number: int
    type: RoomTypeOut


class UserPayload(ApiModel):
    id: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    contact_number: str = Field(min_length=1, max_length=255)


class NewReservationIn(ApiModel):
    room_type: str = Field(min_length=1, max_length=255)
    checkin_date: date
    checkout_date: date
    user: UserPayload


class UpdateReservationIn(ApiModel):
    checkin_date: date
    checkout_date: date


class ReservationOut(ApiModel):
    id: UUID
    room: int
    checkin_date: date
    checkout_date: date
    user: UserPayload
    status: str
