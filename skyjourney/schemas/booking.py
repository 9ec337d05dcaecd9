from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from skyjourney.models.booking import BookingStatus
from skyjourney.schemas.common import CamelModel


class PassengerIn(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    date_of_birth: str = Field(min_length=1)
    passport_number: str = Field(min_length=1)


class PassengerOut(CamelModel):
    id: int
    booking_id: int
    first_name: str
    last_name: str
    date_of_birth: str
    passport_number: str


class BookingCreate(CamelModel):
    flight_id: int
    seats_booked: int = Field(ge=1)
    total_price: Optional[Decimal] = Field(None, ge=0)  # computed from the flight price when omitted
    contact_email: str = Field(min_length=1)  # plain str to allow .local and other dev domains
    contact_phone: str = Field(min_length=1)
    passengers: List[PassengerIn] = []


class BookingOut(CamelModel):
    id: int
    user_id: int
    flight_id: int
    booking_reference: str
    status: BookingStatus
    total_price: Decimal
    seats_booked: int
    contact_email: str
    contact_phone: str
    created_at: datetime


class BookingDetailOut(CamelModel):
    booking: BookingOut
    passengers: List[PassengerOut]
