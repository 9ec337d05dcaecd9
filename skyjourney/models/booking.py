from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass
class Booking:
    id: int
    user_id: int
    flight_id: int
    booking_reference: str
    total_price: Decimal
    seats_booked: int
    contact_email: str
    contact_phone: str
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
