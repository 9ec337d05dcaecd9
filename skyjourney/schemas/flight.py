from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from skyjourney.models.flight import DEFAULT_BAGGAGE_ALLOWANCE, DEFAULT_CLASS_TYPE
from skyjourney.schemas.common import CamelModel


class FlightIn(CamelModel):
    flight_number: str = Field(min_length=1)
    airline: str = Field(min_length=1)
    origin: str = Field(alias="from", min_length=1)
    destination: str = Field(alias="to", min_length=1)
    departure_date: datetime
    departure_time: str
    arrival_date: datetime
    arrival_time: str
    duration: str
    price: Decimal = Field(ge=0)
    total_seats: int = Field(gt=0)
    available_seats: int = Field(ge=0)
    aircraft: str = ""
    class_type: str = DEFAULT_CLASS_TYPE
    baggage_allowance: str = DEFAULT_BAGGAGE_ALLOWANCE

    @model_validator(mode="after")
    def seats_within_capacity(self):
        if self.available_seats > self.total_seats:
            raise ValueError("availableSeats cannot exceed totalSeats")
        return self


class FlightPatch(CamelModel):
    """Partial update; only the fields sent are applied."""
    flight_number: Optional[str] = Field(None, min_length=1)
    airline: Optional[str] = Field(None, min_length=1)
    origin: Optional[str] = Field(None, alias="from", min_length=1)
    destination: Optional[str] = Field(None, alias="to", min_length=1)
    departure_date: Optional[datetime] = None
    departure_time: Optional[str] = None
    arrival_date: Optional[datetime] = None
    arrival_time: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    total_seats: Optional[int] = Field(None, gt=0)
    available_seats: Optional[int] = Field(None, ge=0)
    aircraft: Optional[str] = None
    class_type: Optional[str] = None
    baggage_allowance: Optional[str] = None


class FlightOut(FlightIn):
    id: int


class FlightSearch(CamelModel):
    origin: str = Field(alias="from", min_length=2)
    destination: str = Field(alias="to", min_length=2)
    departure_date: datetime
    passengers: int = Field(1, ge=1, le=10)
