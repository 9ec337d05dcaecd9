from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

DEFAULT_CLASS_TYPE = "Economy"
DEFAULT_BAGGAGE_ALLOWANCE = "1 x 23kg Checked, 1 x 8kg Cabin"


@dataclass
class Flight:
    id: int
    flight_number: str
    airline: str
    origin: str
    destination: str
    departure_date: datetime
    departure_time: str
    arrival_date: datetime
    arrival_time: str
    duration: str
    price: Decimal
    total_seats: int
    available_seats: int
    aircraft: str = ""
    class_type: str = DEFAULT_CLASS_TYPE
    baggage_allowance: str = DEFAULT_BAGGAGE_ALLOWANCE
