from dataclasses import dataclass


@dataclass
class Passenger:
    id: int
    booking_id: int
    first_name: str
    last_name: str
    date_of_birth: str  # kept as entered by the client
    passport_number: str
