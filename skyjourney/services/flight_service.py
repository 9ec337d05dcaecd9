import dataclasses
from datetime import date, datetime, timezone
from typing import Iterator

from skyjourney.core.errors import NotFound, ValidationError
from skyjourney.core.logging import get_logger
from skyjourney.db.store import Storage
from skyjourney.models.booking import BookingStatus
from skyjourney.models.flight import Flight

logger = get_logger(__name__)


def to_utc_date(value: datetime | date) -> date:
    """Calendar date of a timestamp in UTC; naive values are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def _seats_held(store: Storage, flight_id: int) -> int:
    return sum(
        b.seats_booked
        for b in store.list_bookings()
        if b.flight_id == flight_id and b.status == BookingStatus.CONFIRMED
    )


def _check_seat_bounds(flight: Flight, held: int = 0):
    """Seats held by confirmed bookings must still fit next to the available ones."""
    if held > flight.total_seats:
        raise ValidationError(
            "Invalid flight data",
            errors=[{
                "loc": ["body", "totalSeats"],
                "msg": f"totalSeats cannot drop below the {held} seats held by confirmed bookings",
                "type": "value_error",
            }],
        )
    if flight.available_seats < 0 or flight.available_seats > flight.total_seats - held:
        raise ValidationError(
            "Invalid flight data",
            errors=[{
                "loc": ["body", "availableSeats"],
                "msg": "availableSeats must be between 0 and totalSeats minus seats already booked",
                "type": "value_error",
            }],
        )


def list_flights(store: Storage) -> list[Flight]:
    return sorted(store.list_flights(), key=lambda f: f.id)


def get_flight(store: Storage, flight_id: int) -> Flight:
    flight = store.get_flight(flight_id)
    if flight is None:
        raise NotFound("Flight not found")
    return flight


def search_flights(store: Storage, origin: str, destination: str, departure_date: datetime | date) -> Iterator[Flight]:
    origin_l = origin.lower()
    destination_l = destination.lower()
    wanted = to_utc_date(departure_date)
    for flight in store.iter_flights():
        if (
            origin_l in flight.origin.lower()
            and destination_l in flight.destination.lower()
            and to_utc_date(flight.departure_date) == wanted
        ):
            yield flight


def create_flight(store: Storage, fields: dict) -> Flight:
    flight = store.create_flight(**fields)
    logger.info("flight %s (%s) created", flight.id, flight.flight_number)
    return flight


def update_flight(store: Storage, flight_id: int, changes: dict) -> Flight:
    with store.transaction():
        flight = get_flight(store, flight_id)
        _check_seat_bounds(dataclasses.replace(flight, **changes), _seats_held(store, flight_id))
        flight = store.update_flight(flight_id, changes)
    logger.info("flight %s updated: %s", flight_id, sorted(changes))
    return flight


def delete_flight(store: Storage, flight_id: int):
    # bookings that reference the flight are left in place
    if not store.delete_flight(flight_id):
        raise NotFound("Flight not found")
    logger.info("flight %s deleted", flight_id)
