"""In-memory repository for users, flights, bookings and passengers.

One ``MemStorage`` is built when the application starts and handed to request
handlers through ``get_store``. Handlers never reach for a module-level store,
so tests can supply their own instance and a transactional backend can take
its place behind the same ``Storage`` protocol.

Sync route handlers run on a thread pool, so every mutation happens under a
re-entrant lock. Callers that need several reads and writes to act as one
step (check seats, then decrement, then insert) wrap them in
``transaction()``.
"""
import itertools
import threading
from contextlib import contextmanager
from typing import Iterator, Protocol

from fastapi import Request

from skyjourney.models.booking import Booking, BookingStatus
from skyjourney.models.flight import Flight
from skyjourney.models.passenger import Passenger
from skyjourney.models.user import Role, User


class Storage(Protocol):
    def transaction(self): ...

    # users
    def get_user(self, user_id: int) -> User | None: ...
    def get_user_by_username(self, username: str) -> User | None: ...
    def create_user(self, username: str, password_hash: str, email: str, role: Role = Role.USER) -> User: ...

    # flights
    def list_flights(self) -> list[Flight]: ...
    def iter_flights(self) -> Iterator[Flight]: ...
    def get_flight(self, flight_id: int) -> Flight | None: ...
    def create_flight(self, **fields) -> Flight: ...
    def update_flight(self, flight_id: int, changes: dict) -> Flight | None: ...
    def delete_flight(self, flight_id: int) -> bool: ...
    def reserve_seats(self, flight_id: int, seats: int) -> bool: ...
    def release_seats(self, flight_id: int, seats: int) -> bool: ...

    # bookings
    def create_booking(self, **fields) -> Booking: ...
    def get_booking(self, booking_id: int) -> Booking | None: ...
    def get_booking_by_reference(self, reference: str) -> Booking | None: ...
    def list_user_bookings(self, user_id: int) -> list[Booking]: ...
    def list_bookings(self) -> list[Booking]: ...
    def update_booking_status(self, booking_id: int, status: BookingStatus) -> Booking | None: ...

    # passengers
    def add_passenger(self, booking_id: int, first_name: str, last_name: str,
                      date_of_birth: str, passport_number: str) -> Passenger: ...
    def list_booking_passengers(self, booking_id: int) -> list[Passenger]: ...

    # sessions
    def revoke_token(self, jti: str) -> None: ...
    def is_token_revoked(self, jti: str) -> bool: ...


class MemStorage:
    def __init__(self):
        self._users: dict[int, User] = {}
        self._flights: dict[int, Flight] = {}
        self._bookings: dict[int, Booking] = {}
        self._passengers: dict[int, Passenger] = {}
        self._revoked_tokens: set[str] = set()

        self._user_ids = itertools.count(1)
        self._flight_ids = itertools.count(1)
        self._booking_ids = itertools.count(1)
        self._passenger_ids = itertools.count(1)

        self._lock = threading.RLock()

    @contextmanager
    def transaction(self):
        with self._lock:
            yield self

    # --- users ---

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in list(self._users.values()) if u.username == username), None)

    def create_user(self, username: str, password_hash: str, email: str, role: Role = Role.USER) -> User:
        with self._lock:
            user = User(
                id=next(self._user_ids),
                username=username,
                password_hash=password_hash,
                email=email,
                role=role,
            )
            self._users[user.id] = user
            return user

    # --- flights ---

    def list_flights(self) -> list[Flight]:
        return list(self._flights.values())

    def iter_flights(self) -> Iterator[Flight]:
        # snapshot taken when iteration starts; each call re-reads current state
        yield from list(self._flights.values())

    def get_flight(self, flight_id: int) -> Flight | None:
        return self._flights.get(flight_id)

    def create_flight(self, **fields) -> Flight:
        with self._lock:
            flight = Flight(id=next(self._flight_ids), **fields)
            self._flights[flight.id] = flight
            return flight

    def update_flight(self, flight_id: int, changes: dict) -> Flight | None:
        with self._lock:
            flight = self._flights.get(flight_id)
            if flight is None:
                return None
            for key, value in changes.items():
                setattr(flight, key, value)
            return flight

    def delete_flight(self, flight_id: int) -> bool:
        with self._lock:
            return self._flights.pop(flight_id, None) is not None

    def reserve_seats(self, flight_id: int, seats: int) -> bool:
        """Decrement available seats only if enough remain."""
        with self._lock:
            flight = self._flights.get(flight_id)
            if flight is None or flight.available_seats < seats:
                return False
            flight.available_seats -= seats
            return True

    def release_seats(self, flight_id: int, seats: int) -> bool:
        with self._lock:
            flight = self._flights.get(flight_id)
            if flight is None:
                return False
            flight.available_seats += seats
            return True

    # --- bookings ---

    def create_booking(self, **fields) -> Booking:
        with self._lock:
            booking = Booking(id=next(self._booking_ids), **fields)
            self._bookings[booking.id] = booking
            return booking

    def get_booking(self, booking_id: int) -> Booking | None:
        return self._bookings.get(booking_id)

    def get_booking_by_reference(self, reference: str) -> Booking | None:
        return next(
            (b for b in list(self._bookings.values()) if b.booking_reference == reference),
            None,
        )

    def list_user_bookings(self, user_id: int) -> list[Booking]:
        return [b for b in list(self._bookings.values()) if b.user_id == user_id]

    def list_bookings(self) -> list[Booking]:
        return list(self._bookings.values())

    def update_booking_status(self, booking_id: int, status: BookingStatus) -> Booking | None:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                return None
            booking.status = status
            return booking

    # --- passengers ---

    def add_passenger(self, booking_id: int, first_name: str, last_name: str,
                      date_of_birth: str, passport_number: str) -> Passenger:
        with self._lock:
            passenger = Passenger(
                id=next(self._passenger_ids),
                booking_id=booking_id,
                first_name=first_name,
                last_name=last_name,
                date_of_birth=date_of_birth,
                passport_number=passport_number,
            )
            self._passengers[passenger.id] = passenger
            return passenger

    def list_booking_passengers(self, booking_id: int) -> list[Passenger]:
        return [p for p in list(self._passengers.values()) if p.booking_id == booking_id]

    # --- sessions ---

    def revoke_token(self, jti: str) -> None:
        with self._lock:
            self._revoked_tokens.add(jti)

    def is_token_revoked(self, jti: str) -> bool:
        return jti in self._revoked_tokens


def get_store(request: Request) -> Storage:
    return request.app.state.store
