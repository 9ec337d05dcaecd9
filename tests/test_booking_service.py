"""Booking engine tests: seat accounting, references and visibility."""
import random
import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from conftest import assert_seats_balanced, seat_baseline
from skyjourney.core.errors import (
    AlreadyCancelled,
    DomainError,
    Forbidden,
    InsufficientInventory,
    NotFound,
    ValidationError,
)
from skyjourney.models.booking import BookingStatus
from skyjourney.services import booking_service

REF_PATTERN = re.compile(r"^SKY[0-9A-F]{8}$")


def _book(store, user, flight_id=1, seats=1, **kwargs):
    return booking_service.create_booking(
        store, user, flight_id=flight_id, seats_booked=seats,
        contact_email="contact@example.com", contact_phone="+1 555 0100", **kwargs,
    )


def _empty_flight(store, seats=10):
    return store.create_flight(
        flight_number="TS100",
        airline="Test Air",
        origin="BOS, Boston",
        destination="ORD, Chicago",
        departure_date=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        departure_time="09:00 AM",
        arrival_date=datetime(2024, 3, 1, 11, 0, tzinfo=timezone.utc),
        arrival_time="11:00 AM",
        duration="2h",
        price=Decimal("100.50"),
        total_seats=seats,
        available_seats=seats,
    )


class TestCreateBooking:
    def test_decrements_available_seats(self, store, alice, flight):
        booking = _book(store, alice, seats=3)
        assert flight.available_seats == 117
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.user_id == alice.id
        assert booking.seats_booked == 3
        assert booking.created_at.tzinfo is not None

    def test_reference_format(self, store, alice):
        booking = _book(store, alice)
        assert REF_PATTERN.match(booking.booking_reference)

    def test_references_are_unique(self, store, alice):
        flight = _empty_flight(store, seats=500)
        refs = {_book(store, alice, flight_id=flight.id).booking_reference for _ in range(300)}
        assert len(refs) == 300
        assert all(REF_PATTERN.match(r) for r in refs)

    def test_total_price_defaults_to_price_times_seats(self, store, alice):
        flight = _empty_flight(store)
        booking = _book(store, alice, flight_id=flight.id, seats=2)
        assert booking.total_price == Decimal("201.00")

    def test_explicit_total_price_is_kept(self, store, alice):
        booking = _book(store, alice, total_price=Decimal("10"))
        assert booking.total_price == Decimal("10")

    def test_missing_flight(self, store, alice):
        with pytest.raises(NotFound):
            _book(store, alice, flight_id=999)
        assert store.list_bookings() == []

    def test_zero_seats_rejected(self, store, alice):
        with pytest.raises(ValidationError):
            _book(store, alice, seats=0)

    def test_overbooking_mutates_nothing(self, store, alice, flight):
        with pytest.raises(InsufficientInventory):
            _book(store, alice, seats=121)
        assert flight.available_seats == 120
        assert store.list_bookings() == []

    def test_passengers_are_linked(self, store, alice):
        booking = _book(store, alice, seats=2, passengers=[
            {"first_name": "Ada", "last_name": "Lovelace", "date_of_birth": "1990-01-01", "passport_number": "P1"},
            {"first_name": "Alan", "last_name": "Turing", "date_of_birth": "1991-02-02", "passport_number": "P2"},
        ])
        passengers = store.list_booking_passengers(booking.id)
        assert [p.last_name for p in passengers] == ["Lovelace", "Turing"]
        assert all(p.booking_id == booking.id for p in passengers)


class TestReferenceAllocation:
    def test_retries_on_collision(self, store, alice, monkeypatch):
        first = _book(store, alice)
        refs = iter([first.booking_reference, "SKY0000BEEF"])
        monkeypatch.setattr(booking_service, "make_booking_ref", lambda: next(refs))
        second = _book(store, alice)
        assert second.booking_reference == "SKY0000BEEF"

    def test_gives_up_and_leaves_seats(self, store, alice, flight, monkeypatch):
        first = _book(store, alice)
        monkeypatch.setattr(booking_service, "make_booking_ref", lambda: first.booking_reference)
        with pytest.raises(DomainError):
            _book(store, alice, seats=5)
        assert flight.available_seats == 119
        assert len(store.list_bookings()) == 1


class TestCancelBooking:
    def test_restores_exactly_seats_booked(self, store, alice, flight):
        booking = _book(store, alice, seats=4)
        cancelled = booking_service.cancel_booking(store, booking.id, alice)
        assert cancelled.status == BookingStatus.CANCELLED
        assert flight.available_seats == 120

    def test_second_cancel_fails_without_double_credit(self, store, alice, flight):
        booking = _book(store, alice, seats=4)
        booking_service.cancel_booking(store, booking.id, alice)
        with pytest.raises(AlreadyCancelled):
            booking_service.cancel_booking(store, booking.id, alice)
        assert flight.available_seats == 120

    def test_missing_booking(self, store, alice):
        with pytest.raises(NotFound):
            booking_service.cancel_booking(store, 42, alice)

    def test_other_user_is_forbidden(self, store, alice, bob, flight):
        booking = _book(store, alice, seats=2)
        with pytest.raises(Forbidden):
            booking_service.cancel_booking(store, booking.id, bob)
        assert booking.status == BookingStatus.CONFIRMED
        assert flight.available_seats == 118

    def test_admin_can_cancel_any(self, store, alice, admin, flight):
        booking = _book(store, alice, seats=2)
        booking_service.cancel_booking(store, booking.id, admin)
        assert flight.available_seats == 120

    def test_cancel_after_flight_deleted(self, store, alice):
        booking = _book(store, alice, seats=2)
        store.delete_flight(1)
        cancelled = booking_service.cancel_booking(store, booking.id, alice)
        assert cancelled.status == BookingStatus.CANCELLED
        assert store.get_flight(1) is None


class TestVisibility:
    def test_owner_sees_booking_and_passengers(self, store, alice):
        booking = _book(store, alice, passengers=[
            {"first_name": "Ada", "last_name": "Lovelace", "date_of_birth": "1990-01-01", "passport_number": "P1"},
        ])
        found, passengers = booking_service.get_booking_for(store, booking.id, alice)
        assert found is booking
        assert len(passengers) == 1

    def test_non_owner_gets_forbidden_not_not_found(self, store, alice, bob):
        booking = _book(store, alice)
        with pytest.raises(Forbidden):
            booking_service.get_booking_for(store, booking.id, bob)

    def test_lookup_by_reference_is_case_insensitive(self, store, alice, bob):
        booking = _book(store, alice)
        found, _ = booking_service.get_booking_by_reference_for(store, booking.booking_reference.lower(), alice)
        assert found is booking
        with pytest.raises(Forbidden):
            booking_service.get_booking_by_reference_for(store, booking.booking_reference, bob)

    def test_listing_is_scoped(self, store, alice, bob, admin):
        a = _book(store, alice)
        b = _book(store, bob)
        assert booking_service.list_bookings_for(store, alice) == [a]
        assert booking_service.list_bookings_for(store, bob) == [b]
        assert booking_service.list_bookings_for(store, admin) == [a, b]

    def test_add_passenger_requires_booking(self, store):
        with pytest.raises(NotFound):
            booking_service.add_passenger(store, 7, {"first_name": "X"})


def test_sell_out_and_cancel_scenario(store, alice, flight):
    assert (flight.total_seats, flight.available_seats) == (180, 120)
    booking = _book(store, alice, seats=120)
    assert flight.available_seats == 0
    with pytest.raises(InsufficientInventory):
        _book(store, alice, seats=1)
    booking_service.cancel_booking(store, booking.id, alice)
    assert flight.available_seats == 120


def test_seat_accounting_over_random_operations(store, alice, bob, admin):
    rng = random.Random(1234)
    baseline = seat_baseline(store)
    users = [alice, bob]
    for _ in range(200):
        confirmed = [b for b in store.list_bookings() if b.status == BookingStatus.CONFIRMED]
        if confirmed and rng.random() < 0.4:
            booking = rng.choice(confirmed)
            booking_service.cancel_booking(store, booking.id, admin)
        else:
            try:
                _book(store, rng.choice(users), flight_id=rng.choice([1, 2]), seats=rng.randint(1, 30))
            except InsufficientInventory:
                pass
        assert_seats_balanced(store, baseline)


def test_fresh_flight_matches_total_seats(store, alice):
    flight = _empty_flight(store, seats=10)
    _book(store, alice, flight_id=flight.id, seats=3)
    kept = _book(store, alice, flight_id=flight.id, seats=5)
    booking_service.cancel_booking(store, kept.id, alice)
    held = sum(b.seats_booked for b in store.list_user_bookings(alice.id)
               if b.flight_id == flight.id and b.status == BookingStatus.CONFIRMED)
    assert flight.available_seats + held == flight.total_seats
