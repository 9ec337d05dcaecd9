import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from skyjourney import seed
from skyjourney.core.security import hash_password
from skyjourney.db.store import MemStorage
from skyjourney.main import create_app
from skyjourney.models.booking import BookingStatus

ADMIN_PASSWORD = "admin123"
USER_PASSWORD = "secret123"


def seat_baseline(store):
    """Available seats per flight, taken before any booking exists."""
    return {f.id: f.available_seats for f in store.list_flights()}


def assert_seats_balanced(store, baseline):
    """availableSeats + seats held by confirmed bookings stays at its starting value."""
    for flight in store.list_flights():
        held = sum(
            b.seats_booked
            for b in store.list_bookings()
            if b.flight_id == flight.id and b.status == BookingStatus.CONFIRMED
        )
        assert flight.available_seats + held == baseline[flight.id]


def login(client, username, password):
    resp = client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def store():
    s = MemStorage()
    seed.run(s)
    return s


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


@pytest.fixture
def admin(store):
    return store.get_user_by_username("admin")


@pytest.fixture
def alice(store):
    return store.create_user("alice", hash_password(USER_PASSWORD), "alice@example.com")


@pytest.fixture
def bob(store):
    return store.create_user("bob", hash_password(USER_PASSWORD), "bob@example.com")


@pytest.fixture
def flight(store):
    return store.get_flight(1)


@pytest.fixture
def admin_headers(client, admin):
    return login(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def alice_headers(client, alice):
    return login(client, "alice", USER_PASSWORD)


@pytest.fixture
def bob_headers(client, bob):
    return login(client, "bob", USER_PASSWORD)
