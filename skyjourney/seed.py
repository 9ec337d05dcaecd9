from datetime import datetime, timezone
from decimal import Decimal

from skyjourney.core.config import settings
from skyjourney.core.logging import get_logger
from skyjourney.core.security import hash_password
from skyjourney.db.store import Storage
from skyjourney.models.user import Role

logger = get_logger(__name__)

SAMPLE_FLIGHTS = [
    dict(
        flight_number="AA2734",
        airline="American Airlines",
        origin="JFK, New York",
        destination="LAX, Los Angeles",
        departure_date=datetime(2023, 11, 15, 8, 0, tzinfo=timezone.utc),
        departure_time="08:00 AM",
        arrival_date=datetime(2023, 11, 15, 10, 15, tzinfo=timezone.utc),
        arrival_time="10:15 AM",
        duration="2h 15m",
        price=Decimal("349"),
        total_seats=180,
        available_seats=120,
        aircraft="Boeing 737-800",
        class_type="Economy",
        baggage_allowance="1 x 23kg Checked, 1 x 8kg Cabin",
    ),
    dict(
        flight_number="DL1492",
        airline="Delta Airlines",
        origin="JFK, New York",
        destination="LAX, Los Angeles",
        departure_date=datetime(2023, 11, 15, 10, 30, tzinfo=timezone.utc),
        departure_time="10:30 AM",
        arrival_date=datetime(2023, 11, 15, 13, 0, tzinfo=timezone.utc),
        arrival_time="1:00 PM",
        duration="2h 30m",
        price=Decimal("289"),
        total_seats=150,
        available_seats=95,
        aircraft="Boeing 737-800",
        class_type="Economy",
        baggage_allowance="1 x 23kg Checked, 1 x 8kg Cabin",
    ),
]


def ensure_user(store: Storage, username: str, password: str, email: str, role: Role):
    with store.transaction():
        if store.get_user_by_username(username):
            return
        store.create_user(
            username=username,
            password_hash=hash_password(password),
            email=email,
            role=role,
        )


def run(store: Storage):
    """Load the admin account and sample flights into a store."""
    ensure_user(store, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD, settings.ADMIN_EMAIL, Role.ADMIN)

    existing = {f.flight_number for f in store.list_flights()}
    for fields in SAMPLE_FLIGHTS:
        if fields["flight_number"] not in existing:
            store.create_flight(**fields)
    logger.info("[seed] admin user %r and %d sample flights ready", settings.ADMIN_USERNAME, len(SAMPLE_FLIGHTS))
