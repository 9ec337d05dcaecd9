import uuid
from decimal import Decimal

from skyjourney.core.config import settings
from skyjourney.core.errors import (
    AlreadyCancelled,
    DomainError,
    Forbidden,
    InsufficientInventory,
    NotFound,
    ValidationError,
)
from skyjourney.core.logging import get_logger
from skyjourney.db.store import Storage
from skyjourney.models.booking import Booking, BookingStatus
from skyjourney.models.passenger import Passenger
from skyjourney.models.user import Capability, User

logger = get_logger(__name__)


def make_booking_ref() -> str:
    return settings.BOOKING_REF_PREFIX + uuid.uuid4().hex[:8].upper()


def _allocate_booking_ref(store: Storage) -> str:
    # booking_reference must be unique
    for _ in range(settings.BOOKING_REF_MAX_ATTEMPTS):
        ref = make_booking_ref()
        if store.get_booking_by_reference(ref) is None:
            return ref
    raise DomainError("Could not allocate booking reference")


def _ensure_visible(booking: Booking, requester: User, capability: Capability, action: str):
    if booking.user_id != requester.id and not requester.can(capability):
        raise Forbidden(f"Not authorized to {action} this booking")


def create_booking(store: Storage, user: User, flight_id: int, seats_booked: int,
                   contact_email: str, contact_phone: str,
                   total_price: Decimal | None = None,
                   passengers: list[dict] | None = None) -> Booking:
    if seats_booked < 1:
        raise ValidationError("seatsBooked must be >= 1")

    with store.transaction():
        flight = store.get_flight(flight_id)
        if flight is None:
            raise NotFound("Flight not found")
        if flight.available_seats < seats_booked:
            raise InsufficientInventory()

        ref = _allocate_booking_ref(store)
        if not store.reserve_seats(flight_id, seats_booked):
            raise InsufficientInventory()

        if total_price is None:
            total_price = flight.price * seats_booked

        booking = store.create_booking(
            user_id=user.id,
            flight_id=flight_id,
            booking_reference=ref,
            status=BookingStatus.CONFIRMED,
            total_price=total_price,
            seats_booked=seats_booked,
            contact_email=contact_email,
            contact_phone=contact_phone,
        )
        for p in passengers or []:
            add_passenger(store, booking.id, p)

    logger.info(
        "booking %s created: user=%s flight=%s seats=%s",
        booking.booking_reference, user.id, flight_id, seats_booked,
    )
    return booking


def add_passenger(store: Storage, booking_id: int, details: dict) -> Passenger:
    if store.get_booking(booking_id) is None:
        raise NotFound("Booking not found")
    return store.add_passenger(
        booking_id=booking_id,
        first_name=details.get("first_name", ""),
        last_name=details.get("last_name", ""),
        date_of_birth=details.get("date_of_birth", ""),
        passport_number=details.get("passport_number", ""),
    )


def cancel_booking(store: Storage, booking_id: int, requester: User) -> Booking:
    with store.transaction():
        booking = store.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        _ensure_visible(booking, requester, Capability.CANCEL_ANY_BOOKING, "cancel")
        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled()

        store.update_booking_status(booking_id, BookingStatus.CANCELLED)
        # the flight may have been deleted since; the booking is still cancelled
        credited = store.release_seats(booking.flight_id, booking.seats_booked)

    if not credited:
        logger.warning("booking %s cancelled but flight %s no longer exists", booking.booking_reference, booking.flight_id)
    logger.info("booking %s cancelled by user=%s", booking.booking_reference, requester.id)
    return booking


def get_booking_for(store: Storage, booking_id: int, requester: User) -> tuple[Booking, list[Passenger]]:
    booking = store.get_booking(booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    _ensure_visible(booking, requester, Capability.VIEW_ALL_BOOKINGS, "view")
    return booking, store.list_booking_passengers(booking.id)


def get_booking_by_reference_for(store: Storage, reference: str, requester: User) -> tuple[Booking, list[Passenger]]:
    booking = store.get_booking_by_reference(reference.strip().upper())
    if booking is None:
        raise NotFound("Booking not found")
    _ensure_visible(booking, requester, Capability.VIEW_ALL_BOOKINGS, "view")
    return booking, store.list_booking_passengers(booking.id)


def list_bookings_for(store: Storage, requester: User) -> list[Booking]:
    if requester.can(Capability.VIEW_ALL_BOOKINGS):
        bookings = store.list_bookings()
    else:
        bookings = store.list_user_bookings(requester.id)
    return sorted(bookings, key=lambda b: b.id)
