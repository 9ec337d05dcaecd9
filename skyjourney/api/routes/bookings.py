from typing import List

from fastapi import APIRouter, Depends, status

from skyjourney.api.deps import get_current_user
from skyjourney.db.store import Storage, get_store
from skyjourney.models.booking import Booking
from skyjourney.models.passenger import Passenger
from skyjourney.models.user import User
from skyjourney.schemas.booking import BookingCreate, BookingDetailOut, BookingOut, PassengerOut
from skyjourney.services import booking_service

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _detail(booking: Booking, passengers: List[Passenger]) -> BookingDetailOut:
    return BookingDetailOut(
        booking=BookingOut.model_validate(booking),
        passengers=[PassengerOut.model_validate(p) for p in passengers],
    )


@router.get("", response_model=List[BookingOut])
def list_bookings(store: Storage = Depends(get_store), me: User = Depends(get_current_user)):
    """Own bookings, or every booking for admins."""
    return [BookingOut.model_validate(b) for b in booking_service.list_bookings_for(store, me)]


@router.get("/reference/{reference}", response_model=BookingDetailOut)
def get_booking_by_reference(reference: str, store: Storage = Depends(get_store),
                             me: User = Depends(get_current_user)):
    return _detail(*booking_service.get_booking_by_reference_for(store, reference, me))


@router.get("/{booking_id}", response_model=BookingDetailOut)
def get_booking(booking_id: int, store: Storage = Depends(get_store),
                me: User = Depends(get_current_user)):
    return _detail(*booking_service.get_booking_for(store, booking_id, me))


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(body: BookingCreate, store: Storage = Depends(get_store),
                   me: User = Depends(get_current_user)):
    booking = booking_service.create_booking(
        store,
        me,
        flight_id=body.flight_id,
        seats_booked=body.seats_booked,
        contact_email=body.contact_email,
        contact_phone=body.contact_phone,
        total_price=body.total_price,
        passengers=[p.model_dump(by_alias=False) for p in body.passengers],
    )
    return BookingOut.model_validate(booking)


@router.put("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(booking_id: int, store: Storage = Depends(get_store),
                   me: User = Depends(get_current_user)):
    return BookingOut.model_validate(booking_service.cancel_booking(store, booking_id, me))
