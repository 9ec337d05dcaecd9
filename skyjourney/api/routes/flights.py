from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import ValidationError as PydanticValidationError

from skyjourney.api.deps import require_admin
from skyjourney.core.errors import ValidationError
from skyjourney.db.store import Storage, get_store
from skyjourney.models.user import User
from skyjourney.schemas.flight import FlightIn, FlightOut, FlightPatch, FlightSearch
from skyjourney.services import flight_service

router = APIRouter(prefix="/flights", tags=["flights"])


@router.get("", response_model=List[FlightOut])
def list_flights(
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
    departureDate: Optional[str] = Query(None),
    passengers: Optional[str] = Query(None),
    store: Storage = Depends(get_store),
):
    """All flights, or a search when from, to and departureDate are all given."""
    if from_ and to and departureDate:
        try:
            search = FlightSearch.model_validate({
                "from": from_,
                "to": to,
                "departureDate": departureDate,
                "passengers": passengers or 1,
            })
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid search parameters",
                errors=[{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in e.errors()],
            )
        found = flight_service.search_flights(store, search.origin, search.destination, search.departure_date)
        return [FlightOut.model_validate(f) for f in found]

    return [FlightOut.model_validate(f) for f in flight_service.list_flights(store)]


@router.get("/{flight_id}", response_model=FlightOut)
def get_flight(flight_id: int, store: Storage = Depends(get_store)):
    return FlightOut.model_validate(flight_service.get_flight(store, flight_id))


@router.post("", response_model=FlightOut, status_code=status.HTTP_201_CREATED)
def create_flight(body: FlightIn, store: Storage = Depends(get_store),
                  admin: User = Depends(require_admin)):
    flight = flight_service.create_flight(store, body.model_dump(by_alias=False))
    return FlightOut.model_validate(flight)


@router.put("/{flight_id}", response_model=FlightOut)
def update_flight(flight_id: int, body: FlightPatch, store: Storage = Depends(get_store),
                  admin: User = Depends(require_admin)):
    changes = body.model_dump(by_alias=False, exclude_unset=True, exclude_none=True)
    flight = flight_service.update_flight(store, flight_id, changes)
    return FlightOut.model_validate(flight)


@router.delete("/{flight_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_flight(flight_id: int, store: Storage = Depends(get_store),
                  admin: User = Depends(require_admin)):
    flight_service.delete_flight(store, flight_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
