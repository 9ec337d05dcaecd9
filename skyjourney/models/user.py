from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Capability(str, Enum):
    MANAGE_FLIGHTS = "manage_flights"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    CANCEL_ANY_BOOKING = "cancel_any_booking"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.USER: frozenset(),
    Role.ADMIN: frozenset(Capability),
}


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    email: str
    role: Role = Role.USER

    def can(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES.get(self.role, frozenset())
