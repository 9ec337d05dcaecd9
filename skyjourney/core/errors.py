"""Error kinds raised by the services and access-control layer.

Each error carries the HTTP status it is reported with; the application maps
them to JSON responses in ``skyjourney.main``.
"""


class DomainError(Exception):
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Invalid request data"

    def __init__(self, message: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


class Unauthenticated(DomainError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(DomainError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class InsufficientInventory(DomainError):
    status_code = 400
    default_message = "Not enough seats available"


class AlreadyCancelled(DomainError):
    status_code = 400
    default_message = "Booking is already cancelled"
