from fastapi import status


class BookingError(Exception):
    """Base class for errors surfaced to API callers.

    Each subclass carries a stable machine-readable ``code`` and the HTTP status
    the API boundary renders it with.
    """

    code = "INTERNAL"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationFailed(BookingError):
    code = "VALIDATION"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFound(BookingError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class NoCapacity(BookingError):
    code = "NO_CAPACITY"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "No available slots for this trip"


class Forbidden(BookingError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed"


class AlreadyProcessed(BookingError):
    code = "ALREADY_PROCESSED"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Request not found or already processed"


class DuplicateRequest(BookingError):
    code = "DUPLICATE_REQUEST"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Passenger already has an open request for this trip"


class PersistenceError(BookingError):
    pass
