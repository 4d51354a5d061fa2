from .models import *

__all__ = [
    "Base",
    "TripStatus",
    "RequestStatus",
    "User",
    "Driver",
    "Passenger",
    "Vehicle",
    "Trip",
    "TripRequest",
    "TripPassenger",
    "AuditLog",
]
