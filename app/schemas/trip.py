from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import date, time


def _naive_time(value):
    # trip times are wall-clock times at the trip location; an offset cannot be honoured
    if value.tzinfo is not None:
        raise ValueError("time must not carry a UTC offset")
    return value


class GeoPointIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class CreateTripsRequest(BaseModel):
    driver_user_id: int
    vehicle_id: int
    origin: GeoPointIn
    destination: GeoPointIn
    price: float = Field(..., ge=0)
    seat_count: int = Field(..., gt=0)
    stop_count: int = Field(0, ge=0)
    time: time
    # checked by the registry so that a missing or empty list is a 400, not a 422
    dates: Optional[List[date]] = None

    check_time = field_validator("time")(_naive_time)


class CreateTripsResponse(BaseModel):
    message: str
    created: int
    trip_ids: List[int]


class TripOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    driver_id: int
    vehicle_id: int
    origin_lat: float
    origin_lon: float
    destination_lat: float
    destination_lon: float
    trip_date: date
    trip_time: time
    price: float
    total_seats: int
    seats_available: int
    stop_count: int
    status: str
    overall_rating: float


class TripSearchRequest(BaseModel):
    origin: GeoPointIn
    destination: GeoPointIn
    date: date
    time: time

    check_time = field_validator("time")(_naive_time)


class MatchedTrip(BaseModel):
    trip_id: int
    driver_id: int
    vehicle_id: int
    seats_available: int
    total_seats: int
    stop_count: int
    overall_rating: float
    price: float
    trip_date: date
    trip_time: time
    origin: GeoPointIn
    destination: GeoPointIn
    distance_km: float = Field(..., description="Distance from the query origin to the trip origin")
    estimated_minutes: int = Field(..., description="Straight-line travel estimate at the configured average speed")
    driver_username: Optional[str] = None
    driver_full_name: Optional[str] = None
    driver_profile_photo_url: Optional[str] = None
    vehicle_name: Optional[str] = None
    vehicle_color: Optional[str] = None
    vehicle_plate_number: Optional[str] = None
    vehicle_average_consumption: Optional[float] = None


class MessageOut(BaseModel):
    message: str
