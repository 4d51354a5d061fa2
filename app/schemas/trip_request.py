from pydantic import BaseModel
from typing import List, Optional
from datetime import date, time


class SeatRequestIn(BaseModel):
    trip_id: int
    passenger_id: int


class SeatRequestOut(BaseModel):
    message: str
    request_id: int


class RequestDecision(BaseModel):
    request_id: int
    trip_id: int


class AcceptOut(BaseModel):
    message: str
    passenger_id: int
    trip_id: int


class RejectOut(BaseModel):
    message: str
    request_id: int
    trip_id: int


class PassengerContact(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    email: str


class TripRequestItem(BaseModel):
    request_id: int
    status: str
    passenger: PassengerContact


class TripRequestsOut(BaseModel):
    trip_id: int
    trip_requests: List[TripRequestItem]


class TripSummary(BaseModel):
    trip_id: int
    origin_lat: float
    origin_lon: float
    destination_lat: float
    destination_lon: float
    date: date
    time: time


class ActiveRequestItem(BaseModel):
    request_id: int
    status: str
    trip: TripSummary


class ActiveRequestsOut(BaseModel):
    active_requests: List[ActiveRequestItem]
