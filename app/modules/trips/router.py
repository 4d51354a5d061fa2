from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import CurrentUser, get_current_user
from app.db.session import get_session
from app.errors import Forbidden
from app.schemas.trip import (
    CreateTripsRequest,
    CreateTripsResponse,
    MatchedTrip,
    MessageOut,
    TripOut,
    TripSearchRequest,
)
from app.schemas.trip_request import TripRequestsOut
from app.services import matcher, request_lifecycle, trip_registry
from app.services.geo import GeoPoint

router = APIRouter(tags=["trips"])


@router.post("/", response_model=CreateTripsResponse, status_code=status.HTTP_201_CREATED)
async def create_trips(
    req: CreateTripsRequest,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Publish the same ride on one or more dates."""
    if req.driver_user_id != current_user.user_id:
        raise Forbidden("Trips can only be published for your own driver account")
    trip_ids = await trip_registry.create_trips(
        db,
        driver_user_id=req.driver_user_id,
        vehicle_id=req.vehicle_id,
        origin=GeoPoint(req.origin.latitude, req.origin.longitude),
        destination=GeoPoint(req.destination.latitude, req.destination.longitude),
        price=req.price,
        seat_count=req.seat_count,
        stop_count=req.stop_count,
        trip_time=req.time,
        dates=req.dates,
    )
    return CreateTripsResponse(message="Trips created successfully", created=len(trip_ids), trip_ids=trip_ids)


@router.post("/search", response_model=List[MatchedTrip])
async def search_trips(req: TripSearchRequest, db: AsyncSession = Depends(get_session)):
    return await matcher.find_trips(
        db,
        origin=GeoPoint(req.origin.latitude, req.origin.longitude),
        destination=GeoPoint(req.destination.latitude, req.destination.longitude),
        trip_date=req.date,
        trip_time=req.time,
    )


@router.get("/{trip_id}", response_model=TripOut)
async def get_trip(trip_id: int, db: AsyncSession = Depends(get_session)):
    return await trip_registry.get_trip(db, trip_id)


@router.post("/{trip_id}/complete", response_model=MessageOut)
async def complete_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await trip_registry.mark_completed(db, trip_id, current_user.user_id)
    return MessageOut(message="Trip marked as completed successfully")


@router.get("/{trip_id}/requests", response_model=TripRequestsOut)
async def list_trip_requests(
    trip_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    items = await request_lifecycle.list_requests_for_trip(db, trip_id, current_user.user_id)
    return TripRequestsOut(trip_id=trip_id, trip_requests=items)
