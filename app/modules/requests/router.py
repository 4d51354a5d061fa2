from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import CurrentUser, get_current_user
from app.db.session import get_session
from app.schemas.trip_request import (
    AcceptOut,
    ActiveRequestsOut,
    RejectOut,
    RequestDecision,
    SeatRequestIn,
    SeatRequestOut,
)
from app.services import request_lifecycle

router = APIRouter(tags=["requests"])


@router.post("/", response_model=SeatRequestOut, status_code=status.HTTP_201_CREATED)
async def request_seat(
    req: SeatRequestIn,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    request_id = await request_lifecycle.request_seat(db, req.trip_id, req.passenger_id, acting_user_id=current_user.user_id)
    return SeatRequestOut(message="Trip join request sent", request_id=request_id)


@router.post("/accept", response_model=AcceptOut)
async def accept_request(
    req: RequestDecision,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Accept a pending request; consumes one seat atomically."""
    passenger_id, trip_id = await request_lifecycle.accept(db, req.request_id, req.trip_id, acting_user_id=current_user.user_id)
    return AcceptOut(message="Passenger request accepted", passenger_id=passenger_id, trip_id=trip_id)


@router.post("/reject", response_model=RejectOut)
async def reject_request(
    req: RequestDecision,
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await request_lifecycle.reject(db, req.request_id, req.trip_id, acting_user_id=current_user.user_id)
    return RejectOut(message="Passenger request rejected", request_id=req.request_id, trip_id=req.trip_id)


@router.get("/active", response_model=ActiveRequestsOut)
async def active_requests(
    db: AsyncSession = Depends(get_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    items = await request_lifecycle.list_active_requests_for_passenger(db, current_user.user_id)
    return ActiveRequestsOut(active_requests=items)
