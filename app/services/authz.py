"""Role resolution and ownership checks.

All helpers run inside the caller's session/transaction so that an ownership
decision and the mutation it guards see the same data.
"""
from typing import Optional

from sqlalchemy import select as sa_select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import Forbidden, NotFound
from app.models.models import Driver, Passenger, Trip


async def get_driver_for_user(db: AsyncSession, user_id: int) -> Optional[Driver]:
    res = await db.execute(sa_select(Driver).where(Driver.user_id == user_id))
    return res.scalars().first()


async def get_passenger_for_user(db: AsyncSession, user_id: int) -> Optional[Passenger]:
    res = await db.execute(sa_select(Passenger).where(Passenger.user_id == user_id))
    return res.scalars().first()


async def require_trip_owner(
    db: AsyncSession, trip_id: int, user_id: int, detail: str = None, missing_is_forbidden: bool = False
) -> Trip:
    """Return the trip when `user_id` is its driver.

    A missing trip is NOT_FOUND, or FORBIDDEN when `missing_is_forbidden` is set
    so that callers cannot tell missing trips from other drivers' trips.
    """
    stmt = sa_select(Trip, Driver.user_id).join(Driver, Trip.driver_id == Driver.id).where(Trip.id == trip_id)
    row = (await db.execute(stmt)).first()
    if row is None:
        if missing_is_forbidden:
            raise Forbidden(detail or "Only the trip's driver may do this")
        raise NotFound("Trip not found")
    trip, owner_user_id = row
    if owner_user_id != user_id:
        raise Forbidden(detail or "Only the trip's driver may do this")
    return trip


async def require_own_passenger(db: AsyncSession, passenger_id: int, user_id: int) -> Passenger:
    passenger = await db.get(Passenger, passenger_id)
    if passenger is None:
        raise NotFound("Passenger not found")
    if passenger.user_id != user_id:
        raise Forbidden("Passenger record belongs to another user")
    return passenger
