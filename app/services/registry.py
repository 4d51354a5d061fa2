"""Driver, passenger and vehicle registration.

A user becomes a driver implicitly by registering a vehicle; ``ensure_driver``
and ``ensure_passenger`` are idempotent upserts meant to be called inside the
caller's transaction.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import select as sa_select, update as sa_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFound, PersistenceError, ValidationFailed
from app.models.models import Driver, Passenger, User, Vehicle
from app.services.audit import log_audit
from app.services.authz import get_driver_for_user, get_passenger_for_user

logger = logging.getLogger(__name__)


async def _require_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def ensure_driver(db: AsyncSession, user_id: int) -> Driver:
    driver = await get_driver_for_user(db, user_id)
    if driver is not None:
        return driver
    await _require_user(db, user_id)
    try:
        async with db.begin_nested():
            driver = Driver(user_id=user_id)
            db.add(driver)
            await db.flush()
    except IntegrityError:
        # another worker registered the same user first
        driver = await get_driver_for_user(db, user_id)
    await db.execute(
        sa_update(User).where(User.id == user_id).values(is_driver=True).execution_options(synchronize_session=False)
    )
    return driver


async def ensure_passenger(db: AsyncSession, user_id: int) -> Passenger:
    passenger = await get_passenger_for_user(db, user_id)
    if passenger is not None:
        return passenger
    await _require_user(db, user_id)
    try:
        async with db.begin_nested():
            passenger = Passenger(user_id=user_id)
            db.add(passenger)
            await db.flush()
    except IntegrityError:
        passenger = await get_passenger_for_user(db, user_id)
    return passenger


async def register_vehicle(
    db: AsyncSession,
    user_id: int,
    name: str,
    plate_number: str,
    color: Optional[str] = None,
    average_consumption: Optional[float] = None,
) -> Vehicle:
    try:
        async with db.begin():
            driver = await ensure_driver(db, user_id)
            taken = await db.scalar(sa_select(Vehicle.id).where(Vehicle.plate_number == plate_number))
            if taken is not None:
                raise ValidationFailed("Plate number already registered")
            vehicle = Vehicle(
                driver_id=driver.id,
                name=name,
                color=color,
                plate_number=plate_number,
                average_consumption=Decimal(str(average_consumption)) if average_consumption is not None else None,
            )
            db.add(vehicle)
            await db.flush()
            await log_audit(db, actor_id=user_id, action="register_vehicle", object_type="vehicle", object_id=vehicle.id, detail={"plate_number": plate_number})
    except SQLAlchemyError as exc:
        logger.exception("Error registering vehicle", extra={"user_id": user_id})
        raise PersistenceError("An error occurred while registering the vehicle") from exc
    logger.info("vehicle registered", extra={"user_id": user_id, "vehicle_id": vehicle.id, "driver_id": driver.id})
    return vehicle


async def get_profile(db: AsyncSession, user_id: int) -> dict:
    user = await _require_user(db, user_id)
    driver = await get_driver_for_user(db, user_id)
    passenger = await get_passenger_for_user(db, user_id)
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "full_name": user.full_name,
        "profile_photo_url": user.profile_photo_url,
        "is_driver": bool(user.is_driver or driver is not None),
        "driver_id": driver.id if driver else None,
        "passenger_id": passenger.id if passenger else None,
    }
