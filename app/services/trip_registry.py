import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import NotFound, PersistenceError, ValidationFailed
from app.metrics import TRIPS_CREATED
from app.models.models import Trip, TripStatus, Vehicle
from app.services.audit import log_audit
from app.services.authz import get_driver_for_user, require_trip_owner
from app.services.geo import GeoPoint

logger = logging.getLogger(__name__)


async def create_trips(
    db: AsyncSession,
    driver_user_id: int,
    vehicle_id: int,
    origin: GeoPoint,
    destination: GeoPoint,
    price,
    seat_count: int,
    stop_count: int,
    trip_time: time,
    dates: Optional[Sequence[date]],
) -> List[int]:
    """Publish one trip per date; either every trip is stored or none is."""
    if not dates or not isinstance(dates, (list, tuple)):
        raise ValidationFailed("Invalid or missing dates array")
    if seat_count is None or seat_count <= 0:
        raise ValidationFailed("seat_count must be positive")
    if trip_time.tzinfo is not None:
        raise ValidationFailed("time must not carry a UTC offset")

    try:
        async with db.begin():
            driver = await get_driver_for_user(db, driver_user_id)
            if driver is None:
                raise NotFound("Driver not found for the given user")
            vehicle = await db.get(Vehicle, vehicle_id)
            if vehicle is None or vehicle.driver_id != driver.id:
                raise NotFound("Vehicle not found for this driver")

            trips = [
                Trip(
                    driver_id=driver.id,
                    vehicle_id=vehicle_id,
                    origin_lat=origin.latitude,
                    origin_lon=origin.longitude,
                    destination_lat=destination.latitude,
                    destination_lon=destination.longitude,
                    trip_date=trip_date,
                    trip_time=trip_time,
                    price=Decimal(str(price)),
                    total_seats=seat_count,
                    seats_available=seat_count,
                    stop_count=stop_count,
                    status=TripStatus.SCHEDULED,
                    overall_rating=settings.DEFAULT_TRIP_RATING,
                )
                for trip_date in dates
            ]
            db.add_all(trips)
            await db.flush()
            trip_ids = [t.id for t in trips]
            await log_audit(
                db,
                actor_id=driver_user_id,
                action="create_trips",
                object_type="trip",
                object_id=trip_ids[0],
                detail={"trip_ids": trip_ids, "vehicle_id": vehicle_id, "dates": [d.isoformat() for d in dates], "seats": seat_count},
            )
    except SQLAlchemyError as exc:
        logger.exception("Error creating trips", extra={"driver_user_id": driver_user_id, "vehicle_id": vehicle_id})
        raise PersistenceError("An error occurred while creating trips") from exc

    TRIPS_CREATED.inc(len(trip_ids))
    logger.info("trips created", extra={"driver_id": driver.id, "trip_ids": trip_ids})
    return trip_ids


async def get_trip(db: AsyncSession, trip_id: int) -> Trip:
    trip = await db.get(Trip, trip_id)
    if trip is None:
        raise NotFound("Trip not found")
    return trip


async def mark_completed(db: AsyncSession, trip_id: int, requesting_user_id: int, now: datetime = None) -> None:
    """Mark a trip COMPLETED. Only its driver may do so, and only once it has started."""
    now = now or datetime.now()
    async with db.begin():
        trip = await require_trip_owner(
            db, trip_id, requesting_user_id, "Only the driver can complete this trip", missing_is_forbidden=True
        )
        if datetime.combine(trip.trip_date, trip.trip_time) > now:
            raise ValidationFailed("Trip has not started yet")
        await db.execute(
            sa_update(Trip)
            .where(Trip.id == trip_id)
            .values(status=TripStatus.COMPLETED)
            .execution_options(synchronize_session=False)
        )
        await log_audit(db, actor_id=requesting_user_id, action="complete_trip", object_type="trip", object_id=trip_id)
    logger.info("trip completed", extra={"trip_id": trip_id, "driver_user_id": requesting_user_id})
