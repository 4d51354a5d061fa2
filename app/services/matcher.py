import logging
import time as _time
from datetime import date, time, timedelta
from typing import List, Optional

from sqlalchemy import select as sa_select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import ValidationFailed
from app.metrics import MATCH_LATENCY, MATCH_RESULTS
from app.models.models import Driver, Trip, User, Vehicle
from app.schemas.trip import GeoPointIn, MatchedTrip
from app.services.geo import (
    GeoPoint,
    estimate_minutes,
    haversine_km,
    latitude_band,
    time_window,
    within_distance,
    within_time_window,
)

logger = logging.getLogger(__name__)


def match_distance(
    trip: Trip,
    origin: GeoPoint,
    destination: GeoPoint,
    trip_date: date,
    trip_time: time,
    distance_tolerance_km: float,
    time_tolerance: timedelta,
) -> Optional[float]:
    """Origin-to-origin distance in km when ``trip`` matches the query, else None."""
    trip_origin = GeoPoint(trip.origin_lat, trip.origin_lon)
    trip_destination = GeoPoint(trip.destination_lat, trip.destination_lon)
    if not within_time_window(trip.trip_date, trip.trip_time, trip_date, trip_time, time_tolerance):
        return None
    if not within_distance(trip_destination, destination, distance_tolerance_km):
        return None
    if not within_distance(trip_origin, origin, distance_tolerance_km):
        return None
    return haversine_km(trip_origin, origin)


async def find_trips(
    db: AsyncSession,
    origin: GeoPoint,
    destination: GeoPoint,
    trip_date: date,
    trip_time: time,
    distance_tolerance_km: float = None,
    time_tolerance: timedelta = None,
    limit: int = None,
) -> List[MatchedTrip]:
    """Trips starting and ending near the query points on the same date and within the time window.

    Results are ordered by distance to the query origin, then departure time,
    then trip id, and truncated to ``limit``. Read-only.
    """
    if distance_tolerance_km is None:
        distance_tolerance_km = settings.MATCH_DISTANCE_TOLERANCE_KM
    if time_tolerance is None:
        time_tolerance = timedelta(minutes=settings.MATCH_TIME_TOLERANCE_MINUTES)
    if limit is None:
        limit = settings.MATCH_RESULT_LIMIT
    if trip_time.tzinfo is not None:
        raise ValidationFailed("time must not carry a UTC offset")

    start = _time.perf_counter()
    lower, upper = time_window(trip_date, trip_time, time_tolerance)
    origin_lat_min, origin_lat_max = latitude_band(origin, distance_tolerance_km)
    dest_lat_min, dest_lat_max = latitude_band(destination, distance_tolerance_km)

    # narrow candidates in the store; the exact predicate is applied below
    stmt = (
        sa_select(
            Trip,
            User.username,
            User.full_name,
            User.profile_photo_url,
            Vehicle.name,
            Vehicle.color,
            Vehicle.plate_number,
            Vehicle.average_consumption,
        )
        .join(Driver, Trip.driver_id == Driver.id)
        .join(User, Driver.user_id == User.id)
        .join(Vehicle, Trip.vehicle_id == Vehicle.id)
        .where(Trip.trip_date == trip_date)
        .where(Trip.trip_time.between(lower, upper))
        .where(Trip.origin_lat.between(origin_lat_min, origin_lat_max))
        .where(Trip.destination_lat.between(dest_lat_min, dest_lat_max))
    )
    rows = (await db.execute(stmt)).all()

    matched = []
    for row in rows:
        trip = row[0]
        distance = match_distance(trip, origin, destination, trip_date, trip_time, distance_tolerance_km, time_tolerance)
        if distance is not None:
            matched.append((distance, row))
    matched.sort(key=lambda item: (item[0], item[1][0].trip_time, item[1][0].id))

    results = [_to_matched_trip(distance, row) for distance, row in matched[:limit]]
    MATCH_LATENCY.observe(_time.perf_counter() - start)
    MATCH_RESULTS.observe(len(results))
    logger.debug("trip search", extra={"candidates": len(rows), "matched": len(matched), "returned": len(results)})
    return results


def _to_matched_trip(distance_km: float, row) -> MatchedTrip:
    trip, username, full_name, photo, vehicle_name, color, plate, consumption = row
    return MatchedTrip(
        trip_id=trip.id,
        driver_id=trip.driver_id,
        vehicle_id=trip.vehicle_id,
        seats_available=trip.seats_available,
        total_seats=trip.total_seats,
        stop_count=trip.stop_count,
        overall_rating=float(trip.overall_rating),
        price=float(trip.price),
        trip_date=trip.trip_date,
        trip_time=trip.trip_time,
        origin=GeoPointIn(latitude=trip.origin_lat, longitude=trip.origin_lon),
        destination=GeoPointIn(latitude=trip.destination_lat, longitude=trip.destination_lon),
        distance_km=round(distance_km, 2),
        estimated_minutes=estimate_minutes(distance_km, settings.AVERAGE_SPEED_KMH),
        driver_username=username,
        driver_full_name=full_name,
        driver_profile_photo_url=photo,
        vehicle_name=vehicle_name,
        vehicle_color=color,
        vehicle_plate_number=plate,
        vehicle_average_consumption=float(consumption) if consumption is not None else None,
    )
