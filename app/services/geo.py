"""Pure geodetic and schedule-window helpers used by the trip matcher.

Nothing here touches the database, so the matching policy can be exercised
directly in unit tests and stays identical across storage backends.
"""
import math
from datetime import date, datetime, time, timedelta
from typing import NamedTuple, Tuple

# Sphere radius used by PostGIS ST_DistanceSphere
EARTH_RADIUS_KM = 6370.986

# absorbs float noise so that a point exactly on the tolerance is inside it
_DISTANCE_EPSILON_KM = 1e-9


class GeoPoint(NamedTuple):
    latitude: float
    longitude: float


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in km between two (lat, lon) points."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def within_distance(a: GeoPoint, b: GeoPoint, tolerance_km: float) -> bool:
    return haversine_km(a, b) <= tolerance_km + _DISTANCE_EPSILON_KM


def latitude_band(point: GeoPoint, tolerance_km: float) -> Tuple[float, float]:
    """Latitude range that can contain points within ``tolerance_km`` of ``point``.

    Great-circle distance is never shorter than the meridian arc between the two
    latitudes, so this band is a safe storage-side prefilter.
    """
    delta = math.degrees(tolerance_km / EARTH_RADIUS_KM) + 1e-6
    return max(-90.0, point.latitude - delta), min(90.0, point.latitude + delta)


def time_window(query_date: date, query_time: time, tolerance: timedelta) -> Tuple[time, time]:
    """Inclusive [time - tolerance, time + tolerance] clamped to ``query_date``.

    Trips must share the query date, so the window never wraps past midnight.
    """
    center = datetime.combine(query_date, query_time)
    lower = max(center - tolerance, datetime.combine(query_date, time.min))
    upper = min(center + tolerance, datetime.combine(query_date, time.max))
    return lower.time(), upper.time()


def within_time_window(trip_date: date, trip_time: time, query_date: date, query_time: time, tolerance: timedelta) -> bool:
    if trip_date != query_date:
        return False
    lower, upper = time_window(query_date, query_time, tolerance)
    return lower <= trip_time <= upper


def estimate_minutes(distance_km: float, average_speed_kmh: float) -> int:
    """Straight-line travel estimate in whole minutes, rounded half up. Not a routed ETA."""
    return int(math.floor(distance_km / average_speed_kmh * 60 + 0.5))
