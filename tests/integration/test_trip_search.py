import math
from datetime import date, time, timedelta, timezone

import pytest

from app.errors import ValidationFailed
from app.services import matcher
from app.services.geo import EARTH_RADIUS_KM, GeoPoint

TRIP_DATE = date.today() + timedelta(days=3)


def lat_offset(km: float) -> float:
    return math.degrees(km / EARTH_RADIUS_KM)


def search_body(trip_date=TRIP_DATE, trip_time="08:00:00"):
    return {
        "origin": {"latitude": 0.0, "longitude": 0.0},
        "destination": {"latitude": 1.0, "longitude": 1.0},
        "date": trip_date.isoformat(),
        "time": trip_time,
    }


async def test_boundary_distance_is_included_and_beyond_is_excluded(factory, session_factory):
    driver = await factory.driver()
    inside = await factory.trip(driver, trip_date=TRIP_DATE, trip_time=time(8, 0), origin=(lat_offset(5.0), 0.0))
    await factory.trip(driver, trip_date=TRIP_DATE, trip_time=time(8, 15), origin=(lat_offset(5.01), 0.0))

    async with session_factory() as db:
        results = await matcher.find_trips(db, GeoPoint(0.0, 0.0), GeoPoint(1.0, 1.0), TRIP_DATE, time(8, 0))

    assert [r.trip_id for r in results] == [inside]
    assert results[0].distance_km == 5.0
    assert results[0].estimated_minutes == 8


async def test_zero_matches_is_an_empty_list(factory, session_factory):
    driver = await factory.driver()
    await factory.trip(driver, trip_date=TRIP_DATE + timedelta(days=1))
    await factory.trip(driver, trip_date=TRIP_DATE, trip_time=time(11, 0))

    async with session_factory() as db:
        results = await matcher.find_trips(db, GeoPoint(0.0, 0.0), GeoPoint(1.0, 1.0), TRIP_DATE, time(8, 0))

    assert results == []


async def test_results_are_ranked_by_distance_and_limited(factory, session_factory):
    driver = await factory.driver()
    expected = []
    # farthest first so insertion order differs from ranking
    for i, km in enumerate([4.5, 3.5, 3.0, 2.5, 2.0, 1.0, 0.5]):
        trip_id = await factory.trip(driver, trip_date=TRIP_DATE, trip_time=time(7, 30 + i), origin=(lat_offset(km), 0.0))
        expected.append((km, trip_id))
    expected.sort()

    async with session_factory() as db:
        results = await matcher.find_trips(db, GeoPoint(0.0, 0.0), GeoPoint(1.0, 1.0), TRIP_DATE, time(8, 0))

    assert [r.trip_id for r in results] == [trip_id for _, trip_id in expected[:5]]
    assert [r.distance_km for r in results] == [0.5, 1.0, 2.0, 2.5, 3.0]


async def test_search_endpoint_returns_driver_and_vehicle_details(client, factory):
    driver = await factory.driver(full_name="Dana Driver")
    trip_id = await factory.trip(driver, trip_date=TRIP_DATE, origin=(lat_offset(2.0), 0.0))

    resp = await client.post("/trips/search", json=search_body())

    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 1
    match = body[0]
    assert match["trip_id"] == trip_id
    assert match["distance_km"] == 2.0
    assert match["estimated_minutes"] == 3
    assert match["seats_available"] == 4
    assert match["driver_full_name"] == "Dana Driver"
    assert match["vehicle_name"] == "Corolla"
    assert match["origin"]["latitude"] == lat_offset(2.0)


async def test_search_endpoint_without_matches(client):
    resp = await client.post("/trips/search", json=search_body())
    assert resp.status_code == 200
    assert resp.json() == []


async def test_search_time_with_utc_offset_is_rejected(client, factory, session_factory):
    driver = await factory.driver()
    await factory.trip(driver, trip_date=TRIP_DATE, trip_time=time(8, 0))

    resp = await client.post("/trips/search", json=search_body(trip_time="08:00:00+02:00"))
    assert resp.status_code == 422

    async with session_factory() as db:
        with pytest.raises(ValidationFailed):
            await matcher.find_trips(
                db,
                GeoPoint(0.0, 0.0),
                GeoPoint(1.0, 1.0),
                TRIP_DATE,
                time(8, 0, tzinfo=timezone(timedelta(hours=2))),
            )
