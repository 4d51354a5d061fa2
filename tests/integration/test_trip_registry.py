from datetime import date, time, timedelta

from sqlalchemy import func, select

from app.models.models import AuditLog, Trip, TripStatus

FUTURE = date.today() + timedelta(days=10)


def create_body(driver: dict, dates, **overrides):
    body = {
        "driver_user_id": driver["user_id"],
        "vehicle_id": driver["vehicle_id"],
        "origin": {"latitude": 24.86, "longitude": 67.0},
        "destination": {"latitude": 24.93, "longitude": 67.1},
        "price": 350,
        "seat_count": 3,
        "stop_count": 1,
        "time": "08:30:00",
        "dates": dates,
    }
    body.update(overrides)
    return body


async def count_trips(session_factory, vehicle_id: int) -> int:
    async with session_factory() as db:
        return await db.scalar(select(func.count(Trip.id)).where(Trip.vehicle_id == vehicle_id))


async def test_create_one_trip_per_date(client, factory, auth, session_factory):
    driver = await factory.driver()
    dates = [(FUTURE + timedelta(days=i)).isoformat() for i in range(3)]

    resp = await client.post("/trips/", json=create_body(driver, dates), headers=auth(driver["user_id"]))

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["created"] == 3
    assert len(body["trip_ids"]) == 3

    trip = (await client.get(f"/trips/{body['trip_ids'][0]}")).json()
    assert trip["total_seats"] == 3
    assert trip["seats_available"] == 3
    assert trip["overall_rating"] == 5
    assert trip["status"] == TripStatus.SCHEDULED
    assert trip["trip_time"] == "08:30:00"

    async with session_factory() as db:
        audit = (await db.execute(select(AuditLog).where(AuditLog.action == "create_trips"))).scalars().one()
    assert audit.actor_id == driver["user_id"]
    assert audit.detail["trip_ids"] == body["trip_ids"]


async def test_empty_or_missing_dates_is_rejected(client, factory, auth, session_factory):
    driver = await factory.driver()
    headers = auth(driver["user_id"])

    resp = await client.post("/trips/", json=create_body(driver, []), headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION"

    body = create_body(driver, None)
    del body["dates"]
    resp = await client.post("/trips/", json=body, headers=headers)
    assert resp.status_code == 400

    assert await count_trips(session_factory, driver["vehicle_id"]) == 0


async def test_user_without_driver_registration_is_not_found(client, factory, auth):
    user_id = await factory.user()
    body = create_body({"user_id": user_id, "vehicle_id": 1}, [FUTURE.isoformat()])

    resp = await client.post("/trips/", json=body, headers=auth(user_id))

    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


async def test_vehicle_of_another_driver_is_not_found(client, factory, auth):
    driver = await factory.driver()
    other = await factory.driver()
    body = create_body(driver, [FUTURE.isoformat()], vehicle_id=other["vehicle_id"])

    resp = await client.post("/trips/", json=body, headers=auth(driver["user_id"]))

    assert resp.status_code == 404


async def test_publishing_for_someone_else_is_forbidden(client, factory, auth):
    driver = await factory.driver()
    intruder = await factory.user()

    resp = await client.post("/trips/", json=create_body(driver, [FUTURE.isoformat()]), headers=auth(intruder))

    assert resp.status_code == 403


async def test_batch_is_all_or_nothing(client, factory, auth, session_factory):
    driver = await factory.driver()
    d1, d2, d3 = (FUTURE + timedelta(days=i) for i in range(3))
    # same vehicle, date and time as d2 below
    await factory.trip(driver, trip_date=d2, trip_time=time(8, 30))

    resp = await client.post(
        "/trips/",
        json=create_body(driver, [d1.isoformat(), d2.isoformat(), d3.isoformat()]),
        headers=auth(driver["user_id"]),
    )

    assert resp.status_code == 500
    assert resp.json()["code"] == "INTERNAL"
    assert await count_trips(session_factory, driver["vehicle_id"]) == 1


async def test_requires_authentication(client, factory):
    driver = await factory.driver()
    resp = await client.post("/trips/", json=create_body(driver, [FUTURE.isoformat()]))
    assert resp.status_code == 401


async def test_unknown_trip_is_not_found(client):
    resp = await client.get("/trips/999")
    assert resp.status_code == 404


async def test_owner_completes_a_past_trip(client, factory, auth):
    driver = await factory.driver()
    trip_id = await factory.trip(driver, trip_date=date.today() - timedelta(days=1))

    resp = await client.post(f"/trips/{trip_id}/complete", headers=auth(driver["user_id"]))
    assert resp.status_code == 200
    assert (await client.get(f"/trips/{trip_id}")).json()["status"] == TripStatus.COMPLETED

    # re-marking is not an error
    resp = await client.post(f"/trips/{trip_id}/complete", headers=auth(driver["user_id"]))
    assert resp.status_code == 200


async def test_non_owner_cannot_complete(client, factory, auth):
    driver = await factory.driver()
    other = await factory.driver()
    trip_id = await factory.trip(driver, trip_date=date.today() - timedelta(days=1))

    resp = await client.post(f"/trips/{trip_id}/complete", headers=auth(other["user_id"]))

    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"
    assert (await client.get(f"/trips/{trip_id}")).json()["status"] == TripStatus.SCHEDULED


async def test_future_trip_cannot_be_completed_yet(client, factory, auth):
    driver = await factory.driver()
    trip_id = await factory.trip(driver, trip_date=FUTURE)

    resp = await client.post(f"/trips/{trip_id}/complete", headers=auth(driver["user_id"]))

    assert resp.status_code == 400
    assert (await client.get(f"/trips/{trip_id}")).json()["status"] == TripStatus.SCHEDULED


async def test_departure_time_with_utc_offset_is_rejected(client, factory, auth, session_factory):
    driver = await factory.driver()

    resp = await client.post("/trips/", json=create_body(driver, [FUTURE.isoformat()], time="08:30:00+05:00"), headers=auth(driver["user_id"]))

    assert resp.status_code == 422
    assert await count_trips(session_factory, driver["vehicle_id"]) == 0


async def test_completing_an_unknown_trip_is_forbidden(client, factory, auth):
    driver = await factory.driver()

    resp = await client.post("/trips/9999/complete", headers=auth(driver["user_id"]))

    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"
