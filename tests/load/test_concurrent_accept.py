"""Races several accept() calls against the same trip.

Each call runs in its own session, like separate workers would; all mutual
exclusion comes from the database transaction.
"""
import asyncio

from sqlalchemy import func, select

from app.errors import AlreadyProcessed, NoCapacity
from app.models.models import RequestStatus, Trip, TripPassenger, TripRequest
from app.services import request_lifecycle


async def pending_requests(factory, session_factory, trip_id: int, n: int) -> list:
    ids = []
    for _ in range(n):
        passenger = await factory.passenger()
        async with session_factory() as db:
            ids.append(await request_lifecycle.request_seat(db, trip_id, passenger["passenger_id"]))
    return ids


async def accept_in_new_session(session_factory, request_id: int, trip_id: int):
    async with session_factory() as db:
        return await request_lifecycle.accept(db, request_id, trip_id)


async def snapshot(session_factory, trip_id: int):
    async with session_factory() as db:
        seats = await db.scalar(select(Trip.seats_available).where(Trip.id == trip_id))
        seated = await db.scalar(select(func.count(TripPassenger.id)).where(TripPassenger.trip_id == trip_id))
        accepted = await db.scalar(
            select(func.count(TripRequest.id))
            .where(TripRequest.trip_id == trip_id)
            .where(TripRequest.status == RequestStatus.ACCEPTED)
        )
    return seats, seated, accepted


async def test_no_overbooking_under_concurrent_accepts(factory, session_factory):
    capacity = 3
    driver = await factory.driver()
    trip_id = await factory.trip(driver, seats=capacity)
    request_ids = await pending_requests(factory, session_factory, trip_id, 8)

    results = await asyncio.gather(
        *[accept_in_new_session(session_factory, rid, trip_id) for rid in request_ids],
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == capacity
    assert all(isinstance(f, (NoCapacity, AlreadyProcessed)) for f in failures), failures
    assert await snapshot(session_factory, trip_id) == (0, capacity, capacity)


async def test_two_concurrent_accepts_both_succeed_with_room(factory, session_factory):
    driver = await factory.driver()
    trip_id = await factory.trip(driver, seats=4)
    first, second = await pending_requests(factory, session_factory, trip_id, 2)

    results = await asyncio.gather(
        accept_in_new_session(session_factory, first, trip_id),
        accept_in_new_session(session_factory, second, trip_id),
    )

    assert all(trip == trip_id for _, trip in results)
    assert await snapshot(session_factory, trip_id) == (2, 2, 2)


async def test_same_request_accepted_twice_concurrently(factory, session_factory):
    driver = await factory.driver()
    trip_id = await factory.trip(driver, seats=4)
    [request_id] = await pending_requests(factory, session_factory, trip_id, 1)

    results = await asyncio.gather(
        accept_in_new_session(session_factory, request_id, trip_id),
        accept_in_new_session(session_factory, request_id, trip_id),
        return_exceptions=True,
    )

    assert sum(1 for r in results if not isinstance(r, Exception)) == 1
    assert sum(1 for r in results if isinstance(r, AlreadyProcessed)) == 1
    assert await snapshot(session_factory, trip_id) == (3, 1, 1)
