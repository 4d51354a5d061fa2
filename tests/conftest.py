"""Shared fixtures: a throwaway SQLite database, an ASGI client and data factories.

The environment is configured before any ``app`` import so that the engine in
``app.db.session`` binds to the test database.
"""
import os
import tempfile
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

_DB_DIR = tempfile.mkdtemp(prefix="carpool-tests-")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
from jose import jwt

from app.config import settings
from app.db.base import Base
from app.db.session import async_session, engine
from app.main import app
from app.models.models import Driver, Passenger, Trip, TripStatus, User, Vehicle


def auth_headers(user_id: int) -> dict:
    expire = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {"sub": str(user_id), "type": "access", "exp": int(expire.timestamp())}
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
def session_factory():
    return async_session


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class Factory:
    """Seeds rows directly, bypassing the API."""

    async def user(self, full_name: str = "Test User") -> int:
        tag = uuid.uuid4().hex[:8]
        async with async_session() as db:
            async with db.begin():
                user = User(email=f"user{tag}@example.com", username=f"user{tag}", full_name=full_name)
                db.add(user)
                await db.flush()
                return user.id

    async def driver(self, full_name: str = "Dana Driver") -> dict:
        user_id = await self.user(full_name=full_name)
        async with async_session() as db:
            async with db.begin():
                driver = Driver(user_id=user_id)
                db.add(driver)
                await db.flush()
                vehicle = Vehicle(
                    driver_id=driver.id,
                    name="Corolla",
                    color="white",
                    plate_number=f"P-{uuid.uuid4().hex[:8]}",
                    average_consumption=Decimal("6.5"),
                )
                db.add(vehicle)
                await db.flush()
                return {"user_id": user_id, "driver_id": driver.id, "vehicle_id": vehicle.id}

    async def passenger(self, full_name: str = "Pat Passenger") -> dict:
        user_id = await self.user(full_name=full_name)
        async with async_session() as db:
            async with db.begin():
                passenger = Passenger(user_id=user_id)
                db.add(passenger)
                await db.flush()
                return {"user_id": user_id, "passenger_id": passenger.id}

    async def trip(
        self,
        driver: dict,
        seats: int = 4,
        seats_available: int = None,
        trip_date: date = None,
        trip_time: time = time(8, 0),
        origin=(0.0, 0.0),
        destination=(1.0, 1.0),
        status: str = TripStatus.SCHEDULED,
    ) -> int:
        async with async_session() as db:
            async with db.begin():
                trip = Trip(
                    driver_id=driver["driver_id"],
                    vehicle_id=driver["vehicle_id"],
                    origin_lat=origin[0],
                    origin_lon=origin[1],
                    destination_lat=destination[0],
                    destination_lon=destination[1],
                    trip_date=trip_date or date.today() + timedelta(days=7),
                    trip_time=trip_time,
                    price=Decimal("12.50"),
                    total_seats=seats,
                    seats_available=seats if seats_available is None else seats_available,
                    stop_count=0,
                    status=status,
                    overall_rating=5,
                )
                db.add(trip)
                await db.flush()
                return trip.id


@pytest.fixture
def factory():
    return Factory()


@pytest.fixture
def auth():
    return auth_headers
