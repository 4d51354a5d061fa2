"""Seat request lifecycle: PENDING -> ACCEPTED | REJECTED.

``accept`` is the only writer of ``Trip.seats_available``. It runs as one
transaction: re-read capacity (row-locked where the dialect supports it),
compare-and-swap the request out of PENDING, record the seat, then decrement the
counter with a ``seats_available > 0`` guard. Concurrent accepts on the same trip
therefore either observe the decremented counter or fail the guarded update,
and the whole transaction rolls back.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy import select as sa_select, update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import (
    AlreadyProcessed,
    BookingError,
    DuplicateRequest,
    NoCapacity,
    NotFound,
    ValidationFailed,
)
from app.metrics import REQUEST_TRANSITIONS
from app.models.models import (
    Passenger,
    RequestStatus,
    Trip,
    TripPassenger,
    TripRequest,
    TripStatus,
    User,
)
from app.schemas.trip_request import ActiveRequestItem, PassengerContact, TripRequestItem, TripSummary
from app.services.audit import log_audit
from app.services.authz import require_own_passenger, require_trip_owner

logger = logging.getLogger(__name__)

_DECIDE_DETAIL = "Only the driver can decide on this trip's requests"


def _record(transition: str, result: str):
    REQUEST_TRANSITIONS.labels(transition=transition, result=result).inc()


async def request_seat(db: AsyncSession, trip_id: int, passenger_id: int, acting_user_id: Optional[int] = None) -> int:
    """Create a PENDING request. The capacity check is advisory; no seat is held."""
    try:
        async with db.begin():
            if acting_user_id is not None:
                await require_own_passenger(db, passenger_id, acting_user_id)
            elif await db.get(Passenger, passenger_id) is None:
                raise NotFound("Passenger not found")

            row = (await db.execute(sa_select(Trip.seats_available, Trip.status).where(Trip.id == trip_id))).first()
            if row is None:
                raise NotFound("Trip not found")
            if row.status == TripStatus.COMPLETED:
                raise ValidationFailed("Trip is no longer open for requests")
            if row.seats_available <= 0:
                raise NoCapacity()

            open_request = await db.scalar(
                sa_select(TripRequest.id)
                .where(TripRequest.trip_id == trip_id)
                .where(TripRequest.passenger_id == passenger_id)
                .where(TripRequest.status.in_([RequestStatus.PENDING, RequestStatus.ACCEPTED]))
                .limit(1)
            )
            if open_request is not None:
                raise DuplicateRequest()

            req = TripRequest(trip_id=trip_id, passenger_id=passenger_id, status=RequestStatus.PENDING)
            db.add(req)
            await db.flush()
            request_id = req.id
    except IntegrityError as exc:
        # lost a race against the same passenger's concurrent request
        _record("request", "duplicate_request")
        raise DuplicateRequest() from exc
    except BookingError as exc:
        _record("request", exc.code.lower())
        raise

    _record("request", "success")
    logger.info("seat requested", extra={"trip_id": trip_id, "passenger_id": passenger_id, "request_id": request_id})
    return request_id


async def _leave_pending(db: AsyncSession, request_id: int, trip_id: int, new_status: str) -> int:
    """Compare-and-swap a request out of PENDING; returns its passenger id."""
    stmt = (
        sa_update(TripRequest)
        .where(TripRequest.id == request_id)
        .where(TripRequest.trip_id == trip_id)
        .where(TripRequest.status == RequestStatus.PENDING)
        .values(status=new_status)
        .returning(TripRequest.passenger_id)
        .execution_options(synchronize_session=False)
    )
    passenger_id = (await db.execute(stmt)).scalar_one_or_none()
    if passenger_id is not None:
        return passenger_id
    await _require_pending(db, request_id, trip_id)
    raise AlreadyProcessed("Request already processed")


async def _require_pending(db: AsyncSession, request_id: int, trip_id: int) -> None:
    status = await db.scalar(
        sa_select(TripRequest.status).where(TripRequest.id == request_id).where(TripRequest.trip_id == trip_id)
    )
    if status is None:
        raise NotFound("Request not found")
    if status != RequestStatus.PENDING:
        raise AlreadyProcessed("Request already processed")


async def accept(db: AsyncSession, request_id: int, trip_id: int, acting_user_id: Optional[int] = None) -> Tuple[int, int]:
    """Accept a PENDING request and consume one seat. Returns (passenger_id, trip_id)."""
    try:
        async with db.begin():
            if acting_user_id is not None:
                await require_trip_owner(db, trip_id, acting_user_id, _DECIDE_DETAIL)

            seats_available = await db.scalar(
                sa_select(Trip.seats_available).where(Trip.id == trip_id).with_for_update()
            )
            if seats_available is None:
                raise NotFound("Trip not found")
            if seats_available <= 0:
                # a decided request stays final even once the trip fills up
                await _require_pending(db, request_id, trip_id)
                raise NoCapacity()

            passenger_id = await _leave_pending(db, request_id, trip_id, RequestStatus.ACCEPTED)

            db.add(TripPassenger(trip_id=trip_id, passenger_id=passenger_id))
            await db.flush()

            res = await db.execute(
                sa_update(Trip)
                .where(Trip.id == trip_id)
                .where(Trip.seats_available > 0)
                .values(seats_available=Trip.seats_available - 1)
                .execution_options(synchronize_session=False)
            )
            if res.rowcount == 0:
                raise NoCapacity()

            await log_audit(
                db,
                actor_id=acting_user_id,
                action="accept_request",
                object_type="trip_request",
                object_id=request_id,
                detail={"trip_id": trip_id, "passenger_id": passenger_id},
            )
    except BookingError as exc:
        _record("accept", exc.code.lower())
        logger.warning("accept refused", extra={"trip_id": trip_id, "request_id": request_id, "code": exc.code})
        raise

    _record("accept", "success")
    logger.info("request accepted", extra={"trip_id": trip_id, "request_id": request_id, "passenger_id": passenger_id})
    return passenger_id, trip_id


async def reject(db: AsyncSession, request_id: int, trip_id: int, acting_user_id: Optional[int] = None) -> None:
    """Reject a PENDING request. Capacity is untouched."""
    try:
        async with db.begin():
            if acting_user_id is not None:
                await require_trip_owner(db, trip_id, acting_user_id, _DECIDE_DETAIL)
            passenger_id = await _leave_pending(db, request_id, trip_id, RequestStatus.REJECTED)
            await log_audit(
                db,
                actor_id=acting_user_id,
                action="reject_request",
                object_type="trip_request",
                object_id=request_id,
                detail={"trip_id": trip_id, "passenger_id": passenger_id},
            )
    except BookingError as exc:
        _record("reject", exc.code.lower())
        logger.warning("reject refused", extra={"trip_id": trip_id, "request_id": request_id, "code": exc.code})
        raise

    _record("reject", "success")
    logger.info("request rejected", extra={"trip_id": trip_id, "request_id": request_id})


async def list_requests_for_trip(db: AsyncSession, trip_id: int, requesting_user_id: int) -> List[TripRequestItem]:
    await require_trip_owner(db, trip_id, requesting_user_id, "You are not authorized to view these trip requests")
    stmt = (
        sa_select(TripRequest.id, TripRequest.status, User.id, User.full_name, User.email)
        .join(Passenger, TripRequest.passenger_id == Passenger.id)
        .join(User, Passenger.user_id == User.id)
        .where(TripRequest.trip_id == trip_id)
        .order_by(TripRequest.id)
    )
    rows = (await db.execute(stmt)).all()
    return [
        TripRequestItem(
            request_id=request_id,
            status=status,
            passenger=PassengerContact(user_id=user_id, full_name=full_name, email=email),
        )
        for request_id, status, user_id, full_name, email in rows
    ]


async def list_active_requests_for_passenger(db: AsyncSession, passenger_user_id: int, now: datetime = None) -> List[ActiveRequestItem]:
    """Requests whose trip is neither completed nor already under way."""
    now = now or datetime.now()
    today, now_time = now.date(), now.time()
    stmt = (
        sa_select(TripRequest.id, TripRequest.status, Trip)
        .join(Trip, TripRequest.trip_id == Trip.id)
        .join(Passenger, TripRequest.passenger_id == Passenger.id)
        .where(Passenger.user_id == passenger_user_id)
        .where(Trip.status != TripStatus.COMPLETED)
        .where(or_(Trip.trip_date > today, and_(Trip.trip_date == today, Trip.trip_time > now_time)))
        .order_by(Trip.trip_date, Trip.trip_time, TripRequest.id)
    )
    rows = (await db.execute(stmt)).all()
    return [
        ActiveRequestItem(
            request_id=request_id,
            status=status,
            trip=TripSummary(
                trip_id=trip.id,
                origin_lat=trip.origin_lat,
                origin_lon=trip.origin_lon,
                destination_lat=trip.destination_lat,
                destination_lon=trip.destination_lon,
                date=trip.trip_date,
                time=trip.trip_time,
            ),
        )
        for request_id, status, trip in rows
    ]
