import logging
from datetime import date, datetime, timedelta
from uuid import UUID, uuid4

from asyncpg import exceptions as asyncpg_exc
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.core import redis_client as redis_module
from tablebook.app.db.session import get_session
from tablebook.app.domain.availability import validate_booking_request
from tablebook.app.domain.errors import InvalidStatusTransition, ReservationNotFound
from tablebook.app.domain.models import Reservation, ReservationStatus, ensure_transition
from tablebook.app.domain.ports import Notifier
from tablebook.app.routers.deps import local_now, require_admin
from tablebook.app.routers.schemas import ReservationCreatedOut, ReservationIn, StatusUpdateIn
from tablebook.app.services.notifications import get_notifier
from tablebook.app.services.reservations import (
    fetch_reservation,
    fetch_reservations_between,
    insert_reservation,
    update_reservation_status,
)
from tablebook.app.services.snapshot import load_snapshot

logger = logging.getLogger(__name__)

WEEK_VIEW_DAYS = 7

router = APIRouter()
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


def _slot_key(day: date, at: str) -> str:
    return f"hold:{day.isoformat()}:{at}"


@router.post("/reservations", response_model=ReservationCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationIn,
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(local_now),
) -> ReservationCreatedOut:
    if redis_module.redis_client is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Redis unavailable")

    hold_key = _slot_key(payload.reservation_date, payload.reservation_time.strftime("%H%M"))
    hold_token = str(uuid4())
    if not await redis_module.acquire_hold(hold_key, hold_token):
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Slot temporarily held by another request")

    try:
        # re-read under the hold so the capacity check sees the latest bookings
        snapshot = await load_snapshot(session, payload.reservation_date)
        result = validate_booking_request(
            payload.reservation_date,
            payload.reservation_time,
            payload.party_size,
            snapshot.configs,
            snapshot.settings,
            snapshot.closures,
            snapshot.reservations,
            now=now,
        )
        if not result:
            raise HTTPException(
                status.HTTP_409_CONFLICT,
                detail={"message": result.message, "reason": result.reason.value},
            )

        try:
            reservation = await insert_reservation(
                session,
                name=payload.name.strip(),
                email=payload.email,
                phone=payload.phone,
                party_size=payload.party_size,
                reservation_date=payload.reservation_date,
                reservation_time=payload.reservation_time,
                special_requests=payload.special_requests,
            )
            await session.commit()
        except DBAPIError as exc:
            await session.rollback()
            orig = getattr(exc, "orig", exc)
            if isinstance(orig, asyncpg_exc.UniqueViolationError) or "unique_email_date" in str(orig):
                raise HTTPException(
                    status.HTTP_409_CONFLICT,
                    detail="You already have a reservation for this date and time.",
                ) from exc
            logger.exception("Failed to store reservation")
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error") from exc
    finally:
        await redis_module.release_hold(hold_key, hold_token)

    logger.info(
        "Reservation %s created for %s at %s",
        reservation.id,
        reservation.reservation_date,
        reservation.reservation_time,
    )
    return ReservationCreatedOut(
        id=reservation.id,
        name=reservation.name,
        reservation_date=reservation.reservation_date,
        reservation_time=reservation.reservation_time,
        party_size=reservation.party_size,
        status=reservation.status,
    )


@admin_router.get("/reservations", response_model=list[Reservation])
async def list_reservations(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(local_now),
) -> list[Reservation]:
    start = start or now.date()
    end = end or start + timedelta(days=WEEK_VIEW_DAYS - 1)
    if end < start:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="end must not be before start")
    return await fetch_reservations_between(session, start, end)


@admin_router.patch("/reservations/{reservation_id}", response_model=Reservation)
async def update_status(
    reservation_id: UUID,
    payload: StatusUpdateIn,
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> Reservation:
    try:
        current = await fetch_reservation(session, str(reservation_id))
        ensure_transition(current.status, payload.status)
        updated = await update_reservation_status(session, str(reservation_id), payload.status)
        await session.commit()
    except ReservationNotFound as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStatusTransition as exc:
        raise HTTPException(status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    if payload.status == ReservationStatus.CANCELLED and current.status != ReservationStatus.CANCELLED:
        try:
            await notifier.send_cancellation(updated)
        except Exception:
            # the status change stands
            logger.warning("Cancellation notice for reservation %s failed", updated.id, exc_info=True)

    return updated
