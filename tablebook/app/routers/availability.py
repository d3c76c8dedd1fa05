from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.db.session import get_session
from tablebook.app.domain.availability import (
    alternate_slots,
    bookable_dates,
    get_available_slots,
    validate_booking_request,
)
from tablebook.app.domain.capacity import bookable_party_sizes
from tablebook.app.routers.deps import local_now
from tablebook.app.routers.schemas import (
    AvailabilityCheckIn,
    AvailabilityCheckOut,
    AvailableSlotsOut,
    BookableDatesOut,
    SlotOut,
)
from tablebook.app.services.closures import fetch_closures
from tablebook.app.services.snapshot import load_snapshot
from tablebook.app.services.table_config import fetch_global_settings, fetch_table_configurations


router = APIRouter()


@router.get("/availability/slots", response_model=AvailableSlotsOut)
async def available_slots(
    day: date = Query(alias="date"),
    party_size: int = Query(ge=1, le=50),
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(local_now),
) -> AvailableSlotsOut:
    snapshot = await load_snapshot(session, day)
    slots = get_available_slots(
        day,
        party_size,
        snapshot.configs,
        snapshot.settings,
        snapshot.closures,
        snapshot.reservations,
        now=now,
    )
    return AvailableSlotsOut(date=day, party_size=party_size, slots=[SlotOut.from_slot(slot) for slot in slots])


@router.get("/availability/dates", response_model=BookableDatesOut)
async def available_dates(
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(local_now),
) -> BookableDatesOut:
    today = now.date()
    configs = await fetch_table_configurations(session)
    global_settings = await fetch_global_settings(session)
    closures = await fetch_closures(session, date_from=today)
    return BookableDatesOut(
        dates=bookable_dates(today, global_settings, closures),
        party_sizes=[size for size in bookable_party_sizes(configs) if size <= global_settings.max_party_size],
        global_settings=global_settings,
    )


@router.post("/availability/check", response_model=AvailabilityCheckOut)
async def check_availability(
    payload: AvailabilityCheckIn,
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(local_now),
) -> AvailabilityCheckOut:
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
        alternates = alternate_slots(
            payload.reservation_date,
            payload.reservation_time,
            payload.party_size,
            snapshot.configs,
            snapshot.settings,
            snapshot.closures,
            snapshot.reservations,
            now=now,
        )
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            detail={
                "message": result.message,
                "reason": result.reason.value,
                "alternates": [slot.strftime("%H:%M") for slot in alternates],
            },
        )

    return AvailabilityCheckOut(
        available=True,
        reservation_date=payload.reservation_date,
        reservation_time=payload.reservation_time,
        party_size=payload.party_size,
    )
