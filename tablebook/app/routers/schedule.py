from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.db.session import get_session
from tablebook.app.domain.closures import blocking_closure, closures_on
from tablebook.app.domain.hours import opening_hours, slots_for_date
from tablebook.app.domain.models import ReservationStatus
from tablebook.app.routers.deps import require_admin
from tablebook.app.routers.schemas import ScheduleOut, ScheduleSlotOut
from tablebook.app.services.snapshot import load_snapshot


admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@admin_router.get("/schedule", response_model=ScheduleOut)
async def day_schedule(
    day: date = Query(alias="date"),
    session: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    """Per-slot view of one day for the admin calendar."""
    snapshot = await load_snapshot(session, day)
    active = [
        reservation
        for reservation in snapshot.reservations
        if reservation.status != ReservationStatus.CANCELLED
    ]

    slots = []
    for slot in slots_for_date(day, snapshot.settings.slot_duration):
        closure = blocking_closure(day, slot, snapshot.closures)
        booked = [reservation for reservation in active if reservation.reservation_time == slot]
        slots.append(
            ScheduleSlotOut(
                time=slot,
                closed=closure is not None,
                closure_name=closure.closure_name if closure else None,
                reservation_ids=[reservation.id for reservation in booked],
                covers=sum(reservation.party_size for reservation in booked),
            )
        )

    hours = opening_hours(day)
    return ScheduleOut(
        date=day,
        opens_at=hours[0] if hours else None,
        closes_at=hours[1] if hours else None,
        closures=closures_on(day, snapshot.closures),
        slots=slots,
    )
