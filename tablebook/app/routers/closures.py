import logging
from collections.abc import Iterable
from datetime import date, datetime
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.core import redis_client as redis_module
from tablebook.app.core.config import settings
from tablebook.app.db.session import get_session
from tablebook.app.domain.cancellation import apply_closure, apply_closures
from tablebook.app.domain.conflicts import check_closure_conflicts, closure_statistics
from tablebook.app.domain.errors import ClosureNotFound
from tablebook.app.domain.models import Closure
from tablebook.app.domain.ports import ClosureGateway, Notifier, ReservationGateway
from tablebook.app.routers.deps import get_closure_gateway, get_reservation_gateway, local_now, require_admin
from tablebook.app.routers.schemas import (
    ClosureApplyOut,
    ClosureBatchIn,
    ClosureBatchOut,
    ClosureIn,
    ClosureStatisticsOut,
    ConflictCheckIn,
    ConflictReportOut,
)
from tablebook.app.services.closures import delete_closure, fetch_closures
from tablebook.app.services.notifications import get_notifier
from tablebook.app.services.reservations import fetch_reservations_between, fetch_reservations_for_date

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


def _lock_key(day: date) -> str:
    return f"closure-lock:{day.isoformat()}"


async def _lock_dates(days: Iterable[date], token: str) -> bool:
    """Take the closure lock of every date, or none of them."""
    locked: list[date] = []
    for day in sorted(set(days)):
        if not await redis_module.acquire_hold(_lock_key(day), token, settings.CLOSURE_LOCK_TTL_SECONDS):
            await _unlock_dates(locked, token)
            return False
        locked.append(day)
    return True


async def _unlock_dates(days: Iterable[date], token: str) -> None:
    for day in set(days):
        await redis_module.release_hold(_lock_key(day), token)


@router.get("/closures", response_model=list[Closure])
async def upcoming_closures(
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(local_now),
) -> list[Closure]:
    return await fetch_closures(session, date_from=now.date())


@admin_router.get("/closures", response_model=list[Closure])
async def list_closures(
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[Closure]:
    return await fetch_closures(session, date_from=date_from, date_to=date_to)


@admin_router.post("/closures/check-conflicts", response_model=ConflictReportOut)
async def check_conflicts(
    payload: ConflictCheckIn,
    session: AsyncSession = Depends(get_session),
) -> ConflictReportOut:
    closure = payload.to_closure()
    reservations = await fetch_reservations_for_date(session, closure.closure_date)
    return ConflictReportOut.from_report(check_closure_conflicts(closure, reservations))


@admin_router.post("/closures", response_model=ClosureApplyOut, status_code=status.HTTP_201_CREATED)
async def create_closure(
    payload: ClosureIn,
    reservations: ReservationGateway = Depends(get_reservation_gateway),
    closures: ClosureGateway = Depends(get_closure_gateway),
    notifier: Notifier = Depends(get_notifier),
) -> ClosureApplyOut:
    if redis_module.redis_client is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Redis unavailable")

    closure = payload.to_closure()
    lock_token = str(uuid4())
    if not await _lock_dates([closure.closure_date], lock_token):
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Another closure for this date is being applied")

    try:
        result = await apply_closure(
            closure,
            force=payload.force_cancel_reservations,
            reservations=reservations,
            closures=closures,
            notifier=notifier,
        )
    finally:
        await _unlock_dates([closure.closure_date], lock_token)

    out = ClosureApplyOut.from_result(result)
    if result.needs_confirmation:
        raise HTTPException(
            status.HTTP_409_CONFLICT,
            detail={
                "message": (
                    f"There are {len(result.report.conflicts)} existing reservations "
                    "that conflict with this closure"
                ),
                "requires_confirmation": True,
                "conflicts": out.conflicts.model_dump(mode="json"),
            },
        )

    if result.closure_error is not None:
        # cancellations already happened; report them with the failure
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": "Closure could not be saved",
                "error": result.closure_error,
                "cancelled": out.cancelled,
                "failed": [item.model_dump() for item in out.failed],
                "notifications_failed": out.notifications_failed,
            },
        )

    if result.failed:
        logger.warning(
            "Closure %s applied with %d reservations left uncancelled: %s",
            result.closure.id,
            len(result.failed),
            ", ".join(item.reservation_id for item in result.failed),
        )
    return out


@admin_router.post("/closures/batch", response_model=ClosureBatchOut)
async def create_closures(
    payload: ClosureBatchIn,
    reservations: ReservationGateway = Depends(get_reservation_gateway),
    closures: ClosureGateway = Depends(get_closure_gateway),
    notifier: Notifier = Depends(get_notifier),
) -> ClosureBatchOut:
    if redis_module.redis_client is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Redis unavailable")

    days = [closure.closure_date for closure in payload.closures]
    lock_token = str(uuid4())
    if not await _lock_dates(days, lock_token):
        raise HTTPException(status.HTTP_409_CONFLICT, detail="Another closure for one of these dates is being applied")

    try:
        batch = await apply_closures(
            payload.closures,
            force=payload.force_cancel_reservations,
            reservations=reservations,
            closures=closures,
            notifier=notifier,
        )
    finally:
        await _unlock_dates(days, lock_token)
    return ClosureBatchOut.from_batch(batch)


@admin_router.get("/closures/stats", response_model=ClosureStatisticsOut)
async def closure_stats(
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> ClosureStatisticsOut:
    closures = await fetch_closures(session, date_from=date_from, date_to=date_to)
    reservations = []
    if closures:
        reservations = await fetch_reservations_between(
            session,
            closures[0].closure_date,
            closures[-1].closure_date,
        )
    stats = closure_statistics(closures, reservations, date_from, date_to)
    return ClosureStatisticsOut.model_validate(stats)


@admin_router.delete("/closures/{closure_id}")
async def remove_closure(
    closure_id: UUID,
    session: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    try:
        await delete_closure(session, str(closure_id))
        await session.commit()
    except ClosureNotFound as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"deleted": True}
