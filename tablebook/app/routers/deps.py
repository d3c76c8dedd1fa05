from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.core.config import settings
from tablebook.app.db.session import get_session
from tablebook.app.domain.ports import ClosureGateway, ReservationGateway
from tablebook.app.services.closures import SqlClosureGateway
from tablebook.app.services.reservations import SqlReservationGateway


async def require_admin(authorization: str | None = Header(default=None)) -> None:
    """Bearer-token gate for the admin console."""
    if not settings.ADMIN_TOKEN or authorization != f"Bearer {settings.ADMIN_TOKEN}":
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_reservation_gateway(session: AsyncSession = Depends(get_session)) -> ReservationGateway:
    return SqlReservationGateway(session)


def get_closure_gateway(session: AsyncSession = Depends(get_session)) -> ClosureGateway:
    return SqlClosureGateway(session)


def local_now() -> datetime:
    """Current time at the restaurant."""
    return datetime.now(ZoneInfo(settings.RESTAURANT_TIMEZONE))
