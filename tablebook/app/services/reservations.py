from datetime import date, time

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.domain.errors import ReservationNotFound
from tablebook.app.domain.models import Reservation, ReservationStatus


RESERVATION_COLUMNS = """
    id::text AS id, name, email, phone, party_size,
    reservation_date, reservation_time, special_requests, status, created_at
"""


async def fetch_reservations_for_date(session: AsyncSession, day: date) -> list[Reservation]:
    result = await session.execute(
        text(
            f"""
            SELECT {RESERVATION_COLUMNS}
            FROM reservations
            WHERE reservation_date = :day
            ORDER BY reservation_time, created_at
            """
        ),
        {"day": day},
    )
    return [Reservation.model_validate(dict(row)) for row in result.mappings().all()]


async def fetch_reservations_between(session: AsyncSession, start: date, end: date) -> list[Reservation]:
    """Reservations with ``start <= reservation_date <= end`` (admin week view)."""
    result = await session.execute(
        text(
            f"""
            SELECT {RESERVATION_COLUMNS}
            FROM reservations
            WHERE reservation_date BETWEEN :start AND :end
            ORDER BY reservation_date, reservation_time, created_at
            """
        ),
        {"start": start, "end": end},
    )
    return [Reservation.model_validate(dict(row)) for row in result.mappings().all()]


async def fetch_reservation(session: AsyncSession, reservation_id: str) -> Reservation:
    result = await session.execute(
        text(f"SELECT {RESERVATION_COLUMNS} FROM reservations WHERE id = CAST(:id AS uuid)"),
        {"id": reservation_id},
    )
    row = result.mappings().one_or_none()
    if row is None:
        raise ReservationNotFound(f"Reservation {reservation_id} not found")
    return Reservation.model_validate(dict(row))


async def insert_reservation(
    session: AsyncSession,
    *,
    name: str,
    email: str,
    phone: str | None,
    party_size: int,
    reservation_date: date,
    reservation_time: time,
    special_requests: str | None,
) -> Reservation:
    """Insert a confirmed reservation and return the stored row."""
    result = await session.execute(
        text(
            f"""
            INSERT INTO reservations (
              name, email, phone, party_size,
              reservation_date, reservation_time, special_requests, status
            ) VALUES (
              :name, :email, :phone, :party,
              :reservation_date, :reservation_time, :special_requests, 'confirmed'
            )
            RETURNING {RESERVATION_COLUMNS}
            """
        ),
        {
            "name": name,
            "email": email,
            "phone": phone,
            "party": party_size,
            "reservation_date": reservation_date,
            "reservation_time": reservation_time,
            "special_requests": special_requests,
        },
    )
    return Reservation.model_validate(dict(result.mappings().one()))


async def update_reservation_status(
    session: AsyncSession,
    reservation_id: str,
    status: ReservationStatus,
) -> Reservation:
    result = await session.execute(
        text(
            f"""
            UPDATE reservations
            SET status = :status, updated_at = NOW()
            WHERE id = CAST(:id AS uuid)
            RETURNING {RESERVATION_COLUMNS}
            """
        ),
        {"id": reservation_id, "status": status.value},
    )
    row = result.mappings().one_or_none()
    if row is None:
        raise ReservationNotFound(f"Reservation {reservation_id} not found")
    return Reservation.model_validate(dict(row))


class SqlReservationGateway:
    """Reservation access for the closure workflow; each status change commits on its own."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_date(self, day: date) -> list[Reservation]:
        return await fetch_reservations_for_date(self._session, day)

    async def set_status(self, reservation_id: str, status: ReservationStatus) -> Reservation:
        try:
            reservation = await update_reservation_status(self._session, reservation_id, status)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return reservation
