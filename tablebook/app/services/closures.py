from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.domain.errors import ClosureNotFound
from tablebook.app.domain.models import Closure


CLOSURE_COLUMNS = """
    id::text AS id, closure_date, closure_name, closure_reason,
    all_day, start_time, end_time
"""


async def fetch_closures(
    session: AsyncSession,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Closure]:
    result = await session.execute(
        text(
            f"""
            SELECT {CLOSURE_COLUMNS}
            FROM restaurant_closures
            WHERE (CAST(:date_from AS date) IS NULL OR closure_date >= :date_from)
              AND (CAST(:date_to AS date) IS NULL OR closure_date <= :date_to)
            ORDER BY closure_date, start_time NULLS FIRST
            """
        ),
        {"date_from": date_from, "date_to": date_to},
    )
    return [Closure.model_validate(dict(row)) for row in result.mappings().all()]


async def fetch_closures_for_date(session: AsyncSession, day: date) -> list[Closure]:
    return await fetch_closures(session, date_from=day, date_to=day)


async def insert_closure(session: AsyncSession, closure: Closure) -> Closure:
    result = await session.execute(
        text(
            f"""
            INSERT INTO restaurant_closures (
              closure_date, closure_name, closure_reason, all_day, start_time, end_time
            ) VALUES (
              :closure_date, :closure_name, :closure_reason, :all_day, :start_time, :end_time
            )
            RETURNING {CLOSURE_COLUMNS}
            """
        ),
        {
            "closure_date": closure.closure_date,
            "closure_name": closure.closure_name,
            "closure_reason": closure.closure_reason,
            "all_day": closure.all_day,
            "start_time": closure.start_time,
            "end_time": closure.end_time,
        },
    )
    return Closure.model_validate(dict(result.mappings().one()))


async def delete_closure(session: AsyncSession, closure_id: str) -> None:
    result = await session.execute(
        text("DELETE FROM restaurant_closures WHERE id = CAST(:id AS uuid) RETURNING id"),
        {"id": closure_id},
    )
    if result.first() is None:
        raise ClosureNotFound(f"Closure {closure_id} not found")


class SqlClosureGateway:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, closure: Closure) -> Closure:
        try:
            saved = await insert_closure(self._session, closure)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return saved
