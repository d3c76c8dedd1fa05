from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.app.domain.models import Closure, GlobalSettings, Reservation, TableConfiguration
from tablebook.app.services.closures import fetch_closures_for_date
from tablebook.app.services.reservations import fetch_reservations_for_date
from tablebook.app.services.table_config import fetch_global_settings, fetch_table_configurations


@dataclass(frozen=True)
class BookingSnapshot:
    """Everything an availability decision for one date needs."""

    configs: list[TableConfiguration]
    settings: GlobalSettings
    closures: list[Closure]
    reservations: list[Reservation]


async def load_snapshot(session: AsyncSession, day: date) -> BookingSnapshot:
    return BookingSnapshot(
        configs=await fetch_table_configurations(session),
        settings=await fetch_global_settings(session),
        closures=await fetch_closures_for_date(session, day),
        reservations=await fetch_reservations_for_date(session, day),
    )
