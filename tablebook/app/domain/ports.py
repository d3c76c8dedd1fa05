"""Collaborators the closure workflow drives. Persistence and delivery live outside the domain."""
from datetime import date
from typing import Protocol

from tablebook.app.domain.models import Closure, Reservation, ReservationStatus


class ReservationGateway(Protocol):
    async def list_for_date(self, day: date) -> list[Reservation]: ...

    async def set_status(self, reservation_id: str, status: ReservationStatus) -> Reservation: ...


class ClosureGateway(Protocol):
    async def add(self, closure: Closure) -> Closure: ...


class Notifier(Protocol):
    async def send_cancellation(self, reservation: Reservation, closure: Closure | None = None) -> None: ...
