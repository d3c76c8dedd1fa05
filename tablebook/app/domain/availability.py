"""Availability decisions for booking attempts.

Every function here answers from the snapshot it is given. Re-checking at
commit time is the caller's job.
"""
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from tablebook.app.domain.capacity import bookable_party_sizes, capacity_for
from tablebook.app.domain.closures import blocking_closure, is_fully_closed
from tablebook.app.domain.hours import opening_hours, slots_for_date
from tablebook.app.domain.models import (
    Closure,
    GlobalSettings,
    Reservation,
    ReservationStatus,
    TableConfiguration,
)

ALT_LOOKAHEAD = 4


class UnavailableReason(str, Enum):
    UNSUPPORTED_PARTY_SIZE = "unsupported_party_size"
    OUTSIDE_OPERATING_HOURS = "outside_operating_hours"
    CLOSED = "closed"
    SLOT_FULL = "slot_full"
    PAST_ADVANCE_WINDOW = "past_advance_window"


REASON_MESSAGES: dict[UnavailableReason, str] = {
    UnavailableReason.UNSUPPORTED_PARTY_SIZE: "We do not currently take reservations for this party size.",
    UnavailableReason.OUTSIDE_OPERATING_HOURS: "This time is outside our opening hours.",
    UnavailableReason.CLOSED: "We are closed at this time.",
    UnavailableReason.SLOT_FULL: "This time slot is fully booked. Please select a different time.",
    UnavailableReason.PAST_ADVANCE_WINDOW: "Reservations must be in the future and within the booking window.",
}


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: UnavailableReason | None = None

    @classmethod
    def ok(cls) -> "AvailabilityResult":
        return cls(available=True)

    @classmethod
    def unavailable(cls, reason: UnavailableReason) -> "AvailabilityResult":
        return cls(available=False, reason=reason)

    @property
    def message(self) -> str | None:
        return REASON_MESSAGES[self.reason] if self.reason else None

    def __bool__(self) -> bool:
        return self.available


@dataclass(frozen=True)
class SlotAvailability:
    time: time
    available: bool
    reason: UnavailableReason | None = None
    closure_name: str | None = None


def occupied_count(day: date, at: time, reservations: Iterable[Reservation]) -> int:
    """Reservations holding the slot, whatever their party size."""
    return sum(
        1
        for reservation in reservations
        if reservation.reservation_date == day
        and reservation.reservation_time == at
        and reservation.status != ReservationStatus.CANCELLED
    )


def is_available(
    day: date,
    at: time,
    party_size: int,
    reservations: Iterable[Reservation],
    configs: Sequence[TableConfiguration],
    closures: Sequence[Closure],
    settings: GlobalSettings,
) -> AvailabilityResult:
    # Order matters: the first failing check is the reason shown to the guest.
    if party_size not in bookable_party_sizes(configs):
        return AvailabilityResult.unavailable(UnavailableReason.UNSUPPORTED_PARTY_SIZE)

    if at not in slots_for_date(day, settings.slot_duration):
        return AvailabilityResult.unavailable(UnavailableReason.OUTSIDE_OPERATING_HOURS)

    if blocking_closure(day, at, closures) is not None:
        return AvailabilityResult.unavailable(UnavailableReason.CLOSED)

    capacity = capacity_for(configs, party_size)
    if occupied_count(day, at, reservations) >= capacity.max_per_slot:
        return AvailabilityResult.unavailable(UnavailableReason.SLOT_FULL)

    return AvailabilityResult.ok()


def _is_past(day: date, at: time, now: datetime) -> bool:
    return datetime.combine(day, at, tzinfo=now.tzinfo) <= now


def within_advance_window(day: date, today: date, settings: GlobalSettings) -> bool:
    return today <= day < today + timedelta(days=settings.advance_booking_days)


def validate_booking_request(
    day: date,
    at: time,
    party_size: int,
    configs: Sequence[TableConfiguration],
    settings: GlobalSettings,
    closures: Sequence[Closure],
    reservations: Sequence[Reservation],
    now: datetime,
) -> AvailabilityResult:
    """Full submission-time check, including the max party size and booking window."""
    if party_size > settings.max_party_size or party_size not in bookable_party_sizes(configs):
        return AvailabilityResult.unavailable(UnavailableReason.UNSUPPORTED_PARTY_SIZE)

    if not within_advance_window(day, now.date(), settings) or _is_past(day, at, now):
        return AvailabilityResult.unavailable(UnavailableReason.PAST_ADVANCE_WINDOW)

    return is_available(day, at, party_size, reservations, configs, closures, settings)


def get_available_slots(
    day: date,
    party_size: int,
    configs: Sequence[TableConfiguration],
    settings: GlobalSettings,
    closures: Sequence[Closure],
    reservations: Sequence[Reservation],
    now: datetime | None = None,
) -> list[SlotAvailability]:
    """Every slot of ``day`` with its availability for ``party_size``.

    Party sizes above ``max_party_size`` and, when ``now`` is given, dates
    outside the advance window are rejected for the whole day, the same way
    ``validate_booking_request`` rejects them.
    """
    whole_day = None
    if party_size > settings.max_party_size:
        whole_day = UnavailableReason.UNSUPPORTED_PARTY_SIZE
    elif now is not None and not within_advance_window(day, now.date(), settings):
        whole_day = UnavailableReason.PAST_ADVANCE_WINDOW
    if whole_day is not None:
        return [SlotAvailability(slot, False, whole_day) for slot in slots_for_date(day, settings.slot_duration)]

    slots: list[SlotAvailability] = []
    for slot in slots_for_date(day, settings.slot_duration):
        if now is not None and _is_past(day, slot, now):
            result = AvailabilityResult.unavailable(UnavailableReason.PAST_ADVANCE_WINDOW)
        else:
            result = is_available(day, slot, party_size, reservations, configs, closures, settings)

        closure_name = None
        if result.reason == UnavailableReason.CLOSED:
            closure_name = blocking_closure(day, slot, closures).closure_name
        slots.append(SlotAvailability(slot, result.available, result.reason, closure_name))
    return slots


def alternate_slots(
    day: date,
    at: time,
    party_size: int,
    configs: Sequence[TableConfiguration],
    settings: GlobalSettings,
    closures: Sequence[Closure],
    reservations: Sequence[Reservation],
    now: datetime | None = None,
    limit: int = ALT_LOOKAHEAD,
) -> list[time]:
    """Up to ``limit`` available slots on ``day`` after ``at``."""
    alternates: list[time] = []
    for slot in get_available_slots(day, party_size, configs, settings, closures, reservations, now):
        if len(alternates) >= limit:
            break
        if slot.time > at and slot.available:
            alternates.append(slot.time)
    return alternates


def bookable_dates(today: date, settings: GlobalSettings, closures: Sequence[Closure]) -> list[date]:
    """Dates of the advance window that are open and not closed all day."""
    dates = []
    for offset in range(settings.advance_booking_days):
        day = today + timedelta(days=offset)
        if opening_hours(day) is None or is_fully_closed(day, closures):
            continue
        dates.append(day)
    return dates
