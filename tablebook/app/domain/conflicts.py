"""Conflicts between a proposed closure and existing reservations."""
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, time

from tablebook.app.domain.closures import window_overlap
from tablebook.app.domain.models import Closure, Reservation, ReservationStatus


@dataclass(frozen=True)
class ConflictSummary:
    total_reservations: int = 0
    total_guests: int = 0
    time_range: tuple[time, time] | None = None
    has_special_requests: bool = False


@dataclass(frozen=True)
class ConflictReport:
    conflicts: list[Reservation] = field(default_factory=list)
    summary: ConflictSummary = field(default_factory=ConflictSummary)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


@dataclass(frozen=True)
class ClosureStatistics:
    total_closures: int = 0
    all_day_closures: int = 0
    partial_closures: int = 0
    affected_reservations: int = 0
    most_common_reason: str | None = None


def find_conflicts(closure: Closure, reservations: Iterable[Reservation]) -> list[Reservation]:
    """Confirmed reservations on the closure's date that fall inside its window.

    The result is ordered by time then id so that repeated checks over the same
    data compare equal.
    """
    conflicts = [
        reservation
        for reservation in reservations
        if reservation.status == ReservationStatus.CONFIRMED
        and reservation.reservation_date == closure.closure_date
        and window_overlap(closure, reservation.reservation_time)
    ]
    conflicts.sort(key=lambda reservation: (reservation.reservation_time, reservation.id))
    return conflicts


def summarize_conflicts(conflicts: Sequence[Reservation]) -> ConflictSummary:
    if not conflicts:
        return ConflictSummary()

    times = sorted(reservation.reservation_time for reservation in conflicts)
    return ConflictSummary(
        total_reservations=len(conflicts),
        total_guests=sum(reservation.party_size for reservation in conflicts),
        time_range=(times[0], times[-1]),
        has_special_requests=any(reservation.has_special_requests for reservation in conflicts),
    )


def check_closure_conflicts(closure: Closure, reservations: Iterable[Reservation]) -> ConflictReport:
    conflicts = find_conflicts(closure, reservations)
    return ConflictReport(conflicts=conflicts, summary=summarize_conflicts(conflicts))


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_conflict_details(conflicts: Sequence[Reservation]) -> str:
    """One-line description for the admin confirmation dialog."""
    if not conflicts:
        return "No conflicts found"

    summary = summarize_conflicts(conflicts)
    details = f"{_plural(summary.total_reservations, 'reservation')} ({_plural(summary.total_guests, 'guest')})"
    if summary.time_range:
        earliest, latest = summary.time_range
        details += f" from {earliest.strftime('%H:%M')} to {latest.strftime('%H:%M')}"
    if summary.has_special_requests:
        details += " (includes special requests)"
    return details


def closure_statistics(
    closures: Iterable[Closure],
    reservations: Iterable[Reservation],
    date_from: date | None = None,
    date_to: date | None = None,
) -> ClosureStatistics:
    closures = [
        closure
        for closure in closures
        if (date_from is None or closure.closure_date >= date_from)
        and (date_to is None or closure.closure_date <= date_to)
    ]
    if not closures:
        return ClosureStatistics()

    reservations = list(reservations)
    affected = sum(len(find_conflicts(closure, reservations)) for closure in closures)

    reasons = Counter(
        closure.closure_reason.strip()
        for closure in closures
        if closure.closure_reason and closure.closure_reason.strip()
    )
    most_common = reasons.most_common(1)

    all_day = sum(1 for closure in closures if closure.all_day)
    return ClosureStatistics(
        total_closures=len(closures),
        all_day_closures=all_day,
        partial_closures=len(closures) - all_day,
        affected_reservations=affected,
        most_common_reason=most_common[0][0] if most_common else None,
    )
