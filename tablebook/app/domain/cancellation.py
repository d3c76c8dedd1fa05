"""Two-phase closure application with cascading cancellation.

Phase one reports conflicts and stops. Phase two (``force=True``) re-reads the
reservations, cancels each conflicting one on its own, notifies the guests
whose reservation was cancelled, and only then stores the closure.
"""
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from tablebook.app.domain.conflicts import ConflictReport, check_closure_conflicts
from tablebook.app.domain.models import Closure, Reservation, ReservationStatus
from tablebook.app.domain.ports import ClosureGateway, Notifier, ReservationGateway

logger = logging.getLogger(__name__)


class ClosureState(str, Enum):
    PROPOSED = "proposed"
    NEEDS_CONFIRMATION = "needs_confirmation"
    APPLIED = "applied"
    # reservations were cancelled but the closure could not be stored
    NOT_STORED = "not_stored"


@dataclass(frozen=True)
class CancellationFailure:
    reservation_id: str
    error: str


@dataclass(frozen=True)
class CancellationPass:
    cancelled: list[Reservation] = field(default_factory=list)
    failed: list[CancellationFailure] = field(default_factory=list)


@dataclass(frozen=True)
class ClosureApplication:
    state: ClosureState
    report: ConflictReport
    closure: Closure
    cancelled: list[str] = field(default_factory=list)
    failed: list[CancellationFailure] = field(default_factory=list)
    notifications_failed: list[str] = field(default_factory=list)
    closure_error: str | None = None

    @property
    def applied(self) -> bool:
        return self.state == ClosureState.APPLIED

    @property
    def needs_confirmation(self) -> bool:
        return self.state == ClosureState.NEEDS_CONFIRMATION


@dataclass(frozen=True)
class BatchItem:
    closure: Closure
    result: ClosureApplication | None = None
    error: str | None = None


@dataclass(frozen=True)
class BatchApplication:
    items: list[BatchItem] = field(default_factory=list)

    @property
    def total_conflicts(self) -> int:
        return sum(len(item.result.report.conflicts) for item in self.items if item.result)

    @property
    def total_cancelled(self) -> int:
        return sum(len(item.result.cancelled) for item in self.items if item.result)

    @property
    def total_failed(self) -> int:
        return sum(len(item.result.failed) for item in self.items if item.result)


async def cancel_reservations(
    conflicts: Iterable[Reservation],
    reservations: ReservationGateway,
) -> CancellationPass:
    """Cancel each reservation independently; a failure never stops the rest."""
    cancelled: list[Reservation] = []
    failed: list[CancellationFailure] = []
    for reservation in conflicts:
        try:
            updated = await reservations.set_status(reservation.id, ReservationStatus.CANCELLED)
        except Exception as exc:
            logger.exception("Failed to cancel reservation %s", reservation.id)
            failed.append(CancellationFailure(reservation.id, str(exc) or exc.__class__.__name__))
            continue
        cancelled.append(updated)
    return CancellationPass(cancelled=cancelled, failed=failed)


async def notify_cancellations(
    cancelled: Iterable[Reservation],
    closure: Closure,
    notifier: Notifier,
) -> list[str]:
    """Send a cancellation notice per reservation; returns ids whose notice failed."""
    undelivered: list[str] = []
    for reservation in cancelled:
        try:
            await notifier.send_cancellation(reservation, closure)
        except Exception:
            # the reservation stays cancelled
            logger.warning("Cancellation notice for reservation %s failed", reservation.id, exc_info=True)
            undelivered.append(reservation.id)
    return undelivered


async def apply_closure(
    closure: Closure,
    *,
    force: bool,
    reservations: ReservationGateway,
    closures: ClosureGateway,
    notifier: Notifier,
) -> ClosureApplication:
    current = await reservations.list_for_date(closure.closure_date)
    report = check_closure_conflicts(closure, current)
    logger.info(
        "Closure %r on %s: %d conflicting reservations",
        closure.closure_name,
        closure.closure_date,
        len(report.conflicts),
    )

    if report.has_conflicts and not force:
        return ClosureApplication(state=ClosureState.NEEDS_CONFIRMATION, report=report, closure=closure)

    outcome = CancellationPass()
    undelivered: list[str] = []
    if report.has_conflicts:
        outcome = await cancel_reservations(report.conflicts, reservations)
        undelivered = await notify_cancellations(outcome.cancelled, closure, notifier)
        logger.info(
            "Cancelled %d reservations for closure %r, %d failed",
            len(outcome.cancelled),
            closure.closure_name,
            len(outcome.failed),
        )

    cancelled = [reservation.id for reservation in outcome.cancelled]
    try:
        saved = await closures.add(closure)
    except Exception as exc:
        logger.exception(
            "Failed to store closure %r on %s after cancelling %d reservations",
            closure.closure_name,
            closure.closure_date,
            len(cancelled),
        )
        return ClosureApplication(
            state=ClosureState.NOT_STORED,
            report=report,
            closure=closure,
            cancelled=cancelled,
            failed=outcome.failed,
            notifications_failed=undelivered,
            closure_error=str(exc) or exc.__class__.__name__,
        )

    return ClosureApplication(
        state=ClosureState.APPLIED,
        report=report,
        closure=saved,
        cancelled=cancelled,
        failed=outcome.failed,
        notifications_failed=undelivered,
    )


async def apply_closures(
    proposed: Sequence[Closure],
    *,
    force: bool,
    reservations: ReservationGateway,
    closures: ClosureGateway,
    notifier: Notifier,
) -> BatchApplication:
    """Apply several closures; an error on one is recorded and the rest continue."""
    items: list[BatchItem] = []
    for closure in proposed:
        try:
            result = await apply_closure(
                closure,
                force=force,
                reservations=reservations,
                closures=closures,
                notifier=notifier,
            )
        except Exception as exc:
            logger.exception("Failed to apply closure %r on %s", closure.closure_name, closure.closure_date)
            items.append(BatchItem(closure=closure, error=str(exc) or exc.__class__.__name__))
            continue
        items.append(BatchItem(closure=closure, result=result, error=result.closure_error))

    batch = BatchApplication(items=items)
    logger.info(
        "Batch closure run: %d conflicts, %d cancelled, %d failed",
        batch.total_conflicts,
        batch.total_cancelled,
        batch.total_failed,
    )
    return batch
