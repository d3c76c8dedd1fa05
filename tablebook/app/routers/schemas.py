import datetime as dt
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tablebook.app.domain.availability import SlotAvailability, UnavailableReason
from tablebook.app.domain.cancellation import BatchApplication, ClosureApplication
from tablebook.app.domain.conflicts import ConflictReport, format_conflict_details
from tablebook.app.domain.models import (
    Closure,
    GlobalSettings,
    Reservation,
    ReservationStatus,
    TableConfiguration,
)

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class ReservationIn(BaseModel):
    name: str = Field(min_length=2, max_length=100, pattern=r"^[A-Za-z\s\-']+$")
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(default=None, max_length=32)
    party_size: int = Field(ge=1, le=50)
    reservation_date: dt.date
    # "HH:MM", aligned to a slot
    reservation_time: dt.time
    special_requests: str | None = Field(default=None, max_length=500)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        if not value:
            return None
        digits = re.sub(r"\D", "", value)
        if not 10 <= len(digits) <= 15:
            raise ValueError("Please enter a valid phone number")
        return value


class ReservationCreatedOut(BaseModel):
    id: str
    name: str
    reservation_date: dt.date
    reservation_time: dt.time
    party_size: int
    status: ReservationStatus


class StatusUpdateIn(BaseModel):
    status: ReservationStatus


class SlotOut(BaseModel):
    time: dt.time
    available: bool
    reason: UnavailableReason | None = None
    closure_name: str | None = None

    @classmethod
    def from_slot(cls, slot: SlotAvailability) -> "SlotOut":
        return cls(time=slot.time, available=slot.available, reason=slot.reason, closure_name=slot.closure_name)


class AvailableSlotsOut(BaseModel):
    date: dt.date
    party_size: int
    slots: list[SlotOut]


class BookableDatesOut(BaseModel):
    dates: list[dt.date]
    party_sizes: list[int]
    global_settings: GlobalSettings


class AvailabilityCheckIn(BaseModel):
    reservation_date: dt.date
    reservation_time: dt.time
    party_size: int = Field(ge=1, le=50)


class AvailabilityCheckOut(BaseModel):
    available: bool
    reservation_date: dt.date
    reservation_time: dt.time
    party_size: int


class ClosureIn(Closure):
    force_cancel_reservations: bool = False

    def to_closure(self) -> Closure:
        return Closure(**self.model_dump(exclude={"id", "force_cancel_reservations"}))


class ClosureBatchIn(BaseModel):
    closures: list[Closure] = Field(min_length=1)
    force_cancel_reservations: bool = False


class ConflictCheckIn(Closure):
    closure_name: str = Field(default="Temporary Check", min_length=1, max_length=100)

    def to_closure(self) -> Closure:
        return Closure(**self.model_dump(exclude={"id"}))


class ConflictingReservationOut(BaseModel):
    id: str
    name: str
    email: str
    reservation_time: dt.time
    party_size: int
    special_requests: str | None = None

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ConflictingReservationOut":
        return cls(
            id=reservation.id,
            name=reservation.name,
            email=reservation.email,
            reservation_time=reservation.reservation_time,
            party_size=reservation.party_size,
            special_requests=reservation.special_requests,
        )


class TimeRangeOut(BaseModel):
    earliest: dt.time
    latest: dt.time


class ConflictSummaryOut(BaseModel):
    total_reservations: int
    total_guests: int
    time_range: TimeRangeOut | None = None
    has_special_requests: bool


class ConflictReportOut(BaseModel):
    has_conflicts: bool
    conflict_count: int
    summary: ConflictSummaryOut
    details: str
    conflicting_reservations: list[ConflictingReservationOut]

    @classmethod
    def from_report(cls, report: ConflictReport) -> "ConflictReportOut":
        summary = report.summary
        time_range = None
        if summary.time_range:
            time_range = TimeRangeOut(earliest=summary.time_range[0], latest=summary.time_range[1])
        return cls(
            has_conflicts=report.has_conflicts,
            conflict_count=len(report.conflicts),
            summary=ConflictSummaryOut(
                total_reservations=summary.total_reservations,
                total_guests=summary.total_guests,
                time_range=time_range,
                has_special_requests=summary.has_special_requests,
            ),
            details=format_conflict_details(report.conflicts),
            conflicting_reservations=[
                ConflictingReservationOut.from_reservation(reservation) for reservation in report.conflicts
            ],
        )


class CancellationFailureOut(BaseModel):
    id: str
    error: str


class ClosureApplyOut(BaseModel):
    applied: bool
    needs_confirmation: bool
    closure: Closure
    cancelled: list[str]
    failed: list[CancellationFailureOut]
    notifications_failed: list[str]
    closure_error: str | None = None
    conflicts: ConflictReportOut

    @classmethod
    def from_result(cls, result: ClosureApplication) -> "ClosureApplyOut":
        return cls(
            applied=result.applied,
            needs_confirmation=result.needs_confirmation,
            closure=result.closure,
            cancelled=result.cancelled,
            failed=[CancellationFailureOut(id=item.reservation_id, error=item.error) for item in result.failed],
            notifications_failed=result.notifications_failed,
            closure_error=result.closure_error,
            conflicts=ConflictReportOut.from_report(result.report),
        )


class ClosureBatchItemOut(BaseModel):
    closure: Closure
    result: ClosureApplyOut | None = None
    error: str | None = None


class ClosureBatchOut(BaseModel):
    total_conflicts: int
    total_cancelled: int
    total_failed: int
    results: list[ClosureBatchItemOut]

    @classmethod
    def from_batch(cls, batch: BatchApplication) -> "ClosureBatchOut":
        return cls(
            total_conflicts=batch.total_conflicts,
            total_cancelled=batch.total_cancelled,
            total_failed=batch.total_failed,
            results=[
                ClosureBatchItemOut(
                    closure=item.closure,
                    result=ClosureApplyOut.from_result(item.result) if item.result else None,
                    error=item.error,
                )
                for item in batch.items
            ],
        )


class ClosureStatisticsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_closures: int
    all_day_closures: int
    partial_closures: int
    affected_reservations: int
    most_common_reason: str | None = None


class TableConfigPayload(BaseModel):
    table_configs: list[TableConfiguration]
    global_settings: GlobalSettings


class TableConfigOut(TableConfigPayload):
    bookable_party_sizes: list[int]


class ScheduleSlotOut(BaseModel):
    time: dt.time
    closed: bool
    closure_name: str | None = None
    reservation_ids: list[str]
    covers: int


class ScheduleOut(BaseModel):
    date: dt.date
    opens_at: dt.time | None = None
    closes_at: dt.time | None = None
    closures: list[Closure]
    slots: list[ScheduleSlotOut]
