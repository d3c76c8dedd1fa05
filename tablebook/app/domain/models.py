from datetime import date, datetime, time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tablebook.app.domain.errors import InvalidStatusTransition


SLOT_DURATIONS = (15, 30, 60)

# string spellings pydantic accepts as True for a bool field
TRUE_STRINGS = frozenset({"1", "on", "t", "true", "y", "yes"})


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# cancelled -> confirmed is the only way back
ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.NO_SHOW, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CANCELLED: frozenset({ReservationStatus.CONFIRMED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}


def ensure_transition(current: ReservationStatus, target: ReservationStatus) -> None:
    """Raise InvalidStatusTransition unless ``current -> target`` is a lifecycle step.

    Re-applying the current status is accepted as a no-op.
    """
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(
            f"Cannot change reservation status from {current.value} to {target.value}"
        )


class Reservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    phone: str | None = None
    party_size: int = Field(ge=1)
    reservation_date: date
    reservation_time: time
    special_requests: str | None = None
    status: ReservationStatus = ReservationStatus.CONFIRMED
    created_at: datetime | None = None

    @property
    def has_special_requests(self) -> bool:
        return bool(self.special_requests and self.special_requests.strip())


class TableConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    party_size: int = Field(ge=1, le=50)
    # 0 means no physical-table constraint, only max_reservations_per_slot applies
    table_count: int = Field(default=0, ge=0, le=100)
    max_reservations_per_slot: int = Field(default=1, ge=0, le=50)
    is_active: bool = True


class GlobalSettings(BaseModel):
    """Snapshot of the venue-wide booking settings."""

    model_config = ConfigDict(frozen=True)

    max_party_size: int = Field(default=10, ge=1, le=50)
    slot_duration: int = 30
    advance_booking_days: int = Field(default=30, ge=1, le=90)

    @field_validator("slot_duration")
    @classmethod
    def _check_slot_duration(cls, value: int) -> int:
        if value not in SLOT_DURATIONS:
            allowed = ", ".join(str(minutes) for minutes in SLOT_DURATIONS)
            raise ValueError(f"slot_duration must be one of {allowed} minutes")
        return value


def _is_all_day(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


class Closure(BaseModel):
    """A full-day or time-bounded closure of the venue on one date.

    All-day closures never carry times. A partial closure always carries both
    ``start_time`` and ``end_time`` with ``start_time < end_time``; anything
    else fails validation.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    closure_date: date
    closure_name: str = Field(min_length=1, max_length=100)
    closure_reason: str | None = Field(default=None, max_length=255)
    all_day: bool = True
    start_time: time | None = None
    end_time: time | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalise_times(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {key: (None if value == "" else value) for key, value in data.items()}
            if _is_all_day(data.get("all_day", True)):
                data["start_time"] = None
                data["end_time"] = None
        return data

    @model_validator(mode="after")
    def _check_window(self) -> "Closure":
        if not self.all_day:
            if self.start_time is None or self.end_time is None:
                raise ValueError("Start and end times are required for partial day closures")
            if self.start_time >= self.end_time:
                raise ValueError("Start time must be before end time")
        return self
