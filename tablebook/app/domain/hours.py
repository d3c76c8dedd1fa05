"""Weekly operating hours and slot generation.

The venue is open every day; closing a specific date (or part of it) is done
with a closure, not here.
"""
from datetime import date, time

# date.weekday(): Monday == 0
SHORT_DAY = (10, 16)
MEDIUM_DAY = (10, 20)
LONG_DAY = (10, 21)

WEEKLY_SCHEDULE: dict[int, tuple[int, int]] = {
    0: SHORT_DAY,   # Monday
    1: SHORT_DAY,   # Tuesday
    2: MEDIUM_DAY,  # Wednesday
    3: MEDIUM_DAY,  # Thursday
    4: LONG_DAY,    # Friday
    5: LONG_DAY,    # Saturday
    6: MEDIUM_DAY,  # Sunday
}


def opening_hours(day: date) -> tuple[time, time] | None:
    """Return the (open, close) band for ``day`` or None when the venue does not open."""
    band = WEEKLY_SCHEDULE.get(day.weekday())
    if band is None:
        return None
    open_hour, close_hour = band
    return time(open_hour), time(close_hour)


def slots_for_date(day: date, slot_minutes: int) -> list[time]:
    """Every ``slot_minutes`` step from opening up to, but excluding, closing."""
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")

    band = WEEKLY_SCHEDULE.get(day.weekday())
    if band is None:
        return []

    open_hour, close_hour = band
    slots: list[time] = []
    minute = open_hour * 60
    while minute < close_hour * 60:
        slots.append(time(minute // 60, minute % 60))
        minute += slot_minutes
    return slots
