from datetime import date, datetime, time, timedelta

import pytest

from tablebook.app.domain.hours import opening_hours, slots_for_date


MONDAY = date(2025, 6, 2)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


@pytest.mark.parametrize(
    ("day", "band"),
    [
        (date(2025, 6, 2), (time(10), time(16))),  # Monday
        (date(2025, 6, 3), (time(10), time(16))),  # Tuesday
        (date(2025, 6, 4), (time(10), time(20))),  # Wednesday
        (date(2025, 6, 5), (time(10), time(20))),  # Thursday
        (date(2025, 6, 6), (time(10), time(21))),  # Friday
        (date(2025, 6, 7), (time(10), time(21))),  # Saturday
        (date(2025, 6, 1), (time(10), time(20))),  # Sunday
    ],
)
def test_weekly_bands(day, band):
    assert opening_hours(day) == band


@pytest.mark.parametrize("slot_minutes", [15, 30, 60])
@pytest.mark.parametrize("offset", range(7))
def test_slots_stay_inside_half_open_band(offset, slot_minutes):
    day = MONDAY + timedelta(days=offset)
    open_at, close_at = opening_hours(day)

    slots = slots_for_date(day, slot_minutes)

    assert slots[0] == open_at
    assert all(open_at <= slot < close_at for slot in slots)
    assert close_at not in slots
    gaps = {_minutes(b) - _minutes(a) for a, b in zip(slots, slots[1:])}
    assert gaps == {slot_minutes}
    assert _minutes(slots[-1]) + slot_minutes >= _minutes(close_at)


def test_sunday_half_hour_slots():
    slots = slots_for_date(date(2025, 6, 1), 30)

    assert len(slots) == 20
    assert slots[-1] == time(19, 30)
    assert time(18, 0) in slots


def test_non_dividing_duration_stops_before_close():
    slots = slots_for_date(MONDAY, 45)

    assert slots[-1] == time(15, 15)
    assert len(slots) == 8


def test_slot_minutes_must_be_positive():
    with pytest.raises(ValueError):
        slots_for_date(MONDAY, 0)


def test_slots_are_plain_times():
    slots = slots_for_date(datetime(2025, 6, 6, 9, 0).date(), 60)

    assert slots == [time(hour) for hour in range(10, 21)]
