from datetime import date, datetime, time

import pytest

from tablebook.app.domain.availability import (
    AvailabilityResult,
    UnavailableReason,
    alternate_slots,
    bookable_dates,
    get_available_slots,
    is_available,
    validate_booking_request,
)
from tablebook.app.domain.models import GlobalSettings, ReservationStatus, TableConfiguration
from tablebook.tests.factories import BEFORE_SUNDAY, SUNDAY, make_closure, make_reservation


SIX_PM = time(18, 0)


def test_slot_full_when_cap_reached(four_tops, global_settings):
    reservations = [make_reservation("18:00"), make_reservation("18:00")]

    result = is_available(SUNDAY, SIX_PM, 4, reservations, four_tops, [], global_settings)

    assert result == AvailabilityResult.unavailable(UnavailableReason.SLOT_FULL)
    assert not result


def test_unconfigured_party_size(four_tops, global_settings):
    result = is_available(SUNDAY, SIX_PM, 2, [], four_tops, [], global_settings)

    assert result.reason == UnavailableReason.UNSUPPORTED_PARTY_SIZE


def test_inactive_party_size(global_settings):
    configs = [TableConfiguration(party_size=4, table_count=2, max_reservations_per_slot=2, is_active=False)]

    result = is_available(SUNDAY, SIX_PM, 4, [], configs, [], global_settings)

    assert result.reason == UnavailableReason.UNSUPPORTED_PARTY_SIZE


def test_available_with_one_seat_left(four_tops, global_settings):
    result = is_available(SUNDAY, SIX_PM, 4, [make_reservation("18:00")], four_tops, [], global_settings)

    assert result == AvailabilityResult.ok()
    assert result.message is None


def test_cancelled_reservations_do_not_hold_the_slot(four_tops, global_settings):
    reservations = [
        make_reservation("18:00"),
        make_reservation("18:00", status=ReservationStatus.CANCELLED),
    ]

    assert is_available(SUNDAY, SIX_PM, 4, reservations, four_tops, [], global_settings)


def test_slot_cap_counts_every_party_size(global_settings):
    configs = [
        TableConfiguration(party_size=2, table_count=4, max_reservations_per_slot=3),
        TableConfiguration(party_size=4, table_count=2, max_reservations_per_slot=2),
    ]
    reservations = [make_reservation("18:00", party_size=2), make_reservation("18:00", party_size=2)]

    assert is_available(SUNDAY, SIX_PM, 2, reservations, configs, [], global_settings)
    assert is_available(SUNDAY, SIX_PM, 4, reservations, configs, [], global_settings).reason == (
        UnavailableReason.SLOT_FULL
    )


def test_reservations_at_other_slots_are_ignored(four_tops, global_settings):
    reservations = [
        make_reservation("18:30"),
        make_reservation("18:30"),
        make_reservation("18:00", day=date(2025, 6, 8)),
        make_reservation("18:00", day=date(2025, 6, 8)),
    ]

    assert is_available(SUNDAY, SIX_PM, 4, reservations, four_tops, [], global_settings)


@pytest.mark.parametrize("at", [time(9, 30), time(20, 0), time(18, 15)])
def test_outside_operating_hours(four_tops, global_settings, at):
    result = is_available(SUNDAY, at, 4, [], four_tops, [], global_settings)

    assert result.reason == UnavailableReason.OUTSIDE_OPERATING_HOURS


def test_closed_by_partial_closure_boundary(four_tops, global_settings):
    closures = [make_closure("16:00", "18:00")]

    assert is_available(SUNDAY, SIX_PM, 4, [], four_tops, closures, global_settings).reason == (
        UnavailableReason.CLOSED
    )
    assert is_available(SUNDAY, time(18, 30), 4, [], four_tops, closures, global_settings)


def test_reason_ordering(four_tops, global_settings):
    closures = [make_closure()]
    full = [make_reservation("18:00"), make_reservation("18:00")]

    # unsupported size wins over hours, closure and capacity
    assert is_available(SUNDAY, time(22, 0), 3, full, four_tops, closures, global_settings).reason == (
        UnavailableReason.UNSUPPORTED_PARTY_SIZE
    )
    # hours win over closure
    assert is_available(SUNDAY, time(22, 0), 4, full, four_tops, closures, global_settings).reason == (
        UnavailableReason.OUTSIDE_OPERATING_HOURS
    )
    # closure wins over capacity
    assert is_available(SUNDAY, SIX_PM, 4, full, four_tops, closures, global_settings).reason == (
        UnavailableReason.CLOSED
    )


def test_zero_slot_cap_is_always_full(global_settings):
    configs = [TableConfiguration(party_size=4, table_count=0, max_reservations_per_slot=0)]

    assert is_available(SUNDAY, SIX_PM, 4, [], configs, [], global_settings).reason == UnavailableReason.SLOT_FULL


class TestValidateBookingRequest:
    def test_accepts_open_slot(self, four_tops, global_settings):
        result = validate_booking_request(SUNDAY, SIX_PM, 4, four_tops, global_settings, [], [], BEFORE_SUNDAY)

        assert result.available

    def test_party_above_max_is_unsupported(self, global_settings):
        configs = [TableConfiguration(party_size=12, table_count=1, max_reservations_per_slot=1)]

        result = validate_booking_request(SUNDAY, SIX_PM, 12, configs, global_settings, [], [], BEFORE_SUNDAY)

        assert result.reason == UnavailableReason.UNSUPPORTED_PARTY_SIZE

    def test_past_date(self, four_tops, global_settings):
        now = datetime(2025, 6, 2, 9, 0)

        result = validate_booking_request(SUNDAY, SIX_PM, 4, four_tops, global_settings, [], [], now)

        assert result.reason == UnavailableReason.PAST_ADVANCE_WINDOW

    def test_earlier_today(self, four_tops, global_settings):
        now = datetime(2025, 6, 1, 18, 0)

        result = validate_booking_request(SUNDAY, SIX_PM, 4, four_tops, global_settings, [], [], now)

        assert result.reason == UnavailableReason.PAST_ADVANCE_WINDOW
        assert validate_booking_request(
            SUNDAY, time(18, 30), 4, four_tops, global_settings, [], [], now
        ).available

    def test_beyond_advance_window(self, four_tops):
        settings = GlobalSettings(advance_booking_days=7)

        last_day = validate_booking_request(
            SUNDAY, SIX_PM, 4, four_tops, settings, [], [], datetime(2025, 5, 26, 8, 0)
        )
        too_far = validate_booking_request(
            SUNDAY, SIX_PM, 4, four_tops, settings, [], [], datetime(2025, 5, 25, 8, 0)
        )

        assert last_day.available
        assert too_far.reason == UnavailableReason.PAST_ADVANCE_WINDOW

    def test_unsupported_size_reported_before_window(self, four_tops, global_settings):
        now = datetime(2025, 7, 1, 9, 0)

        result = validate_booking_request(SUNDAY, SIX_PM, 2, four_tops, global_settings, [], [], now)

        assert result.reason == UnavailableReason.UNSUPPORTED_PARTY_SIZE

    def test_falls_through_to_capacity(self, four_tops, global_settings):
        reservations = [make_reservation("18:00"), make_reservation("18:00")]

        result = validate_booking_request(
            SUNDAY, SIX_PM, 4, four_tops, global_settings, [], reservations, BEFORE_SUNDAY
        )

        assert result.reason == UnavailableReason.SLOT_FULL
        assert result.message.startswith("This time slot is fully booked")


def test_available_slots_cover_the_day(four_tops, global_settings):
    closures = [make_closure("12:00", "13:00", name="Staff lunch")]
    reservations = [make_reservation("18:00"), make_reservation("18:00")]

    slots = get_available_slots(SUNDAY, 4, four_tops, global_settings, closures, reservations)
    by_time = {slot.time: slot for slot in slots}

    assert len(slots) == 20
    assert by_time[time(10, 0)].available
    assert by_time[time(12, 30)].reason == UnavailableReason.CLOSED
    assert by_time[time(12, 30)].closure_name == "Staff lunch"
    assert by_time[time(13, 0)].reason == UnavailableReason.CLOSED
    assert by_time[time(13, 30)].available
    assert by_time[SIX_PM].reason == UnavailableReason.SLOT_FULL
    assert by_time[SIX_PM].closure_name is None


def test_available_slots_mark_past_times(four_tops, global_settings):
    now = datetime(2025, 6, 1, 14, 10)

    slots = get_available_slots(SUNDAY, 4, four_tops, global_settings, [], [], now=now)

    past = [slot.time for slot in slots if slot.reason == UnavailableReason.PAST_ADVANCE_WINDOW]
    assert past[-1] == time(14, 0)
    assert all(slot.available for slot in slots if slot.time > time(14, 0))


def test_available_slots_reject_dates_beyond_the_window(four_tops):
    settings = GlobalSettings(advance_booking_days=7)
    now = datetime(2025, 5, 1, 9, 0)

    slots = get_available_slots(SUNDAY, 4, four_tops, settings, [], [], now=now)

    assert len(slots) == 20
    assert all(slot.reason == UnavailableReason.PAST_ADVANCE_WINDOW for slot in slots)
    assert not validate_booking_request(SUNDAY, SIX_PM, 4, four_tops, settings, [], [], now)


def test_available_slots_reject_parties_above_max(global_settings):
    configs = [TableConfiguration(party_size=12, table_count=1, max_reservations_per_slot=1)]

    slots = get_available_slots(SUNDAY, 12, configs, global_settings, [], [], now=BEFORE_SUNDAY)

    assert len(slots) == 20
    assert not any(slot.available for slot in slots)
    assert {slot.reason for slot in slots} == {UnavailableReason.UNSUPPORTED_PARTY_SIZE}


def test_alternates_skip_full_and_closed_slots(four_tops, global_settings):
    closures = [make_closure("18:30", "19:00")]
    reservations = [make_reservation("18:00"), make_reservation("18:00")]

    alternates = alternate_slots(SUNDAY, SIX_PM, 4, four_tops, global_settings, closures, reservations)

    assert alternates == [time(19, 30)]


def test_alternates_are_limited(four_tops, global_settings):
    alternates = alternate_slots(SUNDAY, time(10, 0), 4, four_tops, global_settings, [], [], limit=3)

    assert alternates == [time(10, 30), time(11, 0), time(11, 30)]


def test_bookable_dates_skip_all_day_closures():
    settings = GlobalSettings(advance_booking_days=5)
    closures = [make_closure(day=date(2025, 6, 3)), make_closure("17:00", "19:00", day=date(2025, 6, 4))]

    dates = bookable_dates(SUNDAY, settings, closures)

    assert dates == [date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 4), date(2025, 6, 5)]
