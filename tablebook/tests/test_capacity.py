import pytest

from tablebook.app.domain.capacity import (
    Capacity,
    bookable_party_sizes,
    capacity_for,
    validate_table_configurations,
)
from tablebook.app.domain.errors import InvalidTableConfiguration, PartySizeNotFound
from tablebook.app.domain.models import TableConfiguration


CONFIGS = [
    TableConfiguration(party_size=6, table_count=2, max_reservations_per_slot=1),
    TableConfiguration(party_size=2, table_count=6, max_reservations_per_slot=3),
    TableConfiguration(party_size=4, table_count=0, max_reservations_per_slot=5),
    TableConfiguration(party_size=8, table_count=1, max_reservations_per_slot=1, is_active=False),
]


def test_bookable_party_sizes_are_sorted_and_active_only():
    assert bookable_party_sizes(CONFIGS) == [2, 4, 6]


def test_bookable_party_sizes_empty():
    assert bookable_party_sizes([]) == []


def test_capacity_for_known_size():
    assert capacity_for(CONFIGS, 2) == Capacity(table_count=6, max_per_slot=3)


def test_capacity_for_untracked_tables():
    assert capacity_for(CONFIGS, 4) == Capacity(table_count=0, max_per_slot=5)


@pytest.mark.parametrize("party_size", [3, 8])
def test_capacity_for_absent_or_inactive_size(party_size):
    with pytest.raises(PartySizeNotFound) as excinfo:
        capacity_for(CONFIGS, party_size)

    assert excinfo.value.party_size == party_size


def test_valid_configuration_passes():
    validate_table_configurations(CONFIGS)


def test_slot_cap_above_table_count_is_rejected():
    configs = [TableConfiguration(party_size=4, table_count=2, max_reservations_per_slot=3)]

    with pytest.raises(InvalidTableConfiguration) as excinfo:
        validate_table_configurations(configs)

    assert "cannot exceed table count" in excinfo.value.errors[0]


def test_slot_cap_is_free_without_table_count():
    validate_table_configurations([TableConfiguration(party_size=4, table_count=0, max_reservations_per_slot=9)])


def test_duplicate_party_size_is_rejected():
    configs = [
        TableConfiguration(party_size=2, table_count=4, max_reservations_per_slot=2),
        TableConfiguration(party_size=2, table_count=4, max_reservations_per_slot=1),
    ]

    with pytest.raises(InvalidTableConfiguration) as excinfo:
        validate_table_configurations(configs)

    assert excinfo.value.errors == ["Party size 2 is configured more than once"]
