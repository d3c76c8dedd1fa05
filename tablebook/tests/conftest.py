import pytest

from tablebook.app.domain.models import GlobalSettings, TableConfiguration


@pytest.fixture
def four_tops() -> list[TableConfiguration]:
    return [TableConfiguration(party_size=4, table_count=2, max_reservations_per_slot=2, is_active=True)]


@pytest.fixture
def global_settings() -> GlobalSettings:
    return GlobalSettings(max_party_size=10, slot_duration=30, advance_booking_days=30)
