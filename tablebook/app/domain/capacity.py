from collections import Counter
from collections.abc import Iterable
from typing import NamedTuple

from tablebook.app.domain.errors import InvalidTableConfiguration, PartySizeNotFound
from tablebook.app.domain.models import TableConfiguration


class Capacity(NamedTuple):
    table_count: int
    max_per_slot: int


def bookable_party_sizes(configs: Iterable[TableConfiguration]) -> list[int]:
    """Sorted, distinct party sizes of the active configurations."""
    return sorted({config.party_size for config in configs if config.is_active})


def capacity_for(configs: Iterable[TableConfiguration], party_size: int) -> Capacity:
    for config in configs:
        if config.party_size == party_size and config.is_active:
            return Capacity(config.table_count, config.max_reservations_per_slot)
    raise PartySizeNotFound(party_size)


def validate_table_configurations(configs: Iterable[TableConfiguration]) -> None:
    """Reject a configuration set before it is saved.

    Nothing is corrected: a slot cap above the table count (when tables are
    counted) or a party size listed twice is reported back to the caller.
    """
    configs = list(configs)
    errors: list[str] = []

    counts = Counter(config.party_size for config in configs)
    for party_size in sorted(size for size, seen in counts.items() if seen > 1):
        errors.append(f"Party size {party_size} is configured more than once")

    for config in configs:
        if config.table_count > 0 and config.max_reservations_per_slot > config.table_count:
            errors.append(
                f"Party size {config.party_size}: max reservations per slot "
                f"({config.max_reservations_per_slot}) cannot exceed table count ({config.table_count})"
            )

    if errors:
        raise InvalidTableConfiguration(errors)
