"""Exception hierarchy for the booking engine."""


class TableBookError(Exception):
    """Base exception."""


class PartySizeNotFound(TableBookError):
    """Party size is not configured or not active."""

    def __init__(self, party_size: int) -> None:
        super().__init__(f"No active table configuration for party size {party_size}")
        self.party_size = party_size


class InvalidTableConfiguration(TableBookError):
    """Table configuration set violates a business rule."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class InvalidStatusTransition(TableBookError):
    """Reservation status change is not part of the lifecycle."""


class ReservationNotFound(TableBookError):
    """Reservation lookup failed."""


class ClosureNotFound(TableBookError):
    """Closure lookup failed."""


class NotificationError(TableBookError):
    """Cancellation notice could not be delivered."""
