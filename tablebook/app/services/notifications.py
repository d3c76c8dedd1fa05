import asyncio
import logging
from functools import lru_cache

from twilio.rest import Client

from tablebook.app.core.config import settings
from tablebook.app.domain.errors import NotificationError
from tablebook.app.domain.models import Closure, Reservation
from tablebook.app.domain.ports import Notifier

logger = logging.getLogger(__name__)


def cancellation_message(reservation: Reservation, closure: Closure | None, restaurant_name: str) -> str:
    when = f"{reservation.reservation_date:%A, %B %d} at {reservation.reservation_time:%H:%M}"
    message = (
        f"Hi {reservation.name}, your {restaurant_name} reservation for "
        f"{reservation.party_size} on {when} has been cancelled"
    )
    if closure is not None:
        message += f" because of {closure.closure_name}"
        if closure.closure_reason:
            message += f" ({closure.closure_reason})"
    return message + ". We apologise for the inconvenience."


class TwilioSmsNotifier:
    """Cancellation notices by SMS through the Twilio REST API."""

    def __init__(self, client: Client, from_number: str, restaurant_name: str) -> None:
        self._client = client
        self._from_number = from_number
        self._restaurant_name = restaurant_name

    async def send_cancellation(self, reservation: Reservation, closure: Closure | None = None) -> None:
        if not reservation.phone:
            raise NotificationError(f"Reservation {reservation.id} has no phone number")

        body = cancellation_message(reservation, closure, self._restaurant_name)
        # the Twilio client is blocking
        message = await asyncio.to_thread(
            self._client.messages.create,
            to=reservation.phone,
            from_=self._from_number,
            body=body,
        )
        logger.info("Cancellation SMS %s queued for reservation %s", message.sid, reservation.id)


class LogNotifier:
    """Records the notice in the log when no delivery channel is configured."""

    def __init__(self, restaurant_name: str) -> None:
        self._restaurant_name = restaurant_name

    async def send_cancellation(self, reservation: Reservation, closure: Closure | None = None) -> None:
        logger.info(
            "Cancellation notice for %s <%s>: %s",
            reservation.name,
            reservation.email,
            cancellation_message(reservation, closure, self._restaurant_name),
        )


@lru_cache
def get_notifier() -> Notifier:
    if settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_FROM_NUMBER:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        return TwilioSmsNotifier(client, settings.TWILIO_FROM_NUMBER, settings.RESTAURANT_NAME)
    return LogNotifier(settings.RESTAURANT_NAME)
