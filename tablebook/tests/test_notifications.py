from types import SimpleNamespace

import pytest

from tablebook.app.core.config import settings
from tablebook.app.domain.errors import NotificationError
from tablebook.app.services import notifications
from tablebook.app.services.notifications import (
    LogNotifier,
    TwilioSmsNotifier,
    cancellation_message,
    get_notifier,
)
from tablebook.tests.factories import make_closure, make_reservation


class FakeMessages:
    def __init__(self):
        self.created = []

    def create(self, **kwargs):
        self.created.append(kwargs)
        return SimpleNamespace(sid=f"SM{len(self.created)}")


def _fake_client():
    return SimpleNamespace(messages=FakeMessages())


def test_message_names_the_closure_and_reason():
    reservation = make_reservation("18:00", party_size=4)
    closure = make_closure("17:00", "19:00", name="Private Event", reason="Wedding reception")

    message = cancellation_message(reservation, closure, "Float 30")

    assert message == (
        "Hi Test Guest, your Float 30 reservation for 4 on Sunday, June 01 at 18:00 "
        "has been cancelled because of Private Event (Wedding reception). "
        "We apologise for the inconvenience."
    )


def test_message_without_closure():
    message = cancellation_message(make_reservation("12:30", party_size=2), None, "Float 30")

    assert message.endswith(
        "for 2 on Sunday, June 01 at 12:30 has been cancelled. We apologise for the inconvenience."
    )


@pytest.mark.asyncio
async def test_sms_sent_to_guest_phone():
    client = _fake_client()
    notifier = TwilioSmsNotifier(client, "+15555550000", "Float 30")

    await notifier.send_cancellation(make_reservation(phone="+15555550123"), make_closure())

    [sent] = client.messages.created
    assert sent["to"] == "+15555550123"
    assert sent["from_"] == "+15555550000"
    assert "because of Private Event" in sent["body"]


@pytest.mark.asyncio
async def test_sms_requires_a_phone_number():
    client = _fake_client()
    notifier = TwilioSmsNotifier(client, "+15555550000", "Float 30")

    with pytest.raises(NotificationError):
        await notifier.send_cancellation(make_reservation(phone=None))
    assert client.messages.created == []


@pytest.mark.asyncio
async def test_log_notifier_writes_the_message(caplog):
    reservation = make_reservation()

    with caplog.at_level("INFO", logger=notifications.__name__):
        await LogNotifier("Float 30").send_cancellation(reservation, make_closure())

    assert "guest@example.com" in caplog.text
    assert "because of Private Event" in caplog.text


def test_notifier_falls_back_to_log_without_twilio(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", None)
    get_notifier.cache_clear()
    try:
        assert isinstance(get_notifier(), LogNotifier)
    finally:
        get_notifier.cache_clear()


def test_notifier_uses_twilio_when_configured(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC" + "0" * 32)
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")
    monkeypatch.setattr(settings, "TWILIO_FROM_NUMBER", "+15555550000")
    get_notifier.cache_clear()
    try:
        assert isinstance(get_notifier(), TwilioSmsNotifier)
    finally:
        get_notifier.cache_clear()
