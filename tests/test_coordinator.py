"""Tests for DeliveryCoordinator purge-and-retry behavior."""

import pytest

from outagepulse.config import TelegramConfig
from outagepulse.errors import ConfigError, DeliveryError, MessageNotModifiedError
from outagepulse.ledger.models import NotificationRecord
from outagepulse.notifier.coordinator import DeliveryCoordinator, OutcomeKind
from outagepulse.notifier.state_machine import Action, ActionKind, decide
from outagepulse.provider.models import OutageState
from outagepulse.telegram.models import SentMessage

from conftest import FakeTransport, NOW, KYIV, today_at


ACTIVE = OutageState(active=True, reason='Аварійне', start_time='09:00', end_time='18:00')


@pytest.fixture
def coordinator(ledger, transport, telegram_config):
    return DeliveryCoordinator(ledger, transport, telegram_config, tz=KYIV)


class TestDeliveryCoordinator:
    """Test DeliveryCoordinator class."""

    def test_none_touches_nothing(self, coordinator, ledger, transport):
        outcome = coordinator.deliver(Action.none(), OutageState(active=False))

        assert outcome.kind is OutcomeKind.NONE
        assert transport.calls == []
        assert not ledger.storage_dir.exists()

    def test_none_does_not_require_config(self, ledger, transport):
        coordinator = DeliveryCoordinator(ledger, transport, TelegramConfig())

        outcome = coordinator.deliver(Action.none(), OutageState(active=False))

        assert outcome.kind is OutcomeKind.NONE

    def test_create_sends_and_saves(self, coordinator, ledger, transport):
        transport.results = [SentMessage(message_id=42, date=today_at(11))]
        action = decide(ACTIVE, None, now=NOW, tz=KYIV)

        outcome = coordinator.deliver(action, ACTIVE, now=NOW)

        assert outcome.kind is OutcomeKind.CREATED
        assert outcome.attempts == 1
        assert transport.calls == [('send', None, action.message.text)]
        assert ledger.load() == NotificationRecord(message_id=42, date=today_at(11))

    def test_update_edits_by_message_id(self, coordinator, ledger, transport):
        ledger.save(NotificationRecord(message_id=42, date=today_at(8)))
        action = decide(ACTIVE, ledger.load(), now=NOW, tz=KYIV)

        outcome = coordinator.deliver(action, ACTIVE, now=NOW)

        assert outcome.kind is OutcomeKind.UPDATED
        assert transport.calls[0][:2] == ('edit', 42)
        assert ledger.load().message_id == 42

    def test_failed_update_purges_and_recreates(
        self, coordinator, ledger, transport, delivery_failure
    ):
        ledger.save(NotificationRecord(message_id=42, date=today_at(8)))
        transport.results = [delivery_failure, SentMessage(message_id=77, date=today_at(12))]
        action = decide(ACTIVE, ledger.load(), now=NOW, tz=KYIV)

        outcome = coordinator.deliver(action, ACTIVE, now=NOW)

        assert [call[0] for call in transport.calls] == ['edit', 'send']
        assert outcome.kind is OutcomeKind.CREATED
        assert outcome.attempts == 2
        assert ledger.load() == NotificationRecord(message_id=77, date=today_at(12))

    def test_failed_retry_propagates_and_saves_nothing(
        self, coordinator, ledger, transport, delivery_failure
    ):
        ledger.save(NotificationRecord(message_id=42, date=today_at(8)))
        transport.results = [delivery_failure, DeliveryError('sendMessage failed: HTTP 502')]
        action = decide(ACTIVE, ledger.load(), now=NOW, tz=KYIV)

        with pytest.raises(DeliveryError, match='sendMessage'):
            coordinator.deliver(action, ACTIVE, now=NOW)

        assert [call[0] for call in transport.calls] == ['edit', 'send']
        assert ledger.load() is None
        assert not ledger.storage_dir.exists()

    def test_failed_create_retries_once(self, coordinator, ledger, transport):
        transport.results = [DeliveryError('timeout'), DeliveryError('timeout again'),
                             SentMessage(message_id=1, date=today_at(12))]

        with pytest.raises(DeliveryError):
            coordinator.deliver(decide(ACTIVE, None, now=NOW), ACTIVE, now=NOW)

        assert len(transport.calls) == 2

    def test_not_modified_keeps_ledger(self, coordinator, ledger, transport):
        record = NotificationRecord(message_id=42, date=today_at(8))
        ledger.save(record)
        transport.results = [MessageNotModifiedError('Bad Request: message is not modified')]

        outcome = coordinator.deliver(decide(ACTIVE, record, now=NOW), ACTIVE, now=NOW)

        assert outcome.kind is OutcomeKind.UNCHANGED
        assert outcome.message_id == 42
        assert len(transport.calls) == 1
        assert ledger.load() == record

    @pytest.mark.parametrize('telegram_config', [
        TelegramConfig(bot_token='', chat_id='@outages'),
        TelegramConfig(bot_token='123:abc', chat_id=''),
    ])
    def test_missing_config_fails_before_transport(self, ledger, telegram_config):
        transport = FakeTransport()
        coordinator = DeliveryCoordinator(ledger, transport, telegram_config)

        with pytest.raises(ConfigError):
            coordinator.deliver(decide(ACTIVE, None, now=NOW), ACTIVE, now=NOW)

        assert transport.calls == []

    def test_retry_action_is_rederived(self, coordinator, ledger, transport, delivery_failure):
        ledger.save(NotificationRecord(message_id=42, date=today_at(8)))
        transport.results = [delivery_failure]
        action = decide(ACTIVE, ledger.load(), now=NOW, tz=KYIV)
        assert action.kind is ActionKind.UPDATE

        coordinator.deliver(action, ACTIVE, now=NOW)

        retried_text = transport.calls[1][2]
        assert retried_text == decide(ACTIVE, None, now=NOW, tz=KYIV).message.text


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
