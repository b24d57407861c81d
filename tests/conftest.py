"""Shared fixtures for OutagePulse tests."""

import sys
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from outagepulse.config import (
    Config,
    TelegramConfig,
    AddressConfig,
    ProviderConfig,
    LedgerConfig,
    LoggingConfig,
    APIConfig,
)
from outagepulse.errors import DeliveryError
from outagepulse.ledger.manager import NotificationLedger
from outagepulse.telegram.models import SentMessage


KYIV = ZoneInfo('Europe/Kyiv')
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=KYIV)
HOUSE = '12'


def today_at(hour: int) -> int:
    """Unix timestamp for today's local date at the given hour."""
    return int(datetime(2026, 10, 19, hour, 0).timestamp())


def yesterday_at(hour: int) -> int:
    return int(datetime(2026, 10, 18, hour, 0).timestamp())


def local_clock():
    """Naive local 'now' matching NOW's calendar day."""
    return datetime(2026, 10, 19, 12, 0)


def payload(sub_type='', start_date='', end_date='', type_='', house=HOUSE,
            update_timestamp='11:45 19.10.2026'):
    return {
        'data': {
            house: {
                'sub_type': sub_type,
                'start_date': start_date,
                'end_date': end_date,
                'type': type_,
                'sub_type_reason': [],
            }
        },
        'updateTimestamp': update_timestamp,
    }


class FakeTransport:
    """Records Bot API calls and replays scripted results."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls = []
        self._next_id = 100

    def _result(self, default_id):
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return SentMessage(message_id=default_id, date=today_at(10))

    def send_message(self, text, parse_mode='HTML'):
        self.calls.append(('send', None, text))
        self._next_id += 1
        return self._result(self._next_id)

    def edit_message_text(self, message_id, text, parse_mode='HTML'):
        self.calls.append(('edit', message_id, text))
        return self._result(message_id)


class FakeProvider:
    def __init__(self, *payloads):
        self.payloads = list(payloads)

    def fetch_outage_status(self):
        result = self.payloads.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def telegram_config():
    return TelegramConfig(bot_token='123:abc', chat_id='@outages')


@pytest.fixture
def config(tmp_path, telegram_config):
    return Config(
        telegram=telegram_config,
        address=AddressConfig(city='Київ', street='вул. Хрещатик', house=HOUSE),
        provider=ProviderConfig(),
        ledger=LedgerConfig(state_dir=tmp_path / 'artifacts'),
        logging=LoggingConfig(),
        api=APIConfig(api_key='test_key_12345'),
    )


@pytest.fixture
def ledger(config):
    return NotificationLedger(config.ledger.state_file, clock=local_clock)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def delivery_failure():
    return DeliveryError('editMessageText failed: Bad Request: message to edit not found')
