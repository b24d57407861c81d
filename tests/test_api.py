"""Tests for OutagePulse API routes."""

import dataclasses
import json

import pytest

from outagepulse.app import create_app
from outagepulse.config import APIConfig
from outagepulse.cycle import CycleRunner
from outagepulse.errors import CycleInProgressError, DeliveryError
from outagepulse.ledger.models import NotificationRecord
from outagepulse.notifier.coordinator import DeliveryCoordinator

from conftest import FakeProvider, NOW, KYIV, payload, today_at, yesterday_at


AUTH = {'Authorization': 'Bearer test_key_12345'}
OUTAGE = payload(sub_type='Планове', start_date='10:00', end_date='14:00')


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    monkeypatch.delenv('OUTAGEPULSE_API_KEY', raising=False)


def build_client(config, ledger, transport, *payloads):
    runner = CycleRunner(
        config=config,
        provider=FakeProvider(*payloads),
        ledger=ledger,
        coordinator=DeliveryCoordinator(ledger, transport, config.telegram, tz=KYIV),
        clock=lambda tz=None: NOW,
    )
    app = create_app({'TESTING': True, 'RATELIMIT_ENABLED': False}, runner=runner)
    return app.test_client(), runner


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_root_health(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport)

        response = client.get('/health')

        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'healthy'

    def test_api_health_reports_checks(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport)

        response = client.get('/api/v1/health')

        data = json.loads(response.data)['data']
        assert data['status'] == 'healthy'
        assert data['checks']['ledger'] == 'ok'
        assert data['checks']['cycle_in_progress'] is False

    def test_api_health_degraded_on_corrupt_ledger(self, config, ledger, transport):
        ledger.storage_dir.mkdir(parents=True)
        ledger.state_file.write_text('garbage')
        client, _ = build_client(config, ledger, transport)

        data = json.loads(client.get('/api/v1/health').data)['data']

        assert data['status'] == 'degraded'
        assert data['checks']['ledger'].startswith('error:')


class TestAPIAuthentication:
    """Test API authentication."""

    def test_missing_auth_header(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport)

        response = client.get('/api/v1/notification')

        assert response.status_code == 401
        assert json.loads(response.data)['error']['code'] == 'MISSING_AUTH'

    def test_invalid_api_key(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport)

        response = client.post('/api/v1/cycle', headers={'Authorization': 'Bearer nope'})

        assert response.status_code == 403
        assert json.loads(response.data)['error']['code'] == 'INVALID_KEY'

    def test_key_comes_from_runtime_config(self, config, ledger, transport, monkeypatch):
        monkeypatch.setenv('OUTAGEPULSE_API_KEY', 'env_key')
        client, _ = build_client(config, ledger, transport)

        assert client.get('/api/v1/notification', headers=AUTH).status_code == 200
        response = client.get('/api/v1/notification', headers={'Authorization': 'Bearer env_key'})
        assert response.status_code == 403

    def test_unconfigured_key(self, config, ledger, transport):
        config = dataclasses.replace(config, api=APIConfig())
        client, _ = build_client(config, ledger, transport)

        response = client.get('/api/v1/notification', headers=AUTH)

        assert response.status_code == 500
        assert json.loads(response.data)['error']['code'] == 'CONFIG_ERROR'


class TestNotificationEndpoint:
    """Test GET /api/v1/notification."""

    def test_no_record(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport)

        data = json.loads(client.get('/api/v1/notification', headers=AUTH).data)

        assert data['success'] is True
        assert data['data']['record'] is None

    def test_existing_record(self, config, ledger, transport):
        ledger.save(NotificationRecord(message_id=42, date=today_at(9)))
        client, _ = build_client(config, ledger, transport)

        data = json.loads(client.get('/api/v1/notification', headers=AUTH).data)

        assert data['data']['record'] == {'message_id': 42, 'date': today_at(9)}
        assert data['data']['stale'] is False

    def test_stale_record_is_reported_not_purged(self, config, ledger, transport):
        ledger.save(NotificationRecord(message_id=42, date=yesterday_at(20)))
        client, _ = build_client(config, ledger, transport)

        data = json.loads(client.get('/api/v1/notification', headers=AUTH).data)['data']

        assert data['record'] == {'message_id': 42, 'date': yesterday_at(20)}
        assert data['stale'] is True
        assert ledger.state_file.exists()


class TestCycleEndpoint:
    """Test POST /api/v1/cycle."""

    def test_cycle_creates_message(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport, OUTAGE)

        response = client.post('/api/v1/cycle', headers=AUTH)

        assert response.status_code == 200
        data = json.loads(response.data)['data']
        assert data['outage_active'] is True
        assert data['action'] == 'create'
        assert data['outcome'] == 'created'
        assert len(transport.calls) == 1

    def test_cycle_without_outage(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport, payload())

        data = json.loads(client.post('/api/v1/cycle', headers=AUTH).data)['data']

        assert data['action'] == 'none'
        assert transport.calls == []

    def test_fetch_error_maps_to_502(self, config, ledger, transport):
        client, _ = build_client(config, ledger, transport, {'nothing': True})

        response = client.post('/api/v1/cycle', headers=AUTH)

        assert response.status_code == 502
        assert json.loads(response.data)['error']['code'] == 'FETCH_ERROR'

    def test_delivery_error_maps_to_502(self, config, ledger, transport):
        transport.results = [DeliveryError('down'), DeliveryError('down')]
        client, _ = build_client(config, ledger, transport, OUTAGE)

        response = client.post('/api/v1/cycle', headers=AUTH)

        assert response.status_code == 502
        assert json.loads(response.data)['error']['code'] == 'DELIVERY_ERROR'

    def test_cycle_in_progress_maps_to_409(self, config, ledger, transport, monkeypatch):
        client, runner = build_client(config, ledger, transport, OUTAGE)

        def busy():
            raise CycleInProgressError('A poll cycle is already running')

        monkeypatch.setattr(runner, 'run_once', busy)

        response = client.post('/api/v1/cycle', headers=AUTH)

        assert response.status_code == 409
        assert json.loads(response.data)['error']['code'] == 'CYCLE_IN_PROGRESS'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
