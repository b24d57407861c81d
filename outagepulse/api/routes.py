"""Flask routes for OutagePulse API."""

from flask import Blueprint, jsonify, current_app

from ..cycle import CycleRunner
from ..errors import LedgerError
from ..utils.decorators import require_api_key

# Create API blueprint
api_v1 = Blueprint('api_v1', __name__, url_prefix='/api/v1')

RUNNER_EXTENSION = 'outagepulse_runner'


def _get_runner() -> CycleRunner:
    """Get the cycle runner attached to the current app."""
    return current_app.extensions[RUNNER_EXTENSION]


@api_v1.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    runner = _get_runner()
    checks = {
        'ledger': 'ok',
        'config': 'ok',
        'cycle_in_progress': runner.in_progress,
    }

    try:
        runner.ledger.peek()
    except LedgerError as e:
        checks['ledger'] = f'error: {str(e)}'

    if runner.config.validate():
        checks['config'] = 'not_configured'

    all_healthy = checks['ledger'] == 'ok' and checks['config'] == 'ok'

    return jsonify({
        'success': True,
        'data': {
            'status': 'healthy' if all_healthy else 'degraded',
            'checks': checks
        }
    }), 200


@api_v1.route('/notification', methods=['GET'])
@require_api_key
def get_notification():
    """Get the stored notification record without purging it."""
    ledger = _get_runner().ledger
    record = ledger.peek()

    return jsonify({
        'success': True,
        'data': {
            'record': record.to_dict() if record else None,
            'posted_at': record.posted_at.isoformat() if record else None,
            'stale': ledger.is_stale(record) if record else False,
        }
    }), 200


@api_v1.route('/cycle', methods=['POST'])
@require_api_key
def run_cycle():
    """Run one poll cycle now."""
    # OutagePulseError subclasses are mapped by register_error_handlers
    result = _get_runner().run_once()

    return jsonify({
        'success': True,
        'data': result.to_dict()
    }), 200
