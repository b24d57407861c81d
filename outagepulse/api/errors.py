"""Error handlers and response formatters for OutagePulse API."""

from flask import jsonify
from typing import Dict, Any

from ..errors import (
    OutagePulseError,
    FetchError,
    ConfigError,
    DeliveryError,
    LedgerError,
    CycleInProgressError,
)


def error_response(code: str, message: str, details: Dict[str, Any] = None, status_code: int = None) -> tuple:
    """Create standard error response.

    Args:
        code: Error code (e.g., 'FETCH_ERROR')
        message: Human-readable error message
        details: Optional additional details
        status_code: HTTP status code (uses ERROR_CODES mapping if not provided)

    Returns:
        Tuple of (json response, status code)
    """
    if status_code is None and code in ERROR_CODES:
        status_code = ERROR_CODES[code].get('status', 400)
    elif status_code is None:
        status_code = 400

    response = {
        'success': False,
        'error': {
            'code': code,
            'message': message
        }
    }

    if details:
        response['error']['details'] = details

    return jsonify(response), status_code


# Error code definitions
ERROR_CODES = {
    'MISSING_AUTH': {
        'message': 'Missing or invalid Authorization header',
        'status': 401,
    },
    'INVALID_KEY': {
        'message': 'Invalid API key',
        'status': 403,
    },
    'NOT_FOUND': {
        'message': 'Resource not found',
        'status': 404,
    },
    'CYCLE_IN_PROGRESS': {
        'message': 'A poll cycle is already running',
        'status': 409,
    },
    'RATE_LIMITED': {
        'message': 'Rate limit exceeded',
        'status': 429,
    },
    'CONFIG_ERROR': {
        'message': 'Required configuration is missing',
        'status': 500,
    },
    'LEDGER_ERROR': {
        'message': 'Ledger file read/write error',
        'status': 500,
    },
    'INTERNAL_ERROR': {
        'message': 'Internal server error',
        'status': 500,
    },
    'FETCH_ERROR': {
        'message': 'Provider status could not be fetched',
        'status': 502,
    },
    'DELIVERY_ERROR': {
        'message': 'Telegram API call failed',
        'status': 502,
    },
}


# Most specific first
EXCEPTION_CODES = (
    (CycleInProgressError, 'CYCLE_IN_PROGRESS'),
    (FetchError, 'FETCH_ERROR'),
    (ConfigError, 'CONFIG_ERROR'),
    (DeliveryError, 'DELIVERY_ERROR'),
    (LedgerError, 'LEDGER_ERROR'),
)


def error_code_for(error: OutagePulseError) -> str:
    """Map a domain exception to an API error code."""
    for exc_type, code in EXCEPTION_CODES:
        if isinstance(error, exc_type):
            return code
    return 'INTERNAL_ERROR'


def register_error_handlers(app):
    """Register custom error handlers with Flask app.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(OutagePulseError)
    def outagepulse_error(error):
        return error_response(error_code_for(error), str(error))

    @app.errorhandler(404)
    def not_found(error):
        return error_response(
            'NOT_FOUND',
            'Resource not found'
        )

    @app.errorhandler(429)
    def rate_limited(error):
        return error_response(
            'RATE_LIMITED',
            'Rate limit exceeded'
        )

    @app.errorhandler(500)
    def internal_error(error):
        return error_response(
            'INTERNAL_ERROR',
            'Internal server error'
        )
